"""
Unit tests for the plain-text topology format.

Tests:
- Exact export text
- Import of nodes, links and arrow variants
- Skipped lines and strict mode
- Fatal header and node reference errors
"""

import pytest

from models.network import Topology, Node, LinkMode
from models.errors import FormatError, UnknownNodeReferenceError, TopologyIOError
from services.plain_serializer import PlainTopologySerializer
from conftest import link_set, positions, MovingNode


SIMPLE_TEXT = "cR 10.0\nsR 5.0\nA [x: 0.0, y: 0.0]\nB [x: 1.0, y: 2.0]\nA <--> B\n"


@pytest.fixture
def serializer():
    return PlainTopologySerializer()


class TestPlainExport:
    """Tests for export_topology."""

    def test_simple_topology(self, serializer, simple_topology):
        assert serializer.export_topology(simple_topology) == SIMPLE_TEXT

    def test_empty_topology(self, serializer, empty_topology):
        assert serializer.export_topology(empty_topology) == "cR 100.0\nsR 0.0\n"

    def test_directed_link(self, serializer, simple_topology):
        simple_topology.connect("B", "A", directed=True)
        assert serializer.export_topology(simple_topology).endswith("A <--> B\nB --> A\n")

    def test_wireless_links_excluded(self, serializer, mixed_topology):
        text = serializer.export_topology(mixed_topology)
        assert "c <--> d" not in text
        assert "d <--> c" not in text
        assert "a <--> b" in text
        assert "b --> c" in text
        assert "c --> b" in text

    def test_z_not_written(self, serializer, mixed_topology):
        text = serializer.export_topology(mixed_topology)
        assert "a [x: 10.0, y: 20.0]\n" in text
        assert "z:" not in text

    @pytest.mark.parametrize("node_id", ["node 1", "tab\tid", "line\nbreak", ""])
    def test_unwritable_id_rejected(self, serializer, empty_topology, node_id):
        """Test that ids the line grammar cannot carry fail at export."""
        empty_topology.nodes[node_id] = Node(id=node_id)
        empty_topology.add_node(Node(id="B"))
        with pytest.raises(FormatError):
            serializer.export_topology(empty_topology)

    def test_export_does_not_modify(self, serializer, simple_topology):
        before = positions(simple_topology)
        serializer.export_topology(simple_topology)
        assert positions(simple_topology) == before
        assert len(simple_topology.links) == 1


class TestPlainImport:
    """Tests for import_topology."""

    def test_simple_text(self, serializer, empty_topology):
        report = serializer.import_topology(empty_topology, SIMPLE_TEXT)

        assert report.ok
        assert report.nodes_imported == 2
        assert report.links_imported == 1
        assert empty_topology.communication_range == 10.0
        assert empty_topology.sensing_range == 5.0
        assert positions(empty_topology) == {"A": (0.0, 0.0, 0.0), "B": (1.0, 2.0, 0.0)}
        assert link_set(empty_topology) == {("A", "B", False)}

    def test_links_are_wired(self, serializer, empty_topology):
        serializer.import_topology(empty_topology, SIMPLE_TEXT)
        assert all(link.mode == LinkMode.WIRED for link in empty_topology.links)

    def test_round_trip(self, serializer, simple_topology):
        text = serializer.export_topology(simple_topology)
        restored = Topology()
        serializer.import_topology(restored, text)
        assert serializer.export_topology(restored) == text
        assert link_set(restored) == link_set(simple_topology)

    def test_z_coordinate(self, serializer, empty_topology):
        text = "cR 1.0\nsR 1.0\nA [x: 1.0, y: 2.0, z: 3.0]\n"
        serializer.import_topology(empty_topology, text)
        assert empty_topology.get_node("A").location.to_tuple() == (1.0, 2.0, 3.0)

    @pytest.mark.parametrize("arrow,directed", [
        ("-->", True),
        ("->", True),
        ("- >", True),
        ("<-->", False),
        ("<->", False),
    ])
    def test_arrow_variants(self, serializer, empty_topology, arrow, directed):
        text = f"cR 1.0\nsR 1.0\nA [x: 0, y: 0]\nB [x: 1, y: 1]\nA {arrow} B\n"
        serializer.import_topology(empty_topology, text)
        link = empty_topology.links[0]
        assert link.is_directed == directed
        assert (link.source.id, link.destination.id) == ("A", "B")

    def test_integer_coordinates(self, serializer, empty_topology):
        serializer.import_topology(empty_topology, "cR 10\nsR 5\nA [x: 3, y: 4]\n")
        assert empty_topology.communication_range == 10.0
        assert empty_topology.get_node("A").location.to_tuple() == (3.0, 4.0, 0.0)

    def test_blank_lines_and_crlf(self, serializer, empty_topology):
        text = "cR 10.0\r\nsR 5.0\r\n\r\nA [x: 0.0, y: 0.0]\r\n\r\nB [x: 1.0, y: 2.0]\r\nA <--> B\r\n"
        report = serializer.import_topology(empty_topology, text)
        assert report.ok
        assert len(empty_topology.nodes) == 2
        assert len(empty_topology.links) == 1

    def test_nodes_use_default_model(self, serializer, empty_topology):
        empty_topology.registry.set_default(MovingNode)
        serializer.import_topology(empty_topology, SIMPLE_TEXT)
        assert all(type(node) is MovingNode for node in empty_topology.nodes.values())

    def test_import_replaces_content(self, serializer, mixed_topology):
        serializer.import_topology(mixed_topology, SIMPLE_TEXT)
        assert set(mixed_topology.nodes) == {"A", "B"}
        assert len(mixed_topology.links) == 1

    def test_duplicate_link_line_collapses(self, serializer, empty_topology):
        report = serializer.import_topology(empty_topology, SIMPLE_TEXT + "B <--> A\n")
        assert report.links_imported == 1

    def test_both_directions_kept(self, serializer, empty_topology):
        text = "cR 1.0\nsR 1.0\nA [x: 0, y: 0]\nB [x: 1, y: 1]\nA --> B\nB --> A\n"
        serializer.import_topology(empty_topology, text)
        assert link_set(empty_topology) == {("A", "B", True), ("B", "A", True)}


class TestPlainDiagnostics:
    """Tests for skipped lines and errors."""

    def test_malformed_node_line_skipped(self, serializer, empty_topology):
        text = "cR 10.0\nsR 5.0\nA [x: 0.0, y: 0.0]\nB [x: oops, y: 2.0]\nC [x: 1.0, y: 1.0]\n"
        report = serializer.import_topology(empty_topology, text)

        assert set(empty_topology.nodes) == {"A", "C"}
        assert len(report.diagnostics) == 1
        assert report.diagnostics[0].line == 4
        assert report.summary() == "2 nodes, 0 links, 1 skipped"

    def test_incomplete_node_line_skipped(self, serializer, empty_topology):
        text = "cR 10.0\nsR 5.0\nA [x: 0.0]\n"
        report = serializer.import_topology(empty_topology, text)
        assert empty_topology.nodes == {}
        assert report.diagnostics[0].line == 3
        assert "malformed node line" in str(report.diagnostics[0])

    def test_unrecognized_line_skipped(self, serializer, empty_topology):
        report = serializer.import_topology(empty_topology, SIMPLE_TEXT + "hello world again\n")
        assert len(report.diagnostics) == 1
        assert report.diagnostics[0].text == "hello world again"
        assert len(empty_topology.nodes) == 2

    def test_duplicate_node_skipped(self, serializer, empty_topology):
        text = "cR 1.0\nsR 1.0\nA [x: 0, y: 0]\nA [x: 5, y: 5]\n"
        report = serializer.import_topology(empty_topology, text)
        assert empty_topology.get_node("A").x == 0.0
        assert report.diagnostics[0].line == 4

    def test_strict_mode_raises(self, empty_topology):
        text = "cR 10.0\nsR 5.0\nB [x: oops, y: 2.0]\n"
        with pytest.raises(FormatError) as exc_info:
            PlainTopologySerializer(strict=True).import_topology(empty_topology, text)
        assert exc_info.value.line == 3

    def test_unknown_node_reference(self, serializer, empty_topology):
        text = "cR 10.0\nsR 5.0\nA [x: 0.0, y: 0.0]\nA <--> Z\n"
        with pytest.raises(UnknownNodeReferenceError) as exc_info:
            serializer.import_topology(empty_topology, text)
        assert exc_info.value.node_id == "Z"
        assert exc_info.value.line == 4

    def test_link_to_skipped_node_skipped(self, serializer, empty_topology):
        """Test that a bad node line does not turn its links into fatal errors."""
        text = (
            "cR 10.0\nsR 5.0\nA [x: bad, y: 0.0]\nB [x: 1.0, y: 2.0]\n"
            "C [x: 3.0, y: 3.0]\nA <--> B\nB --> C\n"
        )
        report = serializer.import_topology(empty_topology, text)

        assert set(empty_topology.nodes) == {"B", "C"}
        assert link_set(empty_topology) == {("B", "C", True)}
        assert [d.line for d in report.diagnostics] == [3, 6]
        assert "skipped node 'A'" in str(report.diagnostics[1])

    def test_link_to_skipped_node_strict(self, empty_topology):
        text = "cR 10.0\nsR 5.0\nA [x: bad, y: 0.0]\nB [x: 1.0, y: 2.0]\nA <--> B\n"
        with pytest.raises(FormatError) as exc_info:
            PlainTopologySerializer(strict=True).import_topology(empty_topology, text)
        assert exc_info.value.line == 3

    def test_link_to_duplicate_uses_first_node(self, serializer, empty_topology):
        text = "cR 1.0\nsR 1.0\nA [x: 0, y: 0]\nA [x: 5, y: 5]\nB [x: 1, y: 1]\nA <--> B\n"
        report = serializer.import_topology(empty_topology, text)
        assert link_set(empty_topology) == {("A", "B", False)}
        assert len(report.diagnostics) == 1

    def test_link_before_node_is_unknown(self, serializer, empty_topology):
        text = "cR 10.0\nsR 5.0\nA [x: 0.0, y: 0.0]\nA <--> B\nB [x: 1.0, y: 2.0]\n"
        with pytest.raises(UnknownNodeReferenceError):
            serializer.import_topology(empty_topology, text)

    @pytest.mark.parametrize("text,line", [
        ("", 1),
        ("cR 10.0\n", 2),
        ("sR 5.0\ncR 10.0\n", 1),
        ("cR ten\nsR 5.0\n", 1),
        ("cR 10.0\nsR\n", 2),
    ])
    def test_bad_header(self, serializer, empty_topology, text, line):
        with pytest.raises(FormatError) as exc_info:
            serializer.import_topology(empty_topology, text)
        assert exc_info.value.line == line

    def test_errors_share_base(self, serializer, empty_topology):
        with pytest.raises(TopologyIOError):
            serializer.import_topology(empty_topology, "nothing here")
