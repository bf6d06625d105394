"""
Plain-text topology format.

A compact line-oriented format: two header lines with the communication
and sensing ranges, then one line per node and one line per wired link.

    cR 10.0
    sR 5.0
    A [x: 0.0, y: 0.0]
    B [x: 1.0, y: 2.0, z: 3.0]
    A <--> B
    B --> A

Only x and y are written on export. A z coordinate is accepted on import.
Node ids cannot contain whitespace; export refuses them.
"<-->" marks an undirected link and "-->" a directed one; on import any
dash arrow ending in ">" is accepted, and a "<" in it means undirected.
"""

import logging
import re
from typing import Optional

from models.errors import DuplicateNodeError, FormatError, UnknownNodeReferenceError
from models.network import Link, LinkMode, LinkType, Node, Topology
from .topology_serializer import ImportReport, TopologySerializer
from .xml_keys import FieldType


logger = logging.getLogger(__name__)


COMMUNICATION_RANGE_TAG = "cR"
SENSING_RANGE_TAG = "sR"
DIRECTED_ARROW = "-->"
UNDIRECTED_ARROW = "<-->"

HEADER_PATTERN = re.compile(r"^(?P<tag>\S+)\s+(?P<value>\S+)\s*$")
NODE_PATTERN = re.compile(
    r"^(?P<id>\S+)\s+\[x:\s*(?P<x>[^,\]]*),\s*y:\s*(?P<y>[^,\]]*)"
    r"(?:,\s*z:\s*(?P<z>[^,\]]*))?\]\s*$"
)
LINK_PATTERN = re.compile(r"^(?P<src>\S+)\s+(?P<arrow><?-[-<]?-?\s?>)\s+(?P<dst>\S+)\s*$")
ID_PATTERN = re.compile(r"\S+")


class PlainTopologySerializer(TopologySerializer):
    """
    Reads and writes the plain-text format.

    Malformed node or link lines are skipped and reported on the
    ImportReport (or raised when strict), and so are links to a skipped
    node. A malformed header and a link to an undeclared node abort the
    import.
    """

    format_name = "plain"
    extensions = (".txt", ".tp", ".topo")

    def import_topology(self, topology: Topology, data: str) -> ImportReport:
        """
        Replace the content of topology with the nodes and links in data.

        Args:
            topology: Target topology, cleared first
            data: Plain-text document

        Returns:
            ImportReport with counts and skipped lines

        Raises:
            FormatError: if the header is missing or malformed
            UnknownNodeReferenceError: if a link names an undeclared node
        """
        topology.clear()
        report = ImportReport(self.format_name)
        lines = data.splitlines()

        topology.communication_range = self._parse_header(lines, 0, COMMUNICATION_RANGE_TAG)
        topology.sensing_range = self._parse_header(lines, 1, SENSING_RANGE_TAG)

        node_table: dict[str, Node] = {}
        skipped_ids: set = set()
        for lineno, line in enumerate(lines[2:], start=3):
            if not line.strip():
                continue

            node_match = NODE_PATTERN.match(line)
            if node_match:
                node = self._parse_node(topology, node_match, lineno, line, report)
                if node is not None:
                    node_table[node.id] = node
                elif node_match.group("id") not in node_table:
                    skipped_ids.add(node_match.group("id"))
                continue

            link_match = LINK_PATTERN.match(line)
            if link_match:
                self._parse_link(topology, link_match, node_table, skipped_ids, lineno, line, report)
                continue

            if "[" in line:
                self._skip(report, FormatError("malformed node line", line=lineno, text=line))
            else:
                self._skip(report, FormatError("unrecognized line", line=lineno, text=line))

        report.nodes_imported = len(topology.nodes)
        report.links_imported = len(topology.links)
        logger.debug("Imported plain topology: %s", report.summary())
        return report

    def _parse_header(self, lines: list[str], index: int, tag: str) -> float:
        lineno = index + 1
        if index >= len(lines):
            raise FormatError(f"missing '{tag}' header", line=lineno)
        match = HEADER_PATTERN.match(lines[index])
        if not match or match.group("tag") != tag:
            raise FormatError(f"expected '{tag} <number>' header", line=lineno, text=lines[index])
        return self._parse_number(match.group("value"), lineno, lines[index])

    def _parse_number(self, token: str, lineno: int, line: str) -> float:
        try:
            return FieldType.DOUBLE.parse(token.strip())
        except FormatError as e:
            raise FormatError(e.message, line=lineno, text=line) from None

    def _parse_node(
        self,
        topology: Topology,
        match: re.Match,
        lineno: int,
        line: str,
        report: ImportReport,
    ) -> Optional[Node]:
        try:
            x = self._parse_number(match.group("x"), lineno, line)
            y = self._parse_number(match.group("y"), lineno, line)
            z_token = match.group("z")
            z = self._parse_number(z_token, lineno, line) if z_token is not None else 0.0
        except FormatError as e:
            self._skip(report, e)
            return None

        node = topology.new_node()
        node.id = match.group("id")
        node.set_location(x, y, z)
        try:
            topology.add_node(node)
        except DuplicateNodeError as e:
            self._skip(report, FormatError(str(e), line=lineno, text=line))
            return None
        return node

    def _parse_link(
        self,
        topology: Topology,
        match: re.Match,
        node_table: dict[str, Node],
        skipped_ids: set,
        lineno: int,
        line: str,
        report: ImportReport,
    ) -> Optional[Link]:
        ends = []
        for node_id in (match.group("src"), match.group("dst")):
            node = node_table.get(node_id)
            if node is not None:
                ends.append(node)
            elif node_id in skipped_ids:
                self._skip(report, FormatError(
                    f"link to skipped node '{node_id}'", line=lineno, text=line
                ))
                return None
            else:
                raise UnknownNodeReferenceError(node_id, line=lineno)

        orientation = LinkType.UNDIRECTED if "<" in match.group("arrow") else LinkType.DIRECTED
        return topology.add_link(Link(ends[0], ends[1], orientation, LinkMode.WIRED))

    def export_topology(self, topology: Topology) -> str:
        """
        Write the header, every node (x and y only) and every wired link.

        Returns:
            The document, one newline-terminated line per entry

        Raises:
            FormatError: if a node id is empty or contains whitespace
        """
        out = [
            f"{COMMUNICATION_RANGE_TAG} {FieldType.DOUBLE.format(topology.communication_range)}",
            f"{SENSING_RANGE_TAG} {FieldType.DOUBLE.format(topology.sensing_range)}",
        ]
        for node in topology.nodes.values():
            if not ID_PATTERN.fullmatch(str(node.id)):
                raise FormatError(f"node id {node.id!r} cannot be written as plain text")
            out.append(
                f"{node.id} [x: {FieldType.DOUBLE.format(node.x)}, "
                f"y: {FieldType.DOUBLE.format(node.y)}]"
            )
        for link in topology.wired_links:
            arrow = DIRECTED_ARROW if link.is_directed else UNDIRECTED_ARROW
            out.append(f"{link.source.id} {arrow} {link.destination.id}")
        return "\n".join(out) + "\n"
