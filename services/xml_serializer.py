"""
XML topology format.

Document layout:

    <topology communication-range="50.0">
      <classes>
        <node-class id="default" class="models.network.Node"/>
        <scheduler id="default" class="mypkg.FastScheduler"/>
      </classes>
      <graph>
        <node id="A" x="0.0" y="0.0"/>
        <node id="B" x="1.0" y="2.0" z="3.0" color="ffff0000"/>
        <link directed="false" src="A" dst="B"/>
      </graph>
    </topology>

Every optional attribute is omitted when it holds its default and read
back as that default when absent. Documents wrapped in a <jbotsim> root
element are accepted on import.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Optional

from models.engine import ENGINE_SLOTS
from models.errors import DuplicateNodeError, FormatError, UnknownNodeReferenceError
from models.network import (
    Topology, Node, Link, LinkType, LinkMode,
    DEFAULT_COMMUNICATION_RANGE, DEFAULT_SENSING_RANGE, DEFAULT_WIDTH, DEFAULT_HEIGHT,
    DEFAULT_WIRELESS_ENABLED, DEFAULT_TIME_UNIT, DEFAULT_NODE_COLOR, DEFAULT_ICON,
    DEFAULT_ICON_SIZE, DEFAULT_DIRECTION, DEFAULT_LINK_WIDTH, DEFAULT_LINK_COLOR,
)
from models.registry import DEFAULT_MODEL, qualified_name
from .topology_serializer import ImportReport, TopologySerializer
from .xml_keys import Attribute, FieldType, XMLKeys


logger = logging.getLogger(__name__)


XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

# Topology element
WIRELESS_ENABLED = Attribute(XMLKeys.WIRELESS_ENABLED_ATTR, FieldType.BOOLEAN, DEFAULT_WIRELESS_ENABLED)
TIME_UNIT = Attribute(XMLKeys.TIME_UNIT_ATTR, FieldType.INTEGER, DEFAULT_TIME_UNIT)
TOPOLOGY_WIDTH = Attribute(XMLKeys.WIDTH_ATTR, FieldType.INTEGER, DEFAULT_WIDTH)
TOPOLOGY_HEIGHT = Attribute(XMLKeys.HEIGHT_ATTR, FieldType.INTEGER, DEFAULT_HEIGHT)
TOPOLOGY_SENSING_RANGE = Attribute(XMLKeys.SENSING_RANGE_ATTR, FieldType.DOUBLE, DEFAULT_SENSING_RANGE)
TOPOLOGY_COMMUNICATION_RANGE = Attribute(
    XMLKeys.COMMUNICATION_RANGE_ATTR, FieldType.DOUBLE, DEFAULT_COMMUNICATION_RANGE
)

# Shared by class entries and nodes
IDENTIFIER = Attribute(XMLKeys.IDENTIFIER_ATTR)
CLASS = Attribute(XMLKeys.CLASS_ATTR)

# Node element; range defaults are the topology's current values
NODE_COLOR = Attribute(XMLKeys.COLOR_ATTR, FieldType.COLOR, DEFAULT_NODE_COLOR)
NODE_ICON = Attribute(XMLKeys.ICON_ATTR, FieldType.STRING, DEFAULT_ICON)
NODE_SIZE = Attribute(XMLKeys.SIZE_ATTR, FieldType.INTEGER, DEFAULT_ICON_SIZE)
NODE_COMMUNICATION_RANGE = Attribute(XMLKeys.COMMUNICATION_RANGE_ATTR, FieldType.DOUBLE)
NODE_SENSING_RANGE = Attribute(XMLKeys.SENSING_RANGE_ATTR, FieldType.DOUBLE)
NODE_DIRECTION = Attribute(XMLKeys.DIRECTION_ATTR, FieldType.DOUBLE, DEFAULT_DIRECTION)
NODE_X = Attribute(XMLKeys.LOCATION_X_ATTR, FieldType.DOUBLE)
NODE_Y = Attribute(XMLKeys.LOCATION_Y_ATTR, FieldType.DOUBLE)
NODE_Z = Attribute(XMLKeys.LOCATION_Z_ATTR, FieldType.DOUBLE, 0.0)

# Link element
LINK_DIRECTED = Attribute(XMLKeys.DIRECTED_ATTR, FieldType.BOOLEAN)
LINK_SOURCE = Attribute(XMLKeys.SOURCE_ATTR)
LINK_DESTINATION = Attribute(XMLKeys.DESTINATION_ATTR)
LINK_WIDTH = Attribute(XMLKeys.WIDTH_ATTR, FieldType.INTEGER, DEFAULT_LINK_WIDTH)
LINK_COLOR = Attribute(XMLKeys.COLOR_ATTR, FieldType.COLOR, DEFAULT_LINK_COLOR)

# Engine slot elements, in document order
ENGINE_ELEMENTS = (
    (XMLKeys.MESSAGE_ENGINE, "message_engine"),
    (XMLKeys.LINK_RESOLVER, "link_resolver"),
    (XMLKeys.SCHEDULER, "scheduler"),
    (XMLKeys.CLOCKCLASS, "clock_model"),
)


class XMLTopologySerializer(TopologySerializer):
    """
    Reads and writes XML topology documents.

    Args:
        strict: Raise per-entity errors instead of collecting them
        indent: Indentation for exported documents ("" for a single line)
        xml_declaration: Prefix exported documents with an XML declaration
    """

    format_name = "xml"
    extensions = (".xml",)

    def __init__(self, strict: bool = False, indent: str = "  ", xml_declaration: bool = True):
        super().__init__(strict)
        self.indent = indent
        self.xml_declaration = xml_declaration

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_topology(self, topology: Topology) -> str:
        """Describe topology as an XML document. The topology is not modified."""
        root = self.build_topology_element(topology)
        if self.indent:
            ET.indent(root, space=self.indent)
        text = ET.tostring(root, encoding="unicode")
        if self.xml_declaration:
            text = f"{XML_DECLARATION}\n{text}"
        return text + "\n"

    def build_topology_element(self, topology: Topology) -> ET.Element:
        """
        Build the <topology> element and its subtree.

        The element is not attached to any document.
        """
        topo = XMLKeys.TOPOLOGY.create_element()

        WIRELESS_ENABLED.write(topo, topology.wireless_enabled)
        TIME_UNIT.write(topo, topology.time_unit)
        TOPOLOGY_WIDTH.write(topo, topology.width)
        TOPOLOGY_HEIGHT.write(topo, topology.height)
        TOPOLOGY_SENSING_RANGE.write(topo, topology.sensing_range)
        TOPOLOGY_COMMUNICATION_RANGE.write(topo, topology.communication_range)

        self._build_classes(topology, topo)
        self._build_graph(topology, topo)
        return topo

    def _build_classes(self, topology: Topology, parent: ET.Element):
        classes = XMLKeys.CLASSES.create_element(parent)
        for name, cls in topology.registry.items():
            self._add_model(classes, XMLKeys.NODECLASS, name, cls)
        for key, slot in ENGINE_ELEMENTS:
            if not topology.engines.is_default(slot):
                self._add_model(classes, key, DEFAULT_MODEL, topology.engines.get(slot))

    def _add_model(self, parent: ET.Element, key: XMLKeys, model_id: str, cls: type):
        element = key.create_element(parent)
        IDENTIFIER.write_always(element, model_id)
        CLASS.write_always(element, qualified_name(cls))

    def _build_graph(self, topology: Topology, parent: ET.Element):
        graph = XMLKeys.GRAPH.create_element(parent)
        for node in topology.nodes.values():
            self._add_node(topology, graph, node)
        for link in topology.wired_links:
            self._add_link(graph, link)

    def _add_node(self, topology: Topology, graph: ET.Element, node: Node):
        element = XMLKeys.NODE.create_element(graph)

        IDENTIFIER.write_always(element, node.id)
        NODE_COLOR.write(element, node.color)
        NODE_ICON.write(element, node.icon)
        NODE_SIZE.write(element, node.icon_size)
        NODE_COMMUNICATION_RANGE.write(element, node.communication_range, topology.communication_range)
        NODE_SENSING_RANGE.write(element, node.sensing_range, topology.sensing_range)
        NODE_DIRECTION.write(element, node.direction)
        NODE_X.write_always(element, node.x)
        NODE_Y.write_always(element, node.y)
        NODE_Z.write(element, node.z)
        if type(node) != topology.registry.default:
            CLASS.write_always(element, qualified_name(type(node)))

    def _add_link(self, graph: ET.Element, link: Link):
        element = XMLKeys.LINK.create_element(graph)
        LINK_DIRECTED.write_always(element, link.is_directed)
        LINK_SOURCE.write_always(element, link.source.id)
        LINK_DESTINATION.write_always(element, link.destination.id)
        LINK_WIDTH.write(element, link.width)
        LINK_COLOR.write(element, link.color)

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def import_topology(self, topology: Topology, data: str) -> ImportReport:
        """
        Replace the content of topology with the document in data.

        Args:
            topology: Target topology, cleared first
            data: XML document

        Returns:
            ImportReport with counts and skipped nodes/links

        Raises:
            FormatError: if the document is not well-formed or has no
                topology element, or a topology attribute is malformed
            MissingFieldError: if a required attribute is absent
            UnknownModelError: if a class cannot be resolved
            UnknownNodeReferenceError: if a link names an undeclared node
        """
        try:
            root = ET.fromstring(data)
        except ET.ParseError as e:
            raise FormatError(f"malformed XML document: {e}") from e

        element = self._find_topology_element(root)
        topology.clear()
        report = ImportReport(self.format_name)
        self.parse_topology_element(topology, element, report)
        logger.debug("Imported XML topology: %s", report.summary())
        return report

    def _find_topology_element(self, root: ET.Element) -> ET.Element:
        if XMLKeys.TOPOLOGY.labels_element(root):
            return root
        if XMLKeys.JBOTSIM.labels_element(root):
            logger.debug(
                "Reading wrapped document (version %s)",
                root.get(XMLKeys.VERSION_ATTR.value, "unknown"),
            )
            topo = root.find(XMLKeys.TOPOLOGY.value)
            if topo is not None:
                return topo
        raise FormatError(f"no <{XMLKeys.TOPOLOGY.value}> element in document")

    def parse_topology_element(
        self,
        topology: Topology,
        element: ET.Element,
        report: Optional[ImportReport] = None,
    ) -> ImportReport:
        """
        Fill topology from a <topology> element.

        The topology is expected to be empty. Classes are read first, then
        all nodes, then all links. Links to a node that was skipped are
        skipped as well.
        """
        if report is None:
            report = ImportReport(self.format_name)

        topology.wireless_enabled = WIRELESS_ENABLED.read(element)
        topology.time_unit = TIME_UNIT.read(element)
        topology.width = TOPOLOGY_WIDTH.read(element)
        topology.height = TOPOLOGY_HEIGHT.read(element)
        topology.sensing_range = TOPOLOGY_SENSING_RANGE.read(element)
        topology.communication_range = TOPOLOGY_COMMUNICATION_RANGE.read(element)

        self._parse_classes(topology, element.find(XMLKeys.CLASSES.value))

        graph = element.find(XMLKeys.GRAPH.value)
        if graph is not None:
            skipped_ids = set()
            for node_element in XMLKeys.NODE.children_of(graph):
                node_id = self._parse_node(topology, node_element, report)
                if node_id not in topology.nodes:
                    skipped_ids.add(node_id)
            for link_element in XMLKeys.LINK.children_of(graph):
                self._parse_link(topology, link_element, skipped_ids, report)

        report.nodes_imported = len(topology.nodes)
        report.links_imported = len(topology.links)
        return report

    def _parse_classes(self, topology: Topology, classes: Optional[ET.Element]):
        topology.engines.reset()
        if classes is None:
            return

        for entry in XMLKeys.NODECLASS.children_of(classes):
            name = IDENTIFIER.read_required(entry)
            cls = topology.registry.resolve(CLASS.read_required(entry))
            topology.registry.register(name, cls)

        for key, slot in ENGINE_ELEMENTS:
            entry = classes.find(key.value)
            if entry is None:
                continue
            base = ENGINE_SLOTS[slot][0]
            topology.engines.set(slot, topology.resolve_class(CLASS.read_required(entry), base))

    def _parse_node(self, topology: Topology, element: ET.Element, report: ImportReport) -> str:
        """Add the node described by element and return its id, even if it was skipped."""
        node_id = IDENTIFIER.read_required(element)
        class_name = CLASS.read(element)
        if class_name is not None and not class_name.strip():
            self._skip(report, FormatError(f"node '{node_id}': empty class attribute", text=class_name))
            return node_id
        if class_name:
            node = topology.registry.resolve(class_name)()
        else:
            node = topology.registry.instantiate(DEFAULT_MODEL)

        try:
            x = NODE_X.read_required(element)
            y = NODE_Y.read_required(element)
            z = NODE_Z.read(element)
            color = NODE_COLOR.read(element)
            icon = NODE_ICON.read(element)
            size = NODE_SIZE.read(element)
            direction = NODE_DIRECTION.read(element)
            communication_range = NODE_COMMUNICATION_RANGE.read(element)
            sensing_range = NODE_SENSING_RANGE.read(element)
        except FormatError as e:
            self._skip(report, FormatError(f"node '{node_id}': {e.message}", text=e.text))
            return node_id

        node.id = node_id
        node.set_location(x, y, z)
        node.color = color
        node.icon = icon
        node.icon_size = size
        node.direction = direction
        if communication_range is not None:
            node.communication_range = communication_range
        if sensing_range is not None:
            node.sensing_range = sensing_range

        try:
            topology.add_node(node)
        except DuplicateNodeError as e:
            self._skip(report, FormatError(str(e), text=node_id))
        return node_id

    def _parse_link(
        self,
        topology: Topology,
        element: ET.Element,
        skipped_ids: set,
        report: ImportReport,
    ):
        source_id = LINK_SOURCE.read_required(element)
        destination_id = LINK_DESTINATION.read_required(element)
        try:
            directed = LINK_DIRECTED.read_required(element)
            width = LINK_WIDTH.read(element)
            color = LINK_COLOR.read(element)
        except FormatError as e:
            self._skip(
                report,
                FormatError(f"link {source_id} -> {destination_id}: {e.message}", text=e.text),
            )
            return

        ends = []
        for node_id in (source_id, destination_id):
            node = topology.get_node(node_id)
            if node is not None:
                ends.append(node)
            elif node_id in skipped_ids:
                self._skip(report, FormatError(
                    f"link {source_id} -> {destination_id}: node '{node_id}' was skipped",
                    text=node_id,
                ))
                return
            else:
                raise UnknownNodeReferenceError(node_id)
        source, destination = ends

        topology.add_link(Link(
            source,
            destination,
            orientation=LinkType.DIRECTED if directed else LinkType.UNDIRECTED,
            mode=LinkMode.WIRED,
            width=width,
            color=color,
        ))
