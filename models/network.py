"""
Network topology data models.

These models represent the externally observable state of a simulated
topology: global ranges and dimensions, the engine configuration, the
node model registry, and the node and link collections. They are what
the plain-text and XML serializers read and write.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterable, Optional
import math

from .engine import EngineConfig
from .errors import DuplicateNodeError, UnknownNodeReferenceError
from .registry import NodeModelRegistry, resolve_subclass


# Topology defaults
DEFAULT_COMMUNICATION_RANGE = 100.0
DEFAULT_SENSING_RANGE = 0.0
DEFAULT_WIDTH = 600
DEFAULT_HEIGHT = 400
DEFAULT_WIRELESS_ENABLED = True
DEFAULT_TIME_UNIT = 10  # milliseconds per clock tick

# Node defaults
DEFAULT_NODE_COLOR = None
DEFAULT_ICON = None
DEFAULT_ICON_SIZE = 10
DEFAULT_DIRECTION = math.pi / 2

# Link defaults
DEFAULT_LINK_WIDTH = 1


class LinkType(Enum):
    """Orientation of a link."""
    DIRECTED = auto()
    UNDIRECTED = auto()


class LinkMode(Enum):
    """
    How a link came to exist.

    WIRED links are declared explicitly and persisted. WIRELESS links are
    derived from node geometry at runtime and are never serialized.
    """
    WIRED = auto()
    WIRELESS = auto()


@dataclass(frozen=True)
class Color:
    """An RGBA color. Hex form is ARGB ("ff404040")."""
    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 255

    def __post_init__(self):
        for channel in (self.r, self.g, self.b, self.a):
            if not 0 <= channel <= 255:
                raise ValueError(f"color channel out of range: {channel}")

    @property
    def argb(self) -> int:
        return (self.a << 24) | (self.r << 16) | (self.g << 8) | self.b

    def to_hex(self) -> str:
        """Lowercase ARGB hex, always eight digits."""
        return format(self.argb, "08x")

    @classmethod
    def from_hex(cls, text: str) -> "Color":
        """
        Parse "ff404040", "#404040" or "404040".

        Six digits or fewer are read as opaque RGB; to_hex always writes
        eight, so a transparent color keeps its alpha.

        Raises:
            ValueError: if text is not hexadecimal
        """
        digits = text.strip().lstrip("#")
        value = int(digits, 16)
        if value < 0 or value > 0xFFFFFFFF:
            raise ValueError(f"color out of range: {text}")
        if len(digits) <= 6:
            value |= 0xFF000000
        return cls(
            r=(value >> 16) & 0xFF,
            g=(value >> 8) & 0xFF,
            b=value & 0xFF,
            a=(value >> 24) & 0xFF,
        )


Color.BLACK = Color(0, 0, 0)
Color.WHITE = Color(255, 255, 255)
Color.RED = Color(255, 0, 0)
Color.GREEN = Color(0, 255, 0)
Color.BLUE = Color(0, 0, 255)
Color.GRAY = Color(128, 128, 128)
Color.DARK_GRAY = Color(64, 64, 64)

DEFAULT_LINK_COLOR = Color.DARK_GRAY


@dataclass
class Position:
    """3D position. z is 0 for planar topologies."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def distance(self, other: "Position") -> float:
        return math.dist(self.to_tuple(), other.to_tuple())


@dataclass(eq=False)
class Node:
    """
    A topology node.

    Subclasses are node models: register them in a topology's registry to
    make them available by name.

    Attributes:
        id: Unique identifier, assigned by the topology if left empty
        location: 3D position
        color: Display color (None means unset)
        icon: Icon reference (path or resource name)
        icon_size: Icon size
        direction: Orientation in radians
        properties: Arbitrary runtime state, never serialized
    """
    id: Optional[str] = None
    location: Position = field(default_factory=Position)
    color: Optional[Color] = DEFAULT_NODE_COLOR
    icon: Optional[str] = DEFAULT_ICON
    icon_size: int = DEFAULT_ICON_SIZE
    direction: float = DEFAULT_DIRECTION
    properties: dict = field(default_factory=dict)

    # Range overrides; None inherits from the topology
    communication_range_override: Optional[float] = field(default=None, repr=False)
    sensing_range_override: Optional[float] = field(default=None, repr=False)

    topology: Optional["Topology"] = field(default=None, repr=False)

    @property
    def x(self) -> float:
        return self.location.x

    @property
    def y(self) -> float:
        return self.location.y

    @property
    def z(self) -> float:
        return self.location.z

    def set_location(self, x: float, y: float, z: float = 0.0) -> None:
        self.location = Position(x, y, z)

    @property
    def communication_range(self) -> float:
        """Own communication range, or the topology's if not overridden."""
        if self.communication_range_override is not None:
            return self.communication_range_override
        if self.topology is not None:
            return self.topology.communication_range
        return DEFAULT_COMMUNICATION_RANGE

    @communication_range.setter
    def communication_range(self, value: Optional[float]):
        self.communication_range_override = value

    @property
    def sensing_range(self) -> float:
        """Own sensing range, or the topology's if not overridden."""
        if self.sensing_range_override is not None:
            return self.sensing_range_override
        if self.topology is not None:
            return self.topology.sensing_range
        return DEFAULT_SENSING_RANGE

    @sensing_range.setter
    def sensing_range(self, value: Optional[float]):
        self.sensing_range_override = value

    def get_property(self, key: str, default=None):
        return self.properties.get(key, default)

    def set_property(self, key: str, value) -> None:
        self.properties[key] = value

    def __str__(self) -> str:
        return str(self.id)


@dataclass(eq=False)
class Link:
    """
    A link between two nodes.

    Two links are equal when they have the same mode and orientation and
    join the same endpoints (in order for directed links, in any order for
    undirected ones).
    """
    source: Node
    destination: Node
    orientation: LinkType = LinkType.UNDIRECTED
    mode: LinkMode = LinkMode.WIRED
    width: int = DEFAULT_LINK_WIDTH
    color: Optional[Color] = DEFAULT_LINK_COLOR

    @property
    def is_directed(self) -> bool:
        return self.orientation == LinkType.DIRECTED

    @property
    def is_wireless(self) -> bool:
        return self.mode == LinkMode.WIRELESS

    @property
    def endpoints(self) -> tuple[Node, Node]:
        return (self.source, self.destination)

    def other_endpoint(self, node: Node) -> Node:
        """Get the endpoint opposite to node."""
        if node is self.source:
            return self.destination
        if node is self.destination:
            return self.source
        raise ValueError(f"node {node} is not an endpoint of this link")

    def _key(self):
        if self.is_directed:
            ends = (id(self.source), id(self.destination))
        else:
            ends = frozenset((id(self.source), id(self.destination)))
        return (self.orientation, self.mode, ends)

    def __eq__(self, other):
        if not isinstance(other, Link):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __str__(self) -> str:
        arrow = "-->" if self.is_directed else "<-->"
        return f"{self.source} {arrow} {self.destination}"


@dataclass
class Topology:
    """
    Root model containing the whole topology.

    The topology owns its nodes and links, its node model registry and its
    engine configuration. Serializers only read and write this state.

    Callers must not mutate a topology while it is being imported or
    exported; no locking is performed.
    """
    communication_range: float = DEFAULT_COMMUNICATION_RANGE
    sensing_range: float = DEFAULT_SENSING_RANGE
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    wireless_enabled: bool = DEFAULT_WIRELESS_ENABLED
    time_unit: int = DEFAULT_TIME_UNIT

    nodes: dict[str, Node] = field(default_factory=dict)
    links: list[Link] = field(default_factory=list)

    registry: NodeModelRegistry = field(default_factory=lambda: NodeModelRegistry(Node))
    engines: EngineConfig = field(default_factory=EngineConfig)

    def new_node(self, model: str = "default") -> Node:
        """Instantiate a node of a registered model (not added to the topology)."""
        return self.registry.instantiate(model)

    def add_node(
        self,
        node: Node,
        x: Optional[float] = None,
        y: Optional[float] = None,
        z: Optional[float] = None,
    ) -> Node:
        """
        Add a node, assigning it an id if it has none.

        Raises:
            DuplicateNodeError: if the node id is already used
        """
        if x is not None and y is not None:
            node.set_location(x, y, z or 0.0)
        if node.id is None or node.id == "":
            node.id = self._next_id()
        if node.id in self.nodes:
            raise DuplicateNodeError(node.id)
        self.nodes[node.id] = node
        node.topology = self
        return node

    def _next_id(self) -> str:
        index = 0
        while str(index) in self.nodes:
            index += 1
        return str(index)

    def remove_node(self, node_id: str) -> Optional[Node]:
        """Remove a node and all its incident links."""
        node = self.nodes.get(node_id)
        if node is None:
            return None
        self.links = [
            link for link in self.links
            if link.source is not node and link.destination is not node
        ]
        node.topology = None
        return self.nodes.pop(node_id)

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get a node by ID."""
        return self.nodes.get(node_id)

    def add_link(self, link: Link) -> Link:
        """
        Add a link between two nodes of this topology.

        Adding a link equal to an existing one returns the existing link.

        Raises:
            UnknownNodeReferenceError: if an endpoint is not in the topology
        """
        for endpoint in link.endpoints:
            if self.nodes.get(endpoint.id) is not endpoint:
                raise UnknownNodeReferenceError(str(endpoint.id))
        for existing in self.links:
            if existing == link:
                return existing
        self.links.append(link)
        return link

    def connect(
        self,
        source_id: str,
        target_id: str,
        directed: bool = False,
        wireless: bool = False,
    ) -> Link:
        """Create and add a link between two node ids."""
        source = self.nodes.get(source_id)
        if source is None:
            raise UnknownNodeReferenceError(source_id)
        target = self.nodes.get(target_id)
        if target is None:
            raise UnknownNodeReferenceError(target_id)
        link = Link(
            source,
            target,
            orientation=LinkType.DIRECTED if directed else LinkType.UNDIRECTED,
            mode=LinkMode.WIRELESS if wireless else LinkMode.WIRED,
        )
        return self.add_link(link)

    def remove_link(self, link: Link) -> Optional[Link]:
        for i, existing in enumerate(self.links):
            if existing == link:
                return self.links.pop(i)
        return None

    def get_links(self, wireless: Optional[bool] = None) -> list[Link]:
        """Get links, optionally filtered by mode."""
        if wireless is None:
            return list(self.links)
        return [link for link in self.links if link.is_wireless == wireless]

    @property
    def wired_links(self) -> list[Link]:
        return self.get_links(wireless=False)

    def get_neighbors(self, node_id: str) -> list[Node]:
        """Nodes reachable over one link from node_id."""
        node = self.nodes.get(node_id)
        if node is None:
            return []
        neighbors = []
        for link in self.links:
            if link.source is node:
                neighbors.append(link.destination)
            elif link.destination is node and not link.is_directed:
                neighbors.append(link.source)
        return neighbors

    def add_nodes(self, nodes: Iterable[Node]) -> None:
        for node in nodes:
            self.add_node(node)

    def resolve_class(self, class_name: str, base: type) -> type:
        """
        Find a loaded subclass of base by qualified class name.

        Raises:
            UnknownModelError: if no such class is loaded
        """
        return resolve_subclass(base, class_name)

    def clear(self):
        """Remove all nodes and links. Settings and registry are kept."""
        for node in self.nodes.values():
            node.topology = None
        self.nodes.clear()
        self.links.clear()
