"""
Models package.

This package contains the topology data models read and written by the
serializers:
- Network topology (Node, Link, Topology, Position, Color)
- Node model registry (NodeModelRegistry)
- Engine configuration slots (EngineConfig and default engine classes)
- Error types shared with the services package
"""

from .network import (
    LinkType,
    LinkMode,
    Color,
    Position,
    Node,
    Link,
    Topology,
    DEFAULT_COMMUNICATION_RANGE,
    DEFAULT_SENSING_RANGE,
    DEFAULT_WIDTH,
    DEFAULT_HEIGHT,
    DEFAULT_WIRELESS_ENABLED,
    DEFAULT_TIME_UNIT,
    DEFAULT_NODE_COLOR,
    DEFAULT_ICON,
    DEFAULT_ICON_SIZE,
    DEFAULT_DIRECTION,
    DEFAULT_LINK_WIDTH,
    DEFAULT_LINK_COLOR,
)
from .registry import (
    DEFAULT_MODEL,
    NodeModelRegistry,
    qualified_name,
    find_subclass,
    resolve_subclass,
)
from .engine import (
    MessageEngine,
    LinkResolver,
    Scheduler,
    DefaultClock,
    EngineConfig,
    ENGINE_SLOTS,
)
from .errors import (
    TopologyIOError,
    FormatError,
    UnknownNodeReferenceError,
    UnknownModelError,
    MissingFieldError,
    DuplicateNodeError,
)


__all__ = [
    # Network
    "LinkType",
    "LinkMode",
    "Color",
    "Position",
    "Node",
    "Link",
    "Topology",
    "DEFAULT_COMMUNICATION_RANGE",
    "DEFAULT_SENSING_RANGE",
    "DEFAULT_WIDTH",
    "DEFAULT_HEIGHT",
    "DEFAULT_WIRELESS_ENABLED",
    "DEFAULT_TIME_UNIT",
    "DEFAULT_NODE_COLOR",
    "DEFAULT_ICON",
    "DEFAULT_ICON_SIZE",
    "DEFAULT_DIRECTION",
    "DEFAULT_LINK_WIDTH",
    "DEFAULT_LINK_COLOR",
    # Registry
    "DEFAULT_MODEL",
    "NodeModelRegistry",
    "qualified_name",
    "find_subclass",
    "resolve_subclass",
    # Engines
    "MessageEngine",
    "LinkResolver",
    "Scheduler",
    "DefaultClock",
    "EngineConfig",
    "ENGINE_SLOTS",
    # Errors
    "TopologyIOError",
    "FormatError",
    "UnknownNodeReferenceError",
    "UnknownModelError",
    "MissingFieldError",
    "DuplicateNodeError",
]
