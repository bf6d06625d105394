"""Services package."""

from models.errors import (
    TopologyIOError,
    FormatError,
    UnknownNodeReferenceError,
    UnknownModelError,
    MissingFieldError,
    DuplicateNodeError,
)
from .xml_keys import XMLKeys, FieldType, Attribute
from .topology_serializer import TopologySerializer, ImportReport
from .plain_serializer import PlainTopologySerializer
from .xml_serializer import XMLTopologySerializer
from .settings_manager import (
    SettingsManager,
    AppSettings,
    XMLSettings,
    ParseSettings,
    PathSettings,
    get_settings,
    reset_settings_manager,
)
from .file_manager import TopologyFileManager, FORMATS

__all__ = [
    # Errors
    "TopologyIOError",
    "FormatError",
    "UnknownNodeReferenceError",
    "UnknownModelError",
    "MissingFieldError",
    "DuplicateNodeError",
    # Attribute access
    "XMLKeys",
    "FieldType",
    "Attribute",
    # Serializers
    "TopologySerializer",
    "ImportReport",
    "PlainTopologySerializer",
    "XMLTopologySerializer",
    # Settings
    "SettingsManager",
    "AppSettings",
    "XMLSettings",
    "ParseSettings",
    "PathSettings",
    "get_settings",
    "reset_settings_manager",
    # Files
    "TopologyFileManager",
    "FORMATS",
]
