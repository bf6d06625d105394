"""
XML vocabulary and typed attribute access.

XMLKeys lists every element and attribute name used in topology
documents. Attribute binds one of those names to a FieldType and an
optional default, and implements the default-omission rule: a value is
written only when it differs from its default, and an absent attribute
reads back as that same default.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from models.errors import FormatError, MissingFieldError
from models.network import Color


class XMLKeys(Enum):
    """Element and attribute names. Attribute members end with _ATTR."""
    JBOTSIM = "jbotsim"
    TOPOLOGY = "topology"
    CLASSES = "classes"
    NODECLASS = "node-class"
    NODE = "node"
    LINK = "link"
    GRAPH = "graph"
    LINK_RESOLVER = "link-resolver"
    MESSAGE_ENGINE = "message-engine"
    SCHEDULER = "scheduler"
    CLOCKCLASS = "clock-class"

    VERSION_ATTR = "version"
    IDENTIFIER_ATTR = "id"
    DIRECTED_ATTR = "directed"
    CLASS_ATTR = "class"
    SENSING_RANGE_ATTR = "sensing-range"
    COMMUNICATION_RANGE_ATTR = "communication-range"
    WIRELESS_ENABLED_ATTR = "wireless-enabled"
    SOURCE_ATTR = "src"
    DESTINATION_ATTR = "dst"
    DIRECTION_ATTR = "direction"
    TIME_UNIT_ATTR = "speed"
    WIDTH_ATTR = "width"
    HEIGHT_ATTR = "height"
    COLOR_ATTR = "color"
    ICON_ATTR = "icon"
    SIZE_ATTR = "size"
    LOCATION_X_ATTR = "x"
    LOCATION_Y_ATTR = "y"
    LOCATION_Z_ATTR = "z"

    def create_element(self, parent: Optional[ET.Element] = None) -> ET.Element:
        """Create an element named by this key, appended to parent if given."""
        if parent is None:
            return ET.Element(self.value)
        return ET.SubElement(parent, self.value)

    def labels_element(self, element: ET.Element) -> bool:
        return element.tag == self.value

    def is_attribute_of(self, element: ET.Element) -> bool:
        return self.value in element.attrib

    def children_of(self, element: ET.Element) -> list[ET.Element]:
        """Direct children of element named by this key."""
        return element.findall(self.value)


NONE_TOKEN = "None"


class FieldType(Enum):
    """Value types an attribute can hold, with their text conversions."""
    BOOLEAN = "boolean"
    INTEGER = "integer"
    DOUBLE = "double"
    STRING = "string"
    COLOR = "color"

    def format(self, value: Any) -> str:
        """Convert a value to its attribute text."""
        if self is FieldType.BOOLEAN:
            return "true" if value else "false"
        if self is FieldType.INTEGER:
            return str(int(value))
        if self is FieldType.DOUBLE:
            return repr(float(value))
        if self is FieldType.COLOR:
            return NONE_TOKEN if value is None else value.to_hex()
        return str(value)

    def parse(self, text: str) -> Any:
        """
        Convert attribute text to a value.

        Raises:
            FormatError: if text is not a valid token for this type
        """
        try:
            if self is FieldType.BOOLEAN:
                token = text.strip().lower()
                if token not in ("true", "false"):
                    raise ValueError(text)
                return token == "true"
            if self is FieldType.INTEGER:
                return int(text)
            if self is FieldType.DOUBLE:
                return float(text)
            if self is FieldType.COLOR:
                if text.strip() == NONE_TOKEN:
                    return None
                return Color.from_hex(text)
        except ValueError:
            raise FormatError(f"invalid {self.value} value '{text}'", text=text) from None
        return text


# Marker for "use the attribute's declared default"
_DECLARED = object()


@dataclass(frozen=True)
class Attribute:
    """
    A typed attribute with an optional default.

    Attributes:
        key: XML name of the attribute
        field_type: Conversion used to read and write it
        default: Value omitted on write and returned on read when absent
    """
    key: XMLKeys
    field_type: FieldType = FieldType.STRING
    default: Any = None

    @property
    def name(self) -> str:
        return self.key.value

    def write(self, element: ET.Element, value: Any, default: Any = _DECLARED) -> bool:
        """
        Set the attribute unless value equals the default.

        Returns:
            True if the attribute was written
        """
        if default is _DECLARED:
            default = self.default
        if value == default:
            return False
        self.write_always(element, value)
        return True

    def write_always(self, element: ET.Element, value: Any) -> None:
        element.set(self.name, self.field_type.format(value))

    def read(self, element: ET.Element, default: Any = _DECLARED) -> Any:
        """Read and convert the attribute, or return the default if absent."""
        if default is _DECLARED:
            default = self.default
        text = element.get(self.name)
        if text is None:
            return default
        return self.field_type.parse(text)

    def read_required(self, element: ET.Element) -> Any:
        """
        Read and convert an attribute that must be present.

        Raises:
            MissingFieldError: if the attribute is absent
        """
        text = element.get(self.name)
        if text is None:
            raise MissingFieldError(self.name, element.tag)
        return self.field_type.parse(text)
