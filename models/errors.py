"""
Topology I/O errors.

Every error raised while reading or writing a topology derives from
TopologyIOError, so callers can catch the whole family at once. The
secondary bases (ValueError, LookupError) keep the errors usable with
code that only knows the built-in exception types.
"""

from typing import Optional


class TopologyIOError(Exception):
    """Base class for topology serialization errors."""


class FormatError(TopologyIOError, ValueError):
    """
    A token, line or document could not be parsed.

    Attributes:
        line: 1-based line number in the source text, if known
        text: The offending line or token, if known
    """

    def __init__(self, message: str, line: Optional[int] = None, text: Optional[str] = None):
        self.message = message
        self.line = line
        self.text = text
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.line is not None:
            return f"line {self.line}: {self.message}"
        return self.message


class UnknownNodeReferenceError(TopologyIOError, LookupError):
    """A link names a node identifier that does not exist."""

    def __init__(self, node_id: str, line: Optional[int] = None):
        self.node_id = node_id
        self.line = line
        where = f" (line {line})" if line is not None else ""
        super().__init__(f"unknown node reference '{node_id}'{where}")


class UnknownModelError(TopologyIOError, LookupError):
    """No node model or implementation class is bound to the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown model '{name}'")


class MissingFieldError(TopologyIOError, LookupError):
    """A required attribute is absent from an XML element."""

    def __init__(self, field_name: str, element: str = ""):
        self.field_name = field_name
        self.element = element
        on = f" on <{element}>" if element else ""
        super().__init__(f"missing required attribute '{field_name}'{on}")


class DuplicateNodeError(TopologyIOError, ValueError):
    """A node identifier is already used in the topology."""

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"duplicate node id '{node_id}'")
