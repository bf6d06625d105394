"""
Common interface for topology serializers.

A serializer turns a Topology into text and back. Import replaces the
topology content and returns an ImportReport listing the per-entity
problems that were skipped instead of aborting the whole import.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from models.errors import FormatError
from models.network import Topology


logger = logging.getLogger(__name__)


@dataclass
class ImportReport:
    """
    Outcome of one import call.

    Attributes:
        format_name: Serializer that produced the report
        nodes_imported: Number of nodes added to the topology
        links_imported: Number of links added to the topology
        diagnostics: Per-entity errors that were skipped
    """
    format_name: str
    nodes_imported: int = 0
    links_imported: int = 0
    diagnostics: List[FormatError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when nothing was skipped."""
        return not self.diagnostics

    def add_diagnostic(self, error: FormatError):
        logger.warning("%s import: skipped %s", self.format_name, error)
        self.diagnostics.append(error)

    def summary(self) -> str:
        text = f"{self.nodes_imported} nodes, {self.links_imported} links"
        if self.diagnostics:
            text += f", {len(self.diagnostics)} skipped"
        return text


class TopologySerializer:
    """
    Base class for serializers.

    Args:
        strict: Raise per-entity errors instead of collecting them
    """

    format_name = "topology"
    extensions: tuple = ()

    def __init__(self, strict: bool = False):
        self.strict = strict

    def import_topology(self, topology: Topology, data: str) -> ImportReport:
        """Replace the content of topology with the topology described by data."""
        raise NotImplementedError

    def export_topology(self, topology: Topology) -> str:
        """Describe topology as text."""
        raise NotImplementedError

    def _skip(self, report: ImportReport, error: FormatError):
        """Record a per-entity error, or raise it in strict mode."""
        if self.strict:
            raise error
        report.add_diagnostic(error)
