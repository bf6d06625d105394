"""
File manager for saving and loading topologies.

Picks the serializer from the file extension (or an explicit format
name) and handles reading and writing the files.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from models.network import Topology
from .plain_serializer import PlainTopologySerializer
from .settings_manager import AppSettings
from .topology_serializer import ImportReport, TopologySerializer
from .xml_serializer import XMLTopologySerializer


logger = logging.getLogger(__name__)

FORMATS = {
    XMLTopologySerializer.format_name: XMLTopologySerializer,
    PlainTopologySerializer.format_name: PlainTopologySerializer,
}


class TopologyFileManager:
    """
    Handles saving and loading topology files.

    Supported formats:
    - xml: XML topology documents (.xml)
    - plain: Plain-text topology format (.txt, .tp, .topo)

    Files with another extension use the default format from settings.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self.settings = settings or AppSettings()
        self._current_file: Optional[Path] = None

    @property
    def current_file(self) -> Optional[Path]:
        """Get the last file loaded or saved."""
        return self._current_file

    @property
    def has_file(self) -> bool:
        return self._current_file is not None

    def format_for(self, path: Union[str, Path]) -> str:
        """Get the format name used for a path."""
        suffix = Path(path).suffix.lower()
        for name, serializer_class in FORMATS.items():
            if suffix in serializer_class.extensions:
                return name
        return self.settings.paths.default_format

    def serializer_for(
        self,
        path: Union[str, Path, None] = None,
        format: Optional[str] = None,
        strict: Optional[bool] = None,
    ) -> TopologySerializer:
        """
        Create the serializer for a path or explicit format name.

        Args:
            path: File whose extension selects the format
            format: Format name ("xml" or "plain"), overrides the extension
            strict: Override the strict setting

        Raises:
            ValueError: if format is not a known format name
        """
        name = format or (self.format_for(path) if path is not None else self.settings.paths.default_format)
        if name not in FORMATS:
            raise ValueError(f"Unknown topology format '{name}' (expected one of: {', '.join(FORMATS)})")

        if strict is None:
            strict = self.settings.parsing.strict
        if name == XMLTopologySerializer.format_name:
            return XMLTopologySerializer(
                strict=strict,
                indent=self.settings.xml.indent,
                xml_declaration=self.settings.xml.xml_declaration,
            )
        return PlainTopologySerializer(strict=strict)

    def load(
        self,
        topology: Topology,
        filepath: Union[str, Path],
        format: Optional[str] = None,
        strict: Optional[bool] = None,
    ) -> ImportReport:
        """
        Load a topology file into topology, replacing its content.

        Args:
            topology: Target topology
            filepath: File to read
            format: Explicit format name, otherwise chosen by extension
            strict: Raise on the first malformed entry

        Returns:
            ImportReport from the serializer

        Raises:
            OSError: if the file cannot be read
            TopologyIOError: if the content cannot be imported
        """
        filepath = Path(filepath)
        serializer = self.serializer_for(filepath, format, strict)
        data = filepath.read_text(encoding="utf-8")

        report = serializer.import_topology(topology, data)
        self._current_file = filepath
        logger.info("Loaded %s (%s): %s", filepath, serializer.format_name, report.summary())
        return report

    def save(
        self,
        topology: Topology,
        filepath: Union[str, Path],
        format: Optional[str] = None,
    ) -> Path:
        """
        Save topology to a file.

        Returns:
            The path written

        Raises:
            OSError: if the file cannot be written
        """
        filepath = Path(filepath)
        serializer = self.serializer_for(filepath, format)
        data = serializer.export_topology(topology)

        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "w", encoding="utf-8", newline="\n") as f:
            f.write(data)

        self._current_file = filepath
        logger.info("Saved %s (%s): %d nodes", filepath, serializer.format_name, len(topology.nodes))
        return filepath

    def convert(
        self,
        source: Union[str, Path],
        target: Union[str, Path],
        source_format: Optional[str] = None,
        target_format: Optional[str] = None,
        strict: Optional[bool] = None,
    ) -> ImportReport:
        """
        Read a topology file and write it in another format.

        Returns:
            ImportReport of the read step
        """
        topology = Topology()
        report = self.load(topology, source, source_format, strict)
        self.save(topology, target, target_format)
        return report
