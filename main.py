#!/usr/bin/env python3
"""
Topology file converter - Main Entry Point

Reads and writes network topologies in the XML and plain-text formats.

Usage:
    python main.py convert network.xml network.txt
    python main.py info network.txt
    python main.py --debug info network.xml    # Enable debug logging
"""

import sys
import logging
import argparse
from typing import Optional

from models import Topology, TopologyIOError
from services import FORMATS, TopologyFileManager, get_settings


logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False):
    """Configure logging for the application."""
    level = logging.DEBUG if debug else logging.INFO

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    logger.debug(f"Logging initialized at {'DEBUG' if debug else 'INFO'} level")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Convert and inspect topology files')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--config', help='Settings file to use instead of the default location')

    commands = parser.add_subparsers(dest='command', required=True)
    formats = sorted(FORMATS)

    convert = commands.add_parser('convert', help='Convert a topology file to another format')
    convert.add_argument('source', help='Input file')
    convert.add_argument('target', help='Output file')
    convert.add_argument('--from', dest='source_format', choices=formats,
                         help='Input format (default: from the file extension)')
    convert.add_argument('--to', dest='target_format', choices=formats,
                         help='Output format (default: from the file extension)')
    convert.add_argument('--strict', action='store_true', default=None,
                         help='Fail on the first malformed node or link')

    info = commands.add_parser('info', help='Print a summary of a topology file')
    info.add_argument('file', help='Topology file')
    info.add_argument('--format', choices=formats,
                      help='File format (default: from the file extension)')

    return parser


def run_convert(manager: TopologyFileManager, args) -> int:
    report = manager.convert(
        args.source, args.target,
        source_format=args.source_format,
        target_format=args.target_format,
        strict=args.strict,
    )
    for diagnostic in report.diagnostics:
        print(f"warning: {diagnostic}", file=sys.stderr)
    print(f"{args.source} -> {args.target}: {report.summary()}")
    return 0


def run_info(manager: TopologyFileManager, args) -> int:
    topology = Topology()
    report = manager.load(topology, args.file, format=args.format)

    directed = sum(1 for link in topology.links if link.is_directed)
    print(f"File:                {args.file} ({report.format_name})")
    print(f"Communication range: {topology.communication_range}")
    print(f"Sensing range:       {topology.sensing_range}")
    print(f"Size:                {topology.width} x {topology.height}")
    print(f"Node models:         {', '.join(topology.registry.names())}")
    print(f"Nodes:               {len(topology.nodes)}")
    print(f"Links:               {len(topology.links)} ({directed} directed)")
    if report.diagnostics:
        print(f"Skipped entries:     {len(report.diagnostics)}")
        for diagnostic in report.diagnostics:
            print(f"  - {diagnostic}")
    return 0


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Setup logging
    setup_logging(debug=args.debug)

    settings = get_settings(args.config)
    manager = TopologyFileManager(settings.settings)

    try:
        if args.command == 'convert':
            return run_convert(manager, args)
        return run_info(manager, args)
    except (TopologyIOError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
