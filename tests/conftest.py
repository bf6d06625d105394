"""
Pytest configuration and shared fixtures for topology serializer tests.
"""

import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Generator

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from models.network import Topology, Node, Link, LinkType, LinkMode, Color
from services.settings_manager import reset_settings_manager


# ============== Node Models ==============

class MovingNode(Node):
    """Node model used to exercise the registry and class overrides."""


class SensorNode(Node):
    """Second node model."""


# ============== Temporary Directory Fixtures ==============

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    tmp = tempfile.mkdtemp(prefix="topocodec_test_")
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Make sure no test sees another test's global settings."""
    reset_settings_manager()
    yield
    reset_settings_manager()


# ============== Model Fixtures ==============

@pytest.fixture
def empty_topology() -> Topology:
    """Create an empty topology."""
    return Topology()


@pytest.fixture
def simple_topology() -> Topology:
    """
    Two nodes and one undirected wired link.

    cR 10.0, sR 5.0, A at (0, 0, 0), B at (1, 2, 0), A - B
    """
    topology = Topology(communication_range=10.0, sensing_range=5.0)
    topology.add_node(Node(id="A"), 0.0, 0.0)
    topology.add_node(Node(id="B"), 1.0, 2.0)
    topology.connect("A", "B")
    return topology


@pytest.fixture
def mixed_topology() -> Topology:
    """
    Four nodes with directed, undirected and wireless links.

    Exercises every serialized attribute: colors, icons, sizes,
    directions, range overrides, z coordinates and node models.
    """
    topology = Topology(
        communication_range=50.0,
        sensing_range=20.0,
        width=800,
        height=600,
        wireless_enabled=False,
        time_unit=25,
    )
    topology.registry.register("moving", MovingNode)

    a = topology.add_node(Node(id="a", color=Color.RED, icon="/icons/a.png"), 10.0, 20.0, 5.0)
    b = topology.add_node(MovingNode(id="b", icon_size=14, direction=0.0), 30.5, 40.25)
    c = topology.add_node(Node(id="c"), 100.0, 0.0)
    d = topology.add_node(Node(id="d"), 200.0, 200.0)
    b.communication_range = 80.0
    c.sensing_range = 3.5

    topology.add_link(Link(a, b, LinkType.UNDIRECTED, LinkMode.WIRED, width=3, color=Color.BLUE))
    topology.add_link(Link(b, c, LinkType.DIRECTED, LinkMode.WIRED))
    topology.add_link(Link(c, b, LinkType.DIRECTED, LinkMode.WIRED, color=None))
    topology.add_link(Link(c, d, LinkType.UNDIRECTED, LinkMode.WIRELESS))
    return topology


# ============== Helper Functions ==============

def link_set(topology: Topology) -> set:
    """Links as comparable tuples: (src, dst, directed) with undirected ends sorted."""
    result = set()
    for link in topology.links:
        ends = (link.source.id, link.destination.id)
        if not link.is_directed:
            ends = tuple(sorted(ends))
        result.add(ends + (link.is_directed,))
    return result


def positions(topology: Topology) -> dict:
    """Node id -> (x, y, z)."""
    return {nid: node.location.to_tuple() for nid, node in topology.nodes.items()}
