# tests/conftest.py

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure src/ is on sys.path for test imports like `import nav_core`, `import nav_env`.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"

if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from nav_core.nav.grid import GridNavGraph  # noqa: E402
from nav_core.occupancy import OccupancyOracle  # noqa: E402
from nav_core.testing.fakes import FakeCollisionWorld, flat_ground_world  # noqa: E402


@pytest.fixture
def ground_world() -> FakeCollisionWorld:
    """Solid ground line at y=0 for x in [-10, 10]."""
    return flat_ground_world(-10.0, 10.0, 0.0)


@pytest.fixture
def scenario_graph(ground_world: FakeCollisionWorld) -> GridNavGraph:
    """2 x 1 grid over the ground line, generated around the origin."""
    graph = GridNavGraph(OccupancyOracle(ground_world), node_spacing=2.0, node_height=1.0)
    graph.generate_window((0.0, 1.0), 30.0)
    return graph
