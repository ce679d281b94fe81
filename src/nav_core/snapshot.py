# read-only debug views of the navigation graphs
# src/nav_core/snapshot.py
"""
Snapshot structures for nav_core.

These are the ONLY things the debug / visualization side sees of the
graphs. They are plain frozen copies taken at one instant, so renderers
(the rich dashboard, the demo CLI, external tools) never hold references
into live graph state.

Design goals:
- Copy, never alias, graph internals.
- No behavior beyond simple aggregate properties.
- Never required for correctness.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from contracts.types import GridCell, NodeClassification, Vec2


# ---------------------------------------------------------------------------
# Grid graph snapshot
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GraphSnapshot:
    """
    Frozen view of a GridNavGraph.

    `cells` holds only present cells (Base / Edge); absent cells are
    implicitly NodeClassification.NONE.
    """

    cells: Mapping[GridCell, NodeClassification]
    revision: int
    node_spacing: float
    node_height: float
    reference: Optional[Vec2] = None
    last_path: Tuple[Vec2, ...] = ()

    @property
    def base_count(self) -> int:
        return sum(1 for c in self.cells.values() if c is NodeClassification.BASE)

    @property
    def edge_count(self) -> int:
        return sum(1 for c in self.cells.values() if c is NodeClassification.EDGE)

    @property
    def cell_bounds(self) -> Optional[Tuple[int, int, int, int]]:
        """(min_x, min_y, max_x, max_y) over present cells, or None if empty."""
        if not self.cells:
            return None
        xs = [c[0] for c in self.cells]
        ys = [c[1] for c in self.cells]
        return min(xs), min(ys), max(xs), max(ys)

    def classification(self, cell: GridCell) -> NodeClassification:
        return self.cells.get(cell, NodeClassification.NONE)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly summary (no per-cell payload)."""
        return {
            "revision": self.revision,
            "base": self.base_count,
            "edge": self.edge_count,
            "bounds": self.cell_bounds,
            "reference": self.reference,
            "last_path_len": len(self.last_path),
        }


# ---------------------------------------------------------------------------
# Waypoint graph snapshot
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WaypointSnapshot:
    """
    Frozen view of a WaypointGraph.

    Nodes are identified by their node_id; edges are directed
    (from_id, to_id) pairs.
    """

    nodes: Mapping[int, Vec2]
    edges: Tuple[Tuple[int, int], ...]
    last_path: Tuple[int, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": self.node_count,
            "edges": self.edge_count,
            "last_path": list(self.last_path),
            "metadata": dict(self.metadata),
        }


__all__ = [
    "GraphSnapshot",
    "WaypointSnapshot",
]
