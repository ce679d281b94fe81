# sparse navigability grid sampled from occupancy queries
# src/nav_core/nav/grid.py
"""
GridNavGraph: sparse grid graph of walkable sample points.

This module does not know about agents or goals. It only:
- Quantizes world points onto a fixed (spacing x height) lattice.
- Classifies lattice cells through an OccupancyOracle.
- Generates, prunes and rebuilds the cell map.

Actual "what is solid" logic belongs to OccupancyOracle and the host
physics behind it.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Iterator, List, Optional, Set, Tuple

from contracts.types import Bounds, GridCell, NodeClassification, Vec2
from ..occupancy import OccupancyOracle
from ..snapshot import GraphSnapshot


log = logging.getLogger(__name__)

# Extra cells swept around every window / bounds, matching the lattice
# padding used when the graph is first built.
PAD_CELLS_X = 3
PAD_CELLS_BELOW = 3
PAD_CELLS_ABOVE = 8


class GridNavGraph:
    """
    Sparse mapping GridCell -> NodeClassification.

    Responsibilities:
    - classify(): cached lookup or fresh evaluation of one cell.
    - generate_window(): incremental, idempotent fill around a point.
    - mark_edges(): re-derive Base / Edge for every present cell.
    - prune_beyond(): drop cells far from a point.
    - rebuild() / build_for_bounds(): region builds.
    - closest_cell(): snap a query cell onto the graph.

    It does NOT:
    - Decide when to generate or prune (ContinuousMaintainer does).
    - Compute directions toward goals (DirectionFieldCache does).

    Only present cells are stored; NodeClassification.NONE is never a
    value in the map. Every mutation bumps `revision`, which is what
    direction fields use to detect staleness.
    """

    def __init__(
        self,
        oracle: OccupancyOracle,
        *,
        node_spacing: float = 2.0,
        node_height: float = 1.0,
        window_padding: float = 1.2,
        same_row_window: int = 5,
        below_preference: float = 0.8,
        max_snap_distance: Optional[float] = 8.0,
    ) -> None:
        if node_spacing <= 0 or node_height <= 0:
            raise ValueError(
                f"node_spacing and node_height must be positive, got {node_spacing} x {node_height}"
            )
        self._oracle = oracle
        self.node_spacing = float(node_spacing)
        self.node_height = float(node_height)
        self.window_padding = float(window_padding)
        self.same_row_window = int(same_row_window)
        self.below_preference = float(below_preference)
        self.max_snap_distance = max_snap_distance

        self._cells: Dict[GridCell, NodeClassification] = {}
        # cells a budgeted pass found empty; skipped until that window is swept
        self._empty: Set[GridCell] = set()
        self._revision = 0

    @classmethod
    def from_config(cls, oracle: OccupancyOracle, cfg) -> "GridNavGraph":
        """Build from a nav_env GridConfig."""
        return cls(
            oracle,
            node_spacing=cfg.node_spacing,
            node_height=cfg.node_height,
            window_padding=cfg.window_padding,
            same_row_window=cfg.same_row_window,
            below_preference=cfg.below_preference,
            max_snap_distance=cfg.max_snap_distance,
        )

    # ------------------------------------------------------------------
    # Coordinates
    # ------------------------------------------------------------------

    def world_to_grid(self, point: Vec2) -> GridCell:
        return (
            int(round(point[0] / self.node_spacing)),
            int(round(point[1] / self.node_height)),
        )

    def grid_to_world(self, cell: GridCell) -> Vec2:
        return (cell[0] * self.node_spacing, cell[1] * self.node_height)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def oracle(self) -> OccupancyOracle:
        return self._oracle

    @property
    def revision(self) -> int:
        return self._revision

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, cell: object) -> bool:
        return cell in self._cells

    def get(self, cell: GridCell) -> NodeClassification:
        """Stored classification, NONE when the cell is absent."""
        return self._cells.get(cell, NodeClassification.NONE)

    def items(self) -> Iterator[Tuple[GridCell, NodeClassification]]:
        return iter(list(self._cells.items()))

    def neighbors(self, cell: GridCell) -> List[GridCell]:
        """Present left/right neighbors of `cell`."""
        x, y = cell
        return [n for n in ((x - 1, y), (x + 1, y)) if n in self._cells]

    def classify(self, cell: GridCell) -> NodeClassification:
        """
        Cached classification of `cell`, or a fresh evaluation.

        A fresh evaluation is NOT committed; only generation passes
        write to the graph.
        """
        cached = self._cells.get(cell)
        if cached is not None:
            return cached
        return self._evaluate(cell)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def generate_window(
        self,
        center: Vec2,
        radius: float,
        max_probes: Optional[int] = None,
    ) -> int:
        """
        Classify and commit absent cells within `radius` of `center`.

        Cells are probed nearest-first so a probe budget fills the area
        around the center before the rim. Present cells are skipped, which
        makes repeated calls over the same window no-ops.

        With `max_probes` set, cells a truncated pass found empty are not
        probed again by the next budgeted pass, so successive passes reach
        the rim. Once a pass sweeps the whole window those cells become
        eligible again, as they do after any prune or rebuild.

        Returns the number of cells added.
        """
        if radius < 0:
            raise ValueError(f"radius must be >= 0, got {radius}")

        window = self._window_cells(center, radius)
        budgeted = max_probes is not None
        swept = True
        probes = 0
        added = 0
        for cell in window:
            if cell in self._cells or (budgeted and cell in self._empty):
                continue
            if budgeted and probes >= max_probes:
                swept = False
                break
            probes += 1
            if self._evaluate(cell) is not NodeClassification.NONE:
                self._cells[cell] = NodeClassification.BASE
                added += 1
            elif budgeted:
                self._empty.add(cell)

        if swept:
            self._empty.difference_update(window)

        if added:
            self.mark_edges()

        log.info(
            "grid window center=(%.2f,%.2f) radius=%.1f probes=%d added=%d total=%d",
            center[0],
            center[1],
            radius,
            probes,
            added,
            len(self._cells),
        )
        return added

    def mark_edges(self) -> int:
        """
        Re-derive Base / Edge for every present cell.

        A cell is Edge when its left or right neighbor is neither present
        nor solid. Returns the number of Edge cells.
        """
        edges = 0
        updated: Dict[GridCell, NodeClassification] = {}
        for cell in self._cells:
            x, y = cell
            if self._side_supported((x - 1, y)) and self._side_supported((x + 1, y)):
                updated[cell] = NodeClassification.BASE
            else:
                updated[cell] = NodeClassification.EDGE
                edges += 1
        self._cells = updated
        self._bump()
        return edges

    def prune_beyond(self, center: Vec2, max_distance: float) -> int:
        """Remove cells whose world position is farther than `max_distance` from `center`."""
        limit = max_distance * max_distance
        doomed = [
            cell
            for cell in self._cells
            if _sqr_dist(self.grid_to_world(cell), center) > limit
        ]
        for cell in doomed:
            del self._cells[cell]
        self._empty.clear()

        if doomed:
            self.mark_edges()
            log.info(
                "grid pruned %d cells beyond %.1f of (%.2f,%.2f), %d remain",
                len(doomed),
                max_distance,
                center[0],
                center[1],
                len(self._cells),
            )
        return len(doomed)

    def build_for_bounds(self, bounds: Bounds) -> int:
        """
        Classify every absent cell over `bounds` plus lattice padding.

        Existing cells are kept. Returns the number of cells added.
        """
        x0 = math.floor(bounds.min_x / self.node_spacing) - PAD_CELLS_X
        x1 = math.ceil(bounds.max_x / self.node_spacing) + PAD_CELLS_X
        y0 = math.floor(bounds.min_y / self.node_height) - PAD_CELLS_BELOW
        y1 = math.ceil(bounds.max_y / self.node_height) + PAD_CELLS_ABOVE

        added = 0
        for x in range(x0, x1 + 1):
            for y in range(y0, y1 + 1):
                cell = (x, y)
                if cell in self._cells:
                    continue
                if self._evaluate(cell) is not NodeClassification.NONE:
                    self._cells[cell] = NodeClassification.BASE
                    added += 1

        self.mark_edges()
        return added

    def rebuild(self, bounds: Bounds) -> int:
        """Clear everything and build from scratch over `bounds`."""
        self._cells.clear()
        self._empty.clear()
        added = self.build_for_bounds(bounds)
        log.info(
            "grid rebuilt over (%.1f,%.1f)-(%.1f,%.1f): %d cells",
            bounds.min_x,
            bounds.min_y,
            bounds.max_x,
            bounds.max_y,
            added,
        )
        return added

    def add_manual_node(self, point: Vec2) -> GridCell:
        """Force the cell under `point` into the graph (debug aid)."""
        cell = self.world_to_grid(point)
        self._cells[cell] = NodeClassification.BASE
        self.mark_edges()
        log.debug("manual grid node added at %s", cell)
        return cell

    def clear(self) -> None:
        self._cells.clear()
        self._empty.clear()
        self._bump()

    # ------------------------------------------------------------------
    # Spatial queries
    # ------------------------------------------------------------------

    def closest_cell(self, cell: GridCell) -> Optional[GridCell]:
        """
        Snap `cell` onto the graph.

        Order:
            1. exact match
            2. nearest present cell on the same row within same_row_window
            3. globally nearest cell, with distances of cells at or below
               the query row scaled by below_preference

        Candidates farther than max_snap_distance (grid units) are never
        returned; None means nothing is close enough.
        """
        if cell in self._cells:
            return cell

        x, y = cell
        snap = self.max_snap_distance
        for dx in range(1, self.same_row_window):
            if snap is not None and dx > snap:
                break
            for candidate in ((x - dx, y), (x + dx, y)):
                if candidate in self._cells:
                    return candidate

        best: Optional[GridCell] = None
        best_key: Optional[Tuple[float, int, int]] = None
        for other in self._cells:
            d = math.hypot(other[0] - x, other[1] - y)
            if snap is not None and d > snap:
                continue
            weighted = d * self.below_preference if other[1] <= y else d
            key = (weighted, other[1], other[0])
            if best_key is None or key < best_key:
                best_key = key
                best = other
        return best

    def closest_cell_to_point(self, point: Vec2) -> Optional[GridCell]:
        return self.closest_cell(self.world_to_grid(point))

    def count_within(self, center: Vec2, radius: float, limit: Optional[int] = None) -> int:
        """
        Count present cells within `radius` of `center`.

        Walks the lattice around the center (not the whole map) and stops
        early once `limit` is reached.
        """
        count = 0
        for cell in self._lattice_around(center, radius):
            if cell in self._cells:
                count += 1
                if limit is not None and count >= limit:
                    break
        return count

    def has_min_coverage(self, center: Vec2, radius: float, min_cells: int) -> bool:
        return self.count_within(center, radius, limit=min_cells) >= min_cells

    def snapshot(
        self,
        reference: Optional[Vec2] = None,
        last_path: Tuple[Vec2, ...] = (),
    ) -> GraphSnapshot:
        return GraphSnapshot(
            cells=dict(self._cells),
            revision=self._revision,
            node_spacing=self.node_spacing,
            node_height=self.node_height,
            reference=reference,
            last_path=tuple(last_path),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _evaluate(self, cell: GridCell) -> NodeClassification:
        point = self.grid_to_world(cell)
        if self._oracle.is_navigable(point):
            return NodeClassification.BASE
        return NodeClassification.NONE

    def _side_supported(self, cell: GridCell) -> bool:
        if cell in self._cells:
            return True
        radius = self._oracle.profile.check_radius
        return self._oracle.is_solid(self.grid_to_world(cell), radius=radius)

    def _bump(self) -> None:
        self._revision += 1

    def _window_cells(self, center: Vec2, radius: float) -> List[GridCell]:
        """Padded window lattice within radius, nearest cells first."""
        cx, cy = center
        x0 = math.floor((cx - radius) / self.node_spacing) - PAD_CELLS_X
        x1 = math.ceil((cx + radius) / self.node_spacing) + PAD_CELLS_X
        y0 = math.floor((cy - radius) / self.node_height) - PAD_CELLS_BELOW
        y1 = math.ceil((cy + radius) / self.node_height) + PAD_CELLS_ABOVE
        limit = radius * radius * self.window_padding

        scored: List[Tuple[float, GridCell]] = []
        for x in range(x0, x1 + 1):
            for y in range(y0, y1 + 1):
                d = _sqr_dist(self.grid_to_world((x, y)), center)
                if d > limit:
                    continue
                scored.append((d, (x, y)))
        scored.sort()
        return [cell for _, cell in scored]

    def _lattice_around(self, center: Vec2, radius: float) -> Iterator[GridCell]:
        cx, cy = center
        x0 = math.floor((cx - radius) / self.node_spacing)
        x1 = math.ceil((cx + radius) / self.node_spacing)
        y0 = math.floor((cy - radius) / self.node_height)
        y1 = math.ceil((cy + radius) / self.node_height)
        limit = radius * radius
        for x in range(x0, x1 + 1):
            for y in range(y0, y1 + 1):
                if _sqr_dist(self.grid_to_world((x, y)), center) <= limit:
                    yield (x, y)


def _sqr_dist(a: Vec2, b: Vec2) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return dx * dx + dy * dy


__all__ = ["GridNavGraph"]
