# per-goal best-direction fields over the grid graph
# src/nav_core/nav/field.py
"""
Direction fields over GridNavGraph.

- Breadth-first propagation from the goal's closest graph cell.
- Only left/right adjacency is traversed.
- Every reached cell maps to the unit vector toward its BFS parent;
  the seed cell maps to the zero vector.
- Fields are cached per goal cell and tagged with the graph revision
  they were computed against, so pruning or generation turns them into
  cache misses instead of serving removed cells.
"""

from __future__ import annotations

import logging
from collections import OrderedDict, deque
from dataclasses import dataclass
from typing import Deque, Dict, Mapping, Optional

from contracts.types import ZERO, GridCell, Vec2, distance, normalized, vec_sub
from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import emit_event
from .grid import GridNavGraph


log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectionField:
    """Result of one propagation toward `goal_cell`."""

    goal_cell: GridCell
    seed_cell: Optional[GridCell]      # graph cell the BFS started from
    directions: Mapping[GridCell, Vec2]
    revision: int                      # graph revision this was computed on
    visited: int = 0
    truncated: bool = False            # stopped by the visit budget

    @property
    def empty(self) -> bool:
        return not self.directions

    def direction_at(self, cell: GridCell) -> Optional[Vec2]:
        return self.directions.get(cell)

    def __contains__(self, cell: object) -> bool:
        return cell in self.directions

    def __len__(self) -> int:
        return len(self.directions)


class DirectionFieldCache:
    """
    LRU cache of DirectionFields keyed by goal cell.

    Lookup order for field_for(goal):
        1. a field for exactly `goal` computed on the current revision
        2. the last computed field, if its goal is within jitter_tolerance
           grid units of `goal` and it is still current. Skipped when the
           caller passes a `near` cell that is itself within jitter_tolerance
           of `goal`: between the two goals the reused field points the
           wrong way.
        3. a fresh propagation

    Any graph mutation invalidates every cached field at once.
    """

    def __init__(
        self,
        graph: GridNavGraph,
        *,
        jitter_tolerance: float = 2.0,
        max_visits: Optional[int] = None,
        max_cached_fields: int = 32,
        bus: Optional[EventBus] = None,
    ) -> None:
        if max_cached_fields < 1:
            raise ValueError(f"max_cached_fields must be >= 1, got {max_cached_fields}")
        self._graph = graph
        self.jitter_tolerance = float(jitter_tolerance)
        self.max_visits = max_visits
        self.max_cached_fields = int(max_cached_fields)
        self._bus = bus

        self._fields: "OrderedDict[GridCell, DirectionField]" = OrderedDict()
        self._last_goal: Optional[GridCell] = None
        self._seen_revision = graph.revision

        self.hits = 0
        self.misses = 0

    @classmethod
    def from_config(
        cls,
        graph: GridNavGraph,
        cfg,
        bus: Optional[EventBus] = None,
    ) -> "DirectionFieldCache":
        return cls(
            graph,
            jitter_tolerance=cfg.jitter_tolerance,
            max_visits=cfg.max_visits,
            max_cached_fields=cfg.max_cached_fields,
            bus=bus,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def field_for(self, goal_cell: GridCell, near: Optional[GridCell] = None) -> DirectionField:
        self._drop_stale()

        cached = self._fields.get(goal_cell)
        if cached is not None:
            self._fields.move_to_end(goal_cell)
            self.hits += 1
            return cached

        last = self._last_goal
        close_call = near is not None and distance(near, goal_cell) <= self.jitter_tolerance
        if last is not None and not close_call and distance(last, goal_cell) <= self.jitter_tolerance:
            reused = self._fields.get(last)
            if reused is not None:
                self._fields.move_to_end(last)
                self.hits += 1
                return reused

        self.misses += 1
        result = self._compute(goal_cell)
        self._fields[goal_cell] = result
        while len(self._fields) > self.max_cached_fields:
            self._fields.popitem(last=False)
        self._last_goal = goal_cell
        return result

    def invalidate(self) -> None:
        """Drop every cached field."""
        self._fields.clear()
        self._last_goal = None

    def __len__(self) -> int:
        return len(self._fields)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _drop_stale(self) -> None:
        rev = self._graph.revision
        if rev != self._seen_revision:
            self.invalidate()
            self._seen_revision = rev

    def _compute(self, goal_cell: GridCell) -> DirectionField:
        graph = self._graph
        revision = graph.revision
        seed = graph.closest_cell(goal_cell)
        if seed is None:
            log.debug("direction field goal=%s: no graph cell within snap range", goal_cell)
            return DirectionField(goal_cell, None, {}, revision)

        directions: Dict[GridCell, Vec2] = {seed: ZERO}
        queue: Deque[GridCell] = deque([seed])
        budget = self.max_visits
        truncated = False

        while queue and not truncated:
            current = queue.popleft()
            here = graph.grid_to_world(current)
            for neighbor in graph.neighbors(current):
                if neighbor in directions:
                    continue
                if budget is not None and len(directions) >= budget:
                    truncated = True
                    break
                directions[neighbor] = normalized(vec_sub(here, graph.grid_to_world(neighbor)))
                queue.append(neighbor)

        log.debug(
            "direction field goal=%s seed=%s cells=%d truncated=%s rev=%d",
            goal_cell,
            seed,
            len(directions),
            truncated,
            revision,
        )
        emit_event(
            self._bus,
            module=__name__,
            event_type=EventType.FIELD_COMPUTED,
            message="Direction field computed",
            payload={
                "goal_cell": list(goal_cell),
                "seed_cell": list(seed),
                "cells": len(directions),
                "truncated": truncated,
                "revision": revision,
            },
        )
        return DirectionField(
            goal_cell=goal_cell,
            seed_cell=seed,
            directions=directions,
            revision=revision,
            visited=len(directions),
            truncated=truncated,
        )


__all__ = ["DirectionField", "DirectionFieldCache"]
