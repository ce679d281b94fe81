# A* shortest path over the waypoint graph
# src/nav_core/nav/pathfinder.py
"""
A* search over WaypointGraph.

- g = accumulated Euclidean edge length, h = straight-line distance to goal.
- All transient search state (g, h, predecessor, closed) lives in a
  working table created fresh for every call; nodes are never written to.
- max_expansions guard against runaway graphs.
- "No path" is a normal SearchResult, not an exception. Only caller
  misuse (missing or foreign start/goal) raises.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from contracts.types import Vec2, distance
from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import emit_event
from .waypoints import WaypointGraph, WaypointNode


log = logging.getLogger(__name__)

REASON_NO_PATH = "no_path_found"
REASON_EXHAUSTED = "max_expansions_exhausted"


@dataclass(frozen=True)
class SearchResult:
    """Structured result for one search."""

    path: Tuple[WaypointNode, ...]
    success: bool
    cost: float = 0.0
    reason: Optional[str] = None
    expanded: int = 0

    @property
    def positions(self) -> Tuple[Vec2, ...]:
        return tuple(n.position for n in self.path)

    def __len__(self) -> int:
        return len(self.path)


@dataclass
class _SearchState:
    """Per-node working state, owned by one search call."""

    g: float
    h: float
    parent: Optional[WaypointNode] = None
    closed: bool = False


class AStarSearch:
    """
    Reusable A* searcher.

    If constructed with a graph, start and goal must be members of it.
    `last_result` keeps the most recent SearchResult for debug rendering.
    """

    def __init__(
        self,
        graph: Optional[WaypointGraph] = None,
        *,
        max_expansions: Optional[int] = 10_000,
        bus: Optional[EventBus] = None,
    ) -> None:
        self._graph = graph
        self.max_expansions = max_expansions
        self._bus = bus
        self.last_result: Optional[SearchResult] = None

    def __call__(self, start: WaypointNode, goal: WaypointNode) -> SearchResult:
        return self.find_path(start, goal)

    def find_path(self, start: WaypointNode, goal: WaypointNode) -> SearchResult:
        if start is None or goal is None:
            raise ValueError("A* requires both a start and a goal node")
        if self._graph is not None and (start not in self._graph or goal not in self._graph):
            raise ValueError("start and goal must belong to the searched waypoint graph")

        result = _search(start, goal, self.max_expansions)
        self.last_result = result

        if result.success:
            log.debug(
                "path found %s -> %s: %d nodes cost=%.2f expanded=%d",
                start.node_id,
                goal.node_id,
                len(result.path),
                result.cost,
                result.expanded,
            )
            emit_event(
                self._bus,
                module=__name__,
                event_type=EventType.PATH_FOUND,
                message="Waypoint path found",
                payload={
                    "path": [n.node_id for n in result.path],
                    "cost": result.cost,
                    "expanded": result.expanded,
                },
            )
        else:
            log.debug(
                "no path %s -> %s: %s after %d expansions",
                start.node_id,
                goal.node_id,
                result.reason,
                result.expanded,
            )
            emit_event(
                self._bus,
                module=__name__,
                event_type=EventType.PATH_NOT_FOUND,
                message="Waypoint path not found",
                payload={
                    "start": start.node_id,
                    "goal": goal.node_id,
                    "reason": result.reason,
                    "expanded": result.expanded,
                },
            )
        return result


def find_path(
    start: WaypointNode,
    goal: WaypointNode,
    max_expansions: Optional[int] = 10_000,
) -> SearchResult:
    """One-shot A* without a bound graph or event bus."""
    if start is None or goal is None:
        raise ValueError("A* requires both a start and a goal node")
    return _search(start, goal, max_expansions)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _search(
    start: WaypointNode,
    goal: WaypointNode,
    max_expansions: Optional[int],
) -> SearchResult:
    if start is goal:
        return SearchResult(path=(start,), success=True, cost=0.0)

    goal_pos = goal.position
    table: Dict[WaypointNode, _SearchState] = {
        start: _SearchState(g=0.0, h=distance(start.position, goal_pos)),
    }
    # (f, h, seq, node): seq keeps ordering total without comparing nodes
    seq = itertools.count()
    open_heap: List[Tuple[float, float, int, WaypointNode]] = []
    h0 = table[start].h
    heapq.heappush(open_heap, (h0, h0, next(seq), start))

    expanded = 0
    while open_heap:
        _, _, _, current = heapq.heappop(open_heap)
        state = table[current]
        if state.closed:
            continue
        if current is goal:
            return SearchResult(
                path=_reconstruct_path(table, current),
                success=True,
                cost=state.g,
                expanded=expanded + 1,
            )
        if max_expansions is not None and expanded >= max_expansions:
            return SearchResult(path=(), success=False, reason=REASON_EXHAUSTED, expanded=expanded)

        state.closed = True
        expanded += 1

        for neighbor in current.connections:
            n_state = table.get(neighbor)
            if n_state is not None and n_state.closed:
                continue
            tentative_g = state.g + distance(current.position, neighbor.position)
            if n_state is None:
                n_state = _SearchState(g=math.inf, h=distance(neighbor.position, goal_pos))
                table[neighbor] = n_state
            if tentative_g < n_state.g:
                n_state.g = tentative_g
                n_state.parent = current
                heapq.heappush(
                    open_heap,
                    (tentative_g + n_state.h, n_state.h, next(seq), neighbor),
                )

    return SearchResult(path=(), success=False, reason=REASON_NO_PATH, expanded=expanded)


def _reconstruct_path(
    table: Dict[WaypointNode, _SearchState],
    current: WaypointNode,
) -> Tuple[WaypointNode, ...]:
    """Walk predecessors back to the start, then reverse."""
    path: List[WaypointNode] = [current]
    parent = table[current].parent
    while parent is not None:
        path.append(parent)
        parent = table[parent].parent
    path.reverse()
    return tuple(path)


__all__ = [
    "AStarSearch",
    "SearchResult",
    "find_path",
    "REASON_NO_PATH",
    "REASON_EXHAUSTED",
]
