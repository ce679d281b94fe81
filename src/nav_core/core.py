# src/nav_core/core.py
"""
Concrete navigation engine.

This module wires together:
- OccupancyOracle (host physics adapter)
- GridNavGraph + ContinuousMaintainer (grid kept around the reference)
- DirectionFieldCache + MovementQuery (agent movement decisions)
- WaypointGraph + FlightNodeGenerator + AStarSearch (free-space paths)
- DecisionTracer (logging of movement decisions)

Public surface (for agent controllers and the runtime):
    class NavEngine(NavigationEngine):
        start() -> int
        tick() -> MaintenanceReport
        movement_action(agent_pos, goal_pos) -> MovementAction
        explain_movement(agent_pos, goal_pos) -> MovementDecision
        build_waypoints(bounds) -> int
        find_waypoint_path(start, goal) -> SearchResult
        graph_snapshot() -> GraphSnapshot
        waypoint_snapshot() -> WaypointSnapshot

Design constraints:
- One explicitly constructed instance, passed by reference to whoever
  needs it. No module-level registry.
- No coverage / no path are normal results, never exceptions.
- Configuration and host-physics failures raise NavCoreError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import perf_counter
from typing import Any, List, Optional

from contracts.navigation import NavigationEngine
from contracts.physics import CollisionQuery, ReferencePoint
from contracts.types import Bounds, MovementAction, Vec2
from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import emit_event
from nav_env.loader import load_nav_profile
from nav_env.schema import NavProfile

from .maintainer import ContinuousMaintainer, MaintenanceReport
from .nav.field import DirectionFieldCache
from .nav.grid import GridNavGraph
from .nav.movement import MovementDecision, MovementQuery
from .nav.pathfinder import AStarSearch, SearchResult
from .nav.waypoints import ConnectionRules, FlightNodeGenerator, WaypointGraph, WaypointNode
from .occupancy import OccupancyOracle, probe_profile_from_config
from .snapshot import GraphSnapshot, WaypointSnapshot
from .tracing import DecisionTraceRecord, DecisionTracer


log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Domain errors
# ---------------------------------------------------------------------------


@dataclass
class NavCoreError(RuntimeError):
    """
    Domain-level error raised by NavEngine for wiring failures.

    Examples:
        - nav.yaml missing or invalid
        - the host physics raising during a maintenance tick

    Normal gameplay conditions (no coverage, no path, stale cache) must
    NOT raise this.
    """

    code: str
    details: dict[str, Any]

    def __str__(self) -> str:
        return f"NavCoreError(code={self.code!r}, details={self.details!r})"


# ---------------------------------------------------------------------------
# Implementation
# ---------------------------------------------------------------------------


class NavEngine(NavigationEngine):
    """
    Concrete navigation engine.

    Orchestrates:
        - ContinuousMaintainer (grid upkeep on tick)
        - MovementQuery (direction field + fallback)
        - AStarSearch over the flight WaypointGraph
        - DecisionTracer (per-decision logging)

    Consumers (agent controllers) see:
        - tick
        - movement_action / explain_movement
        - build_waypoints / nearest_waypoint / find_waypoint_path
        - graph_snapshot / waypoint_snapshot
    """

    def __init__(
        self,
        physics: CollisionQuery,
        reference: ReferencePoint,
        *,
        profile: Optional[NavProfile] = None,
        bus: Optional[EventBus] = None,
        tracer: Optional[DecisionTracer] = None,
    ) -> None:
        """
        Build a NavEngine.

        If `profile` is None it is resolved from config/nav.yaml via
        load_nav_profile() (NAV_PROFILE / NAV_CONFIG honored).
        """
        if profile is None:
            try:
                profile = load_nav_profile()
            except (FileNotFoundError, KeyError, ValueError) as exc:
                raise NavCoreError(
                    code="config_failed",
                    details={"exception": repr(exc)},
                ) from exc
        self._profile = profile
        self._bus = bus
        self._reference = reference

        self._oracle = OccupancyOracle(physics, probe_profile_from_config(profile.ground_probe))

        # Grid side
        self._graph = GridNavGraph.from_config(self._oracle, profile.grid)
        self._maintainer = ContinuousMaintainer.from_config(
            self._graph,
            reference,
            profile.maintainer,
            max_probes=profile.grid.max_probes_per_window,
            bus=bus,
        )
        self._fields = DirectionFieldCache.from_config(self._graph, profile.direction_field, bus=bus)
        self._movement = MovementQuery.from_config(
            self._graph,
            self._fields,
            self._maintainer,
            profile.movement,
        )

        # Waypoint side
        self._waypoints = WaypointGraph(self._oracle, ConnectionRules.from_config(profile.waypoints))
        self._flight = FlightNodeGenerator.from_config(
            self._oracle,
            self._waypoints,
            profile.waypoints,
            bus=bus,
        )
        self._search = AStarSearch(
            self._waypoints,
            max_expansions=profile.search.max_expansions,
            bus=bus,
        )

        self._tracer: DecisionTracer = tracer or DecisionTracer()
        self._started = False

    # ------------------------------------------------------------------
    # Components (read access for controllers / tools)
    # ------------------------------------------------------------------

    @property
    def profile(self) -> NavProfile:
        return self._profile

    @property
    def oracle(self) -> OccupancyOracle:
        return self._oracle

    @property
    def graph(self) -> GridNavGraph:
        return self._graph

    @property
    def maintainer(self) -> ContinuousMaintainer:
        return self._maintainer

    @property
    def fields(self) -> DirectionFieldCache:
        return self._fields

    @property
    def movement(self) -> MovementQuery:
        return self._movement

    @property
    def waypoints(self) -> WaypointGraph:
        return self._waypoints

    @property
    def search(self) -> AStarSearch:
        return self._search

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> int:
        """Initial full build around the reference point. Idempotent."""
        if self._started:
            return len(self._graph)
        try:
            added = self._maintainer.bootstrap()
        except Exception as exc:
            raise NavCoreError(
                code="bootstrap_failed",
                details={"exception": repr(exc)},
            ) from exc
        self._started = True
        log.info("nav engine started with profile=%s cells=%d", self._profile.name, added)
        return added

    def tick(self) -> MaintenanceReport:
        """
        Run one maintenance step around the reference point.

        Starts the engine on first use.
        """
        if not self._started:
            self.start()
        try:
            return self._maintainer.tick()
        except Exception as exc:
            raise NavCoreError(
                code="tick_failed",
                details={"exception": repr(exc), "tick": self._maintainer.tick_count},
            ) from exc

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------

    def movement_action(self, agent_pos: Vec2, goal_pos: Vec2) -> MovementAction:
        return self.explain_movement(agent_pos, goal_pos).action

    def explain_movement(self, agent_pos: Vec2, goal_pos: Vec2) -> MovementDecision:
        start = perf_counter()
        decision = self._movement.explain(agent_pos, goal_pos)
        duration = perf_counter() - start

        self._tracer.record(
            agent_pos=agent_pos,
            goal_pos=goal_pos,
            decision=decision,
            duration_s=duration,
        )
        emit_event(
            self._bus,
            module=__name__,
            event_type=EventType.MOVEMENT_DECIDED,
            message="Movement decided",
            payload={
                "agent": list(agent_pos),
                "goal": list(goal_pos),
                "action": decision.action.value,
                "source": decision.source,
                "height_difference": decision.height_difference,
            },
        )
        return decision

    # ------------------------------------------------------------------
    # Waypoints
    # ------------------------------------------------------------------

    def build_waypoints(self, bounds: Bounds) -> int:
        """(Re)place the flight network over `bounds`. Returns node count."""
        return self._flight.generate(bounds)

    def nearest_waypoint(self, point: Vec2) -> Optional[WaypointNode]:
        return self._waypoints.nearest_node(point)

    def furthest_waypoint(self, point: Vec2) -> Optional[WaypointNode]:
        return self._waypoints.furthest_node(point)

    def find_waypoint_path(self, start: WaypointNode, goal: WaypointNode) -> SearchResult:
        return self._search.find_path(start, goal)

    # ------------------------------------------------------------------
    # Debug / visualization
    # ------------------------------------------------------------------

    def graph_snapshot(self) -> GraphSnapshot:
        last = self._search.last_result
        path = last.positions if last is not None else ()
        return self._graph.snapshot(
            reference=self._maintainer.reference_position,
            last_path=path,
        )

    def waypoint_snapshot(self) -> WaypointSnapshot:
        last = self._search.last_result
        return self._waypoints.snapshot(last.path if last is not None else ())

    def publish_snapshot(self) -> GraphSnapshot:
        """Take a grid snapshot and publish its summary as a SNAPSHOT event."""
        snap = self.graph_snapshot()
        emit_event(
            self._bus,
            module=__name__,
            event_type=EventType.SNAPSHOT,
            message="Grid snapshot",
            payload=snap.to_dict(),
        )
        return snap

    def get_decision_traces(self) -> List[DecisionTraceRecord]:
        return self._tracer.get_records()
