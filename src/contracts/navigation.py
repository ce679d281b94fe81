# NavigationEngine interface definition (agent controller boundary)
# src/contracts/navigation.py

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from .types import MovementAction, Vec2

if TYPE_CHECKING:  # pragma: no cover
    from nav_core.nav.pathfinder import SearchResult
    from nav_core.nav.waypoints import WaypointNode
    from nav_core.snapshot import GraphSnapshot


class NavigationEngine(Protocol):
    """Abstract interface consumed by agent controllers.

    Controllers (patrol / chase / evade state machines) hold a reference to
    one engine instance and call it on their own cadence. The engine is
    stateless with respect to which agent is calling.
    """

    def tick(self) -> None:
        """
        Advance graph maintenance around the reference point.

        Intended to be called once per simulation step by the runtime.
        """
        ...

    def movement_action(self, agent_pos: Vec2, goal_pos: Vec2) -> MovementAction:
        """Return the primitive movement command toward `goal_pos`."""
        ...

    def find_waypoint_path(
        self,
        start: "WaypointNode",
        goal: "WaypointNode",
    ) -> "SearchResult":
        """Shortest path over the waypoint graph (NoPath is a normal result)."""
        ...

    def graph_snapshot(self) -> "GraphSnapshot":
        """Read-only view of the current grid graph for debug rendering."""
        ...
