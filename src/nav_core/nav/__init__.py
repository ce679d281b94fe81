# src/nav_core/nav/__init__.py
"""
Navigation subsystem for nav_core.

Provides:
- GridNavGraph: sparse grid of walkable cells around the reference point
- DirectionFieldCache / DirectionField: per-goal BFS direction maps
- MovementQuery / MovementDecision: (agent, goal) -> MovementAction
- WaypointGraph / FlightNodeGenerator: explicit nodes for free movement
- AStarSearch / find_path: shortest paths over the waypoint graph
"""

from __future__ import annotations

from .grid import GridNavGraph
from .field import DirectionField, DirectionFieldCache
from .movement import MovementDecision, MovementQuery
from .waypoints import ConnectionRules, FlightNodeGenerator, WaypointGraph, WaypointNode
from .pathfinder import AStarSearch, SearchResult, find_path

__all__ = [
    "GridNavGraph",
    "DirectionField",
    "DirectionFieldCache",
    "MovementDecision",
    "MovementQuery",
    "ConnectionRules",
    "FlightNodeGenerator",
    "WaypointGraph",
    "WaypointNode",
    "AStarSearch",
    "SearchResult",
    "find_path",
]
