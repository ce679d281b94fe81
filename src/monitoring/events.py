# path: src/monitoring/events.py
"""
Event schemas for the navigation monitoring layer.

This module defines:
- EventType enum
- MonitoringEvent (structured engine events)

All events are JSON-serializable via `.to_dict()` and are intended
for use with monitoring.bus.EventBus and monitoring.logger.JsonFileLogger.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum, auto
from typing import Any, Dict, Optional


# ============================================================
# Event Types
# ============================================================

class EventType(Enum):
    """Typed monitoring events emitted by the navigation engine."""

    # Grid graph maintenance
    GRAPH_GENERATED = auto()   # windowed generation added cells
    GRAPH_PRUNED = auto()      # distance-based pruning removed cells
    GRAPH_REBUILT = auto()     # full rebuild over a bounds region

    # Direction fields and movement queries
    FIELD_COMPUTED = auto()
    MOVEMENT_DECIDED = auto()

    # Waypoint graph and search
    WAYPOINTS_BUILT = auto()
    PATH_FOUND = auto()
    PATH_NOT_FOUND = auto()

    # Full graph snapshot (rare, expensive)
    SNAPSHOT = auto()

    # Generic log messages
    LOG = auto()


# ============================================================
# Monitoring Event Structure
# ============================================================

@dataclass
class MonitoringEvent:
    """
    Runtime event emitted by the maintainer, direction field cache,
    movement query, waypoint builder or A* search.

    All fields must be JSON-safe.
    """

    ts: float                   # UNIX timestamp (seconds)
    module: str                 # Source module string ("nav_core.maintainer", ...)
    event_type: EventType       # Enum describing the event class
    message: str                # Short human-readable description
    payload: Dict[str, Any]     # Structured data (counts, cells, actions, path)
    correlation_id: Optional[str] = None  # Used for grouping events per agent/search

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dict for loggers."""
        data = asdict(self)
        data["event_type"] = self.event_type.name  # store name, not enum
        return data
