"""
Monitoring for the navigation engine.

Exports the in-process EventBus, event schemas and the JSON-lines logger.
The rich dashboard lives in monitoring.dashboard_tui and is imported on
demand.
"""

from __future__ import annotations

from .bus import EventBus
from .events import EventType, MonitoringEvent
from .logger import JsonFileLogger, emit_event, log_event

__all__ = [
    "EventBus",
    "EventType",
    "MonitoringEvent",
    "JsonFileLogger",
    "emit_event",
    "log_event",
]
