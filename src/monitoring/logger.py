# JSON logger subscribing to EventBus
"""
Structured event logging for the navigation engine.

Provides:
- JsonFileLogger: subscribes to an EventBus and writes MonitoringEvents as JSONL.
- log_event: convenience helper for publishing MonitoringEvents via the EventBus.
- emit_event: same, but a no-op when no bus was injected.

Usage patterns:

    from pathlib import Path
    from monitoring.bus import EventBus
    from monitoring.logger import JsonFileLogger, log_event
    from monitoring.events import EventType

    bus = EventBus()
    logger = JsonFileLogger(Path("logs/nav/events.log"), bus)

    log_event(
        bus=bus,
        module="nav_core.maintainer",
        event_type=EventType.GRAPH_GENERATED,
        message="Window generated",
        payload={"added": 42},
    )
"""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Set

from .bus import EventBus
from .events import EventType, MonitoringEvent


# ============================================================
# JSONL File Logger
# ============================================================

class JsonFileLogger:
    """
    JSON-lines logger for MonitoringEvent instances.

    - Subscribes to an EventBus and writes one JSON object per line.
    - Optionally restricted to a set of event types.
    - Ensures UTF-8 encoding and that the parent directory exists.
    """

    def __init__(
        self,
        path: Path,
        bus: EventBus,
        event_types: Optional[Iterable[EventType]] = None,
    ) -> None:
        """
        Parameters
        ----------
        path:
            Path to the log file (e.g. logs/nav/events.log).
        bus:
            EventBus instance to subscribe to.
        event_types:
            If given, only these event types are written.
        """
        self._path = path
        self._bus = bus
        self._only: Optional[Set[EventType]] = set(event_types) if event_types else None
        self.written = 0
        path.parent.mkdir(parents=True, exist_ok=True)
        self._file = path.open("a", encoding="utf-8")
        bus.subscribe(self._on_event)

    @property
    def path(self) -> Path:
        return self._path

    def _on_event(self, event: MonitoringEvent) -> None:
        """Write one event as a JSON line."""
        if self._only is not None and event.event_type not in self._only:
            return
        line = json.dumps(event.to_dict(), ensure_ascii=False, default=_json_default)
        try:
            self._file.write(line + "\n")
            self._file.flush()
        except (OSError, ValueError):
            # Disk full or handle already closed: logging must not crash the engine.
            return
        self.written += 1

    def close(self) -> None:
        """Unsubscribe and close the file handle. Safe to call twice."""
        self._bus.unsubscribe(self._on_event)
        if not self._file.closed:
            self._file.close()


def _json_default(obj: Any) -> Any:
    # Enums carry .value; anything else falls back to str().
    if hasattr(obj, "value"):
        return obj.value
    return str(obj)


# ============================================================
# Convenience helpers for emitting events
# ============================================================

def log_event(
    bus: EventBus,
    module: str,
    event_type: EventType,
    message: str,
    payload: Optional[Dict[str, Any]] = None,
    correlation_id: Optional[str] = None,
) -> None:
    """
    Create and publish a MonitoringEvent.

    Parameters
    ----------
    bus:
        EventBus instance to publish the event to.
    module:
        String identifying the source module ("nav_core.maintainer", "nav_core.core").
    event_type:
        EventType enum member describing what kind of event this is.
    message:
        Short human-readable description.
    payload:
        Structured JSON-safe data attached to this event.
    correlation_id:
        Optional ID linking related events (per-agent, per-search).
    """
    event = MonitoringEvent(
        ts=time.time(),
        module=module,
        event_type=event_type,
        message=message,
        payload=payload or {},
        correlation_id=correlation_id,
    )
    bus.publish(event)


def emit_event(
    bus: Optional[EventBus],
    module: str,
    event_type: EventType,
    message: str,
    payload: Optional[Dict[str, Any]] = None,
    correlation_id: Optional[str] = None,
) -> None:
    """log_event for optional buses: engine components call this unconditionally."""
    if bus is None:
        return
    log_event(bus, module, event_type, message, payload, correlation_id)
