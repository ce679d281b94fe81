# EventBus for navigation monitoring events
"""
Event bus for the navigation monitoring layer.

Provides a minimal, thread-safe, in-process pub/sub mechanism:

- Subscribers receive MonitoringEvent objects.
- Used by:
    - rich dashboard (NavDashboard)
    - File-based logger
    - NavEngine / ContinuousMaintainer instrumentation
    - Dev tools / scripts

There is no process-wide instance; the runtime constructs one bus and
passes it to whoever needs it.
"""

from __future__ import annotations

from threading import Lock
from typing import Callable, List

from .events import MonitoringEvent


# ============================================================
# Type aliases
# ============================================================

SubscriberFn = Callable[[MonitoringEvent], None]


# ============================================================
# Event Bus
# ============================================================

class EventBus:
    """
    Simple in-process event bus for monitoring events.

    Design goals:
    - Minimal: no external dependencies or IPC.
    - Thread-safe: subscribers list protected by a Lock.
    - Non-blocking-ish: each publish iterates over a snapshot of subscribers.
    """

    def __init__(self) -> None:
        self._subscribers: List[SubscriberFn] = []
        self._lock = Lock()
        self._published = 0

    # --------------------------------------------------------
    # Subscription API
    # --------------------------------------------------------

    def subscribe(self, fn: SubscriberFn) -> None:
        """
        Register a subscriber to receive MonitoringEvent instances.

        Subscribers MUST NOT throw exceptions; if they do, it's on them.
        """
        with self._lock:
            self._subscribers.append(fn)

    def unsubscribe(self, fn: SubscriberFn) -> None:
        """
        Remove a previously registered subscriber.

        Safe to call even if `fn` is not present.
        """
        with self._lock:
            if fn in self._subscribers:
                self._subscribers.remove(fn)

    # --------------------------------------------------------
    # Publish API
    # --------------------------------------------------------

    def publish(self, event: MonitoringEvent) -> None:
        """
        Publish a MonitoringEvent to all subscribers.

        Takes a snapshot of subscribers under the lock, then iterates without
        holding the lock to avoid deadlocks if subscribers call back into the bus.
        """
        with self._lock:
            subscribers = list(self._subscribers)
            self._published += 1

        for fn in subscribers:
            try:
                fn(event)
            except Exception:
                # One bad subscriber must not kill the event stream.
                pass

    # --------------------------------------------------------
    # Utility
    # --------------------------------------------------------

    @property
    def published_count(self) -> int:
        return self._published

    def clear(self) -> None:
        """
        Clear all subscribers.

        Mostly useful for tests.
        """
        with self._lock:
            self._subscribers.clear()
