# src/app/runtime.py

from __future__ import annotations  # allow forward type hints

from dataclasses import dataclass   # for simple container types
from pathlib import Path
from typing import Optional

from contracts.physics import CollisionQuery, ReferencePoint
from monitoring.bus import EventBus
from monitoring.logger import JsonFileLogger
from nav_core import NavEngine
from nav_env.loader import load_nav_profile
from nav_env.schema import NavProfile


# ------------------------------
# Runtime container
# ------------------------------


@dataclass
class NavRuntime:
    """Everything the host game keeps a reference to."""

    engine: NavEngine
    bus: EventBus
    event_log: Optional[JsonFileLogger] = None

    def close(self) -> None:
        if self.event_log is not None:
            self.event_log.close()
            self.event_log = None


# ------------------------------
# Bootstrap / runtime glue
# ------------------------------


def build_nav_engine(
    physics: CollisionQuery,
    reference: ReferencePoint,
    *,
    profile: Optional[NavProfile] = None,
    profile_name: Optional[str] = None,
    bus: Optional[EventBus] = None,
    event_log_path: Optional[Path] = None,
    start: bool = True,
) -> NavRuntime:
    """Wire config + monitoring + engine into one runtime.

    - profile: explicit NavProfile; otherwise loaded from nav.yaml
      (profile_name overrides NAV_PROFILE / the file default)
    - bus: shared EventBus; a fresh one is created when omitted
    - event_log_path: when set, every event is also written as JSON lines
    - start: run the initial grid build around the reference immediately
    """
    if profile is None:
        profile = load_nav_profile(profile_name)
    bus = bus or EventBus()
    event_log = JsonFileLogger(event_log_path, bus) if event_log_path is not None else None

    try:
        engine = NavEngine(physics, reference, profile=profile, bus=bus)
        if start:
            engine.start()
    except Exception:
        if event_log is not None:
            event_log.close()
        raise
    return NavRuntime(engine=engine, bus=bus, event_log=event_log)
