# keep the grid graph populated around a moving reference point
# src/nav_core/maintainer.py
"""
Continuous maintainer for the grid graph.

Follows a ReferencePoint (typically the player) and keeps GridNavGraph
populated within a coverage radius of it. This module is the ONLY
scheduler of windowed generation and pruning.

Rules:
- Work happens on a tick cadence, never every frame.
- Generation is triggered by reference displacement, and skipped when a
  coverage sample around the leading point already has enough cells.
- Pruning runs on a coarser cadence to bound memory.
- Never computes directions or paths.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from contracts.physics import ReferencePoint
from contracts.types import Bounds, Vec2, distance, normalized, vec_add, vec_scale, vec_sub
from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import emit_event
from .nav.grid import GridNavGraph


log = logging.getLogger(__name__)


@dataclass
class MaintenanceReport:
    """What one tick did. Mostly for tests and the dashboard."""

    tick: int
    position: Vec2
    checked: bool = False
    generated: int = 0
    pruned: int = 0
    skipped_covered: bool = False


class ContinuousMaintainer:
    """
    Drives GridNavGraph generation / pruning around a reference point.

    Parameters mirror nav_env MaintainerConfig:
        coverage_radius      radius kept populated around the reference
        update_distance      displacement that triggers a generation check
        min_nodes_in_radius  coverage sample threshold ("enough cells")
        check_every_ticks    generation check cadence
        prune_every_ticks    pruning cadence
        cleanup_factor       prune distance = coverage_radius * factor
    """

    def __init__(
        self,
        graph: GridNavGraph,
        reference: ReferencePoint,
        *,
        coverage_radius: float = 30.0,
        update_distance: float = 10.0,
        min_nodes_in_radius: int = 20,
        check_every_ticks: int = 30,
        prune_every_ticks: int = 300,
        cleanup_factor: float = 2.0,
        max_probes: Optional[int] = None,
        bus: Optional[EventBus] = None,
    ) -> None:
        if coverage_radius <= 0:
            raise ValueError(f"coverage_radius must be positive, got {coverage_radius}")
        if check_every_ticks < 1 or prune_every_ticks < 1:
            raise ValueError("tick cadences must be >= 1")

        self._graph = graph
        self._reference = reference
        self.coverage_radius = float(coverage_radius)
        self.update_distance = float(update_distance)
        self.min_nodes_in_radius = int(min_nodes_in_radius)
        self.check_every_ticks = int(check_every_ticks)
        self.prune_every_ticks = int(prune_every_ticks)
        self.cleanup_factor = float(cleanup_factor)
        self.max_probes = max_probes
        self._bus = bus

        self._tick = 0
        self._last_update: Optional[Vec2] = None
        self._last_position: Optional[Vec2] = None

    @classmethod
    def from_config(
        cls,
        graph: GridNavGraph,
        reference: ReferencePoint,
        cfg,
        max_probes: Optional[int] = None,
        bus: Optional[EventBus] = None,
    ) -> "ContinuousMaintainer":
        return cls(
            graph,
            reference,
            coverage_radius=cfg.coverage_radius,
            update_distance=cfg.update_distance,
            min_nodes_in_radius=cfg.min_nodes_in_radius,
            check_every_ticks=cfg.check_every_ticks,
            prune_every_ticks=cfg.prune_every_ticks,
            cleanup_factor=cfg.cleanup_factor,
            max_probes=max_probes,
            bus=bus,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def tick_count(self) -> int:
        return self._tick

    @property
    def last_update_position(self) -> Optional[Vec2]:
        return self._last_update

    @property
    def reference_position(self) -> Optional[Vec2]:
        return self._last_position

    @property
    def cleanup_distance(self) -> float:
        return self.coverage_radius * self.cleanup_factor

    def bootstrap(self) -> int:
        """
        Full rebuild around the current reference position.

        The only O(full graph) entry point; used once at startup or after
        a teleport.
        """
        position = self._reference()
        size = self.coverage_radius * 2.0
        added = self._graph.rebuild(Bounds.from_center(position, size, size))
        self._last_update = position
        self._last_position = position
        emit_event(
            self._bus,
            module=__name__,
            event_type=EventType.GRAPH_REBUILT,
            message="Grid rebuilt around reference",
            payload={"position": list(position), "cells": added},
        )
        return added

    def tick(self, position: Optional[Vec2] = None) -> MaintenanceReport:
        """
        Advance one simulation step.

        `position` overrides the ReferencePoint (handy for tests and
        replays); normally the reference is read once per tick.
        """
        self._tick += 1
        if position is None:
            position = self._reference()
        previous = self._last_position
        self._last_position = position

        report = MaintenanceReport(tick=self._tick, position=position)

        if self._tick % self.check_every_ticks == 0 or self._last_update is None:
            report.checked = True
            self._maybe_generate(position, previous, report)

        if self._tick % self.prune_every_ticks == 0:
            report.pruned = self._prune(position)

        return report

    def densify(self, center: Vec2, radius: float) -> int:
        """Generate a small window around `center` on request (e.g. near a goal)."""
        added = self._graph.generate_window(center, radius, max_probes=self.max_probes)
        if added:
            log.debug("densified %d cells around (%.2f,%.2f)", added, center[0], center[1])
            self._publish_generated(center, radius, added, reason="densify")
        return added

    def covered(self, center: Vec2, radius: Optional[float] = None) -> bool:
        """Coverage sample: are there enough cells near `center`?"""
        r = self.coverage_radius / 2.0 if radius is None else radius
        return self._graph.has_min_coverage(center, r, self.min_nodes_in_radius)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _maybe_generate(
        self,
        position: Vec2,
        previous: Optional[Vec2],
        report: MaintenanceReport,
    ) -> None:
        first = self._last_update is None
        if not first and distance(position, self._last_update) < self.update_distance:
            return

        # Look ahead in the direction of motion so the window in front of
        # the reference is the one checked.
        heading = normalized(vec_sub(position, previous)) if previous is not None else (0.0, 0.0)
        lead = vec_add(position, vec_scale(heading, self.coverage_radius / 2.0))

        self._last_update = position
        if not first and self.covered(lead):
            report.skipped_covered = True
            log.debug("coverage ok around lead (%.2f,%.2f), skipping generation", lead[0], lead[1])
            return

        added = self._graph.generate_window(position, self.coverage_radius, max_probes=self.max_probes)
        report.generated = added
        if added:
            self._publish_generated(position, self.coverage_radius, added, reason="moved")

    def _prune(self, position: Vec2) -> int:
        removed = self._graph.prune_beyond(position, self.cleanup_distance)
        if removed:
            emit_event(
                self._bus,
                module=__name__,
                event_type=EventType.GRAPH_PRUNED,
                message="Grid cells pruned",
                payload={
                    "position": list(position),
                    "distance": self.cleanup_distance,
                    "removed": removed,
                    "remaining": len(self._graph),
                },
            )
        return removed

    def _publish_generated(self, center: Vec2, radius: float, added: int, reason: str) -> None:
        emit_event(
            self._bus,
            module=__name__,
            event_type=EventType.GRAPH_GENERATED,
            message="Grid window generated",
            payload={
                "center": list(center),
                "radius": radius,
                "added": added,
                "total": len(self._graph),
                "reason": reason,
            },
        )


__all__ = ["ContinuousMaintainer", "MaintenanceReport"]
