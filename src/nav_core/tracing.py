# src/nav_core/tracing.py
"""
Tracing for movement decisions.

This module provides a thin, structured logging layer around
MovementQuery so the dashboard and offline tools can consume consistent
traces of what the engine told each agent.

It does NOT:
- Make decisions
- Publish monitoring events (NavEngine does)
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional

from contracts.types import GridCell, Vec2
from .nav.movement import MovementDecision


@dataclass
class DecisionTraceRecord:
    """Structured record of one movement query."""

    timestamp: float           # wall-clock time (time.time())
    duration_s: float          # query duration in seconds

    agent_pos: Vec2
    goal_pos: Vec2
    action: str
    source: str                # "field" or "fallback"

    agent_cell: Optional[GridCell]
    goal_cell: GridCell
    height_difference: int


class DecisionTracer:
    """
    In-memory decision tracer with optional logging.

    Responsibilities:
    - Keep a rolling buffer of recent DecisionTraceRecord entries.
    - Emit a single structured log line per decision (debug level, since
      controllers may query every frame).
    """

    def __init__(
        self,
        *,
        logger: Optional[logging.Logger] = None,
        max_records: int = 10_000,
    ) -> None:
        self._logger = logger or logging.getLogger("nav_core.decision")
        self._records: Deque[DecisionTraceRecord] = deque(maxlen=max_records)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def record(
        self,
        *,
        agent_pos: Vec2,
        goal_pos: Vec2,
        decision: MovementDecision,
        duration_s: float,
    ) -> None:
        try:
            record = DecisionTraceRecord(
                timestamp=time.time(),
                duration_s=float(duration_s),
                agent_pos=(float(agent_pos[0]), float(agent_pos[1])),
                goal_pos=(float(goal_pos[0]), float(goal_pos[1])),
                action=decision.action.value,
                source=decision.source,
                agent_cell=decision.agent_cell,
                goal_cell=decision.goal_cell,
                height_difference=decision.height_difference,
            )
        except Exception:
            # Tracing must never crash the caller.
            self._logger.exception("Failed to build DecisionTraceRecord")
            return

        self._records.append(record)

        self._logger.debug(
            "move_decision action=%s source=%s agent=(%.2f,%.2f) goal=(%.2f,%.2f) "
            "cell=%s dh=%d duration=%.5fs",
            record.action,
            record.source,
            record.agent_pos[0],
            record.agent_pos[1],
            record.goal_pos[0],
            record.goal_pos[1],
            record.agent_cell,
            record.height_difference,
            record.duration_s,
        )

    def get_records(self) -> List[DecisionTraceRecord]:
        """Snapshot of all currently buffered records."""
        return list(self._records)

    def clear(self) -> None:
        self._records.clear()
