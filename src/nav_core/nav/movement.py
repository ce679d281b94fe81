# turn (agent position, goal position) into a primitive movement action
# src/nav_core/nav/movement.py
"""
MovementQuery: the public entry point for agent controllers.

This module only owns:
- goal position -> direction field lookup (with densify on no coverage)
- agent position -> closest graph cell -> horizontal sign -> action
- the sign-of-displacement fallback with a dead zone

It does NOT move anything, and it never emits JUMP or WAIT: the height
difference between agent and goal cell is reported in MovementDecision
but does not influence the action.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from contracts.types import ZERO, GridCell, MovementAction, Vec2, distance
from .field import DirectionFieldCache
from .grid import GridNavGraph

if TYPE_CHECKING:  # pragma: no cover
    from ..maintainer import ContinuousMaintainer


log = logging.getLogger(__name__)

SOURCE_FIELD = "field"
SOURCE_FALLBACK = "fallback"


@dataclass(frozen=True)
class MovementDecision:
    """Full explanation of one movement query."""

    action: MovementAction
    source: str                       # "field" or "fallback"
    agent_cell: Optional[GridCell]    # closest graph cell to the agent
    goal_cell: GridCell               # quantized goal position
    direction: Vec2                   # field direction used (ZERO on fallback)
    height_difference: int            # goal_cell.y - agent_cell.y (0 if unknown)


class MovementQuery:
    """
    Stateless-per-agent movement decision maker.

    Given unchanged graph state, decide(agent, goal) is a pure function
    of its inputs.
    """

    def __init__(
        self,
        graph: GridNavGraph,
        fields: DirectionFieldCache,
        maintainer: Optional["ContinuousMaintainer"] = None,
        *,
        dead_zone: float = 0.3,
        direction_threshold: float = 0.1,
        densify_radius: float = 5.0,
        densify_reach: Optional[float] = None,
    ) -> None:
        self._graph = graph
        self._fields = fields
        self._maintainer = maintainer
        self.dead_zone = float(dead_zone)
        self.direction_threshold = float(direction_threshold)
        self.densify_radius = float(densify_radius)
        self.densify_reach = densify_reach

    @classmethod
    def from_config(
        cls,
        graph: GridNavGraph,
        fields: DirectionFieldCache,
        maintainer: Optional["ContinuousMaintainer"],
        cfg,
    ) -> "MovementQuery":
        reach = None
        if maintainer is not None:
            reach = maintainer.coverage_radius * cfg.densify_reach_factor
        return cls(
            graph,
            fields,
            maintainer,
            dead_zone=cfg.dead_zone,
            direction_threshold=cfg.direction_threshold,
            densify_radius=cfg.densify_radius,
            densify_reach=reach,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def __call__(self, agent_pos: Vec2, goal_pos: Vec2) -> MovementAction:
        return self.decide(agent_pos, goal_pos)

    def decide(self, agent_pos: Vec2, goal_pos: Vec2) -> MovementAction:
        return self.explain(agent_pos, goal_pos).action

    def explain(self, agent_pos: Vec2, goal_pos: Vec2) -> MovementDecision:
        graph = self._graph
        goal_cell = graph.world_to_grid(goal_pos)
        near = graph.world_to_grid(agent_pos)

        field = self._fields.field_for(goal_cell, near=near)
        if field.empty and self._may_densify(agent_pos, goal_pos):
            if self._maintainer.densify(goal_pos, self.densify_radius):
                field = self._fields.field_for(goal_cell, near=near)

        agent_cell = graph.closest_cell(graph.world_to_grid(agent_pos))
        height_difference = goal_cell[1] - agent_cell[1] if agent_cell is not None else 0

        direction = field.direction_at(agent_cell) if agent_cell is not None else None
        if direction is not None:
            if direction[0] > self.direction_threshold:
                return MovementDecision(
                    MovementAction.MOVE_RIGHT, SOURCE_FIELD, agent_cell, goal_cell,
                    direction, height_difference,
                )
            if direction[0] < -self.direction_threshold:
                return MovementDecision(
                    MovementAction.MOVE_LEFT, SOURCE_FIELD, agent_cell, goal_cell,
                    direction, height_difference,
                )

        action = self.fallback(agent_pos, goal_pos)
        log.debug(
            "movement fallback agent=(%.2f,%.2f) goal=(%.2f,%.2f) cell=%s -> %s",
            agent_pos[0],
            agent_pos[1],
            goal_pos[0],
            goal_pos[1],
            agent_cell,
            action.value,
        )
        return MovementDecision(
            action, SOURCE_FALLBACK, agent_cell, goal_cell, ZERO, height_difference,
        )

    def fallback(self, agent_pos: Vec2, goal_pos: Vec2) -> MovementAction:
        """Sign of horizontal displacement, IDLE inside the dead zone."""
        dx = goal_pos[0] - agent_pos[0]
        if dx > self.dead_zone:
            return MovementAction.MOVE_RIGHT
        if dx < -self.dead_zone:
            return MovementAction.MOVE_LEFT
        return MovementAction.IDLE

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _may_densify(self, agent_pos: Vec2, goal_pos: Vec2) -> bool:
        if self._maintainer is None:
            return False
        if self.densify_reach is None:
            return True
        return distance(agent_pos, goal_pos) < self.densify_reach


__all__ = ["MovementDecision", "MovementQuery", "SOURCE_FIELD", "SOURCE_FALLBACK"]
