# core shared value types: Vec2, GridCell, NodeClassification, MovementAction
# src/contracts/types.py

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple


# ---------------------------------------------------------------------------
# Coordinates
# ---------------------------------------------------------------------------

# World-space point (x, y). Plain tuples keep hashing and equality cheap.
Vec2 = Tuple[float, float]

# Quantized integer grid coordinate (x, y).
GridCell = Tuple[int, int]

ZERO: Vec2 = (0.0, 0.0)


def vec_add(a: Vec2, b: Vec2) -> Vec2:
    return (a[0] + b[0], a[1] + b[1])


def vec_sub(a: Vec2, b: Vec2) -> Vec2:
    return (a[0] - b[0], a[1] - b[1])


def vec_scale(a: Vec2, k: float) -> Vec2:
    return (a[0] * k, a[1] * k)


def vec_length(a: Vec2) -> float:
    return math.hypot(a[0], a[1])


def distance(a: Vec2, b: Vec2) -> float:
    """Euclidean distance between two points (world or grid units)."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def normalized(a: Vec2) -> Vec2:
    """
    Return the unit vector of `a`, or ZERO for a (near-)zero vector.

    Mirrors the usual game-engine convention where normalizing a zero
    vector yields zero instead of raising.
    """
    length = vec_length(a)
    if length < 1e-9:
        return ZERO
    return (a[0] / length, a[1] / length)


def rotated(a: Vec2, degrees: float) -> Vec2:
    """Rotate `a` counter-clockwise by `degrees`."""
    rad = math.radians(degrees)
    c = math.cos(rad)
    s = math.sin(rad)
    return (a[0] * c - a[1] * s, a[0] * s + a[1] * c)


# ---------------------------------------------------------------------------
# Regions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned world-space rectangle."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_center(cls, center: Vec2, width: float, height: float) -> "Bounds":
        hw = width / 2.0
        hh = height / 2.0
        return cls(center[0] - hw, center[1] - hh, center[0] + hw, center[1] + hh)

    @property
    def center(self) -> Vec2:
        return ((self.min_x + self.max_x) / 2.0, (self.min_y + self.max_y) / 2.0)

    def expanded(self, amount: float) -> "Bounds":
        """Grow every side by amount / 2 (total size grows by `amount`)."""
        half = amount / 2.0
        return Bounds(
            self.min_x - half,
            self.min_y - half,
            self.max_x + half,
            self.max_y + half,
        )

    def contains(self, point: Vec2) -> bool:
        return (
            self.min_x <= point[0] <= self.max_x
            and self.min_y <= point[1] <= self.max_y
        )


# ---------------------------------------------------------------------------
# Navigation enums
# ---------------------------------------------------------------------------


class NodeClassification(Enum):
    """Navigability of a grid cell."""

    NONE = "none"   # not present / not navigable
    BASE = "base"   # open space with ground support directly below
    EDGE = "edge"   # base cell missing a horizontal neighbor on one side

    @property
    def navigable(self) -> bool:
        return self is not NodeClassification.NONE


class MovementAction(Enum):
    """
    Primitive movement command returned to agent controllers.

    JUMP and WAIT are reserved: the engine has no jump arc or timing model,
    so it never emits them.
    """

    IDLE = "idle"
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    JUMP = "jump"
    WAIT = "wait"


# ---------------------------------------------------------------------------
# Physics query results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RayHit:
    """Nearest hit of a ray or box cast."""

    point: Vec2
    distance: float
