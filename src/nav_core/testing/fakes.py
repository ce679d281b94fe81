"""
Test helpers for nav_core.

Provides:
- SolidBox: axis-aligned solid rectangle
- FakeCollisionWorld: in-memory CollisionQuery implementation for unit tests
- MovableReference: a ReferencePoint whose position tests set by hand
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from contracts.physics import CollisionQuery
from contracts.types import RayHit, Vec2, normalized


@dataclass(frozen=True)
class SolidBox:
    """Axis-aligned solid rectangle in world space."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def expanded(self, half_w: float, half_h: float) -> "SolidBox":
        return SolidBox(
            self.min_x - half_w,
            self.min_y - half_h,
            self.max_x + half_w,
            self.max_y + half_h,
        )


def _ray_box(origin: Vec2, direction: Vec2, box: SolidBox) -> Optional[float]:
    """Slab test. Returns the entry distance (0 if origin is inside) or None."""
    t_min = -math.inf
    t_max = math.inf

    for o, d, lo, hi in (
        (origin[0], direction[0], box.min_x, box.max_x),
        (origin[1], direction[1], box.min_y, box.max_y),
    ):
        if abs(d) < 1e-12:
            if o < lo or o > hi:
                return None
            continue
        t1 = (lo - o) / d
        t2 = (hi - o) / d
        if t1 > t2:
            t1, t2 = t2, t1
        t_min = max(t_min, t1)
        t_max = min(t_max, t2)

    if t_max < max(t_min, 0.0):
        return None
    return max(t_min, 0.0)


class FakeCollisionWorld(CollisionQuery):
    """
    In-memory CollisionQuery used for unit and integration tests.

    Features:
    - World geometry is a list of SolidBox rectangles.
    - Counts every query so tests can assert on probe cost and caching.
    - No real physics engine.
    """

    def __init__(self, boxes: Iterable[SolidBox] = ()) -> None:
        self.boxes: List[SolidBox] = list(boxes)
        self.query_counts: Dict[str, int] = {"overlap": 0, "raycast": 0, "box_cast": 0}

    # ------------------------------------------------------------------
    # Geometry helpers
    # ------------------------------------------------------------------

    def add_box(self, min_x: float, min_y: float, max_x: float, max_y: float) -> SolidBox:
        box = SolidBox(min_x, min_y, max_x, max_y)
        self.boxes.append(box)
        return box

    def add_platform(
        self,
        x_start: float,
        x_end: float,
        top: float,
        thickness: float = 1.0,
    ) -> SolidBox:
        """Add a horizontal slab whose walkable surface is at `top`."""
        return self.add_box(x_start, top - thickness, x_end, top)

    def remove_box(self, box: SolidBox) -> None:
        self.boxes.remove(box)

    @property
    def total_queries(self) -> int:
        return sum(self.query_counts.values())

    # ------------------------------------------------------------------
    # CollisionQuery protocol
    # ------------------------------------------------------------------

    def overlap_circle(self, center: Vec2, radius: float) -> bool:
        self.query_counts["overlap"] += 1
        cx, cy = center
        for b in self.boxes:
            nx = min(max(cx, b.min_x), b.max_x)
            ny = min(max(cy, b.min_y), b.max_y)
            if (cx - nx) ** 2 + (cy - ny) ** 2 <= radius * radius:
                return True
        return False

    def raycast(
        self,
        origin: Vec2,
        direction: Vec2,
        max_distance: float,
    ) -> Optional[RayHit]:
        self.query_counts["raycast"] += 1
        return self._cast(origin, normalized(direction), max_distance, 0.0, 0.0)

    def box_cast(
        self,
        center: Vec2,
        size: Vec2,
        direction: Vec2,
        max_distance: float,
    ) -> Optional[RayHit]:
        self.query_counts["box_cast"] += 1
        return self._cast(center, normalized(direction), max_distance, size[0] / 2.0, size[1] / 2.0)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _cast(
        self,
        origin: Vec2,
        direction: Vec2,
        max_distance: float,
        half_w: float,
        half_h: float,
    ) -> Optional[RayHit]:
        if direction == (0.0, 0.0):
            return None

        best: Optional[float] = None
        for b in self.boxes:
            t = _ray_box(origin, direction, b.expanded(half_w, half_h))
            if t is None or t > max_distance:
                continue
            if best is None or t < best:
                best = t

        if best is None:
            return None
        point = (origin[0] + direction[0] * best, origin[1] + direction[1] * best)
        return RayHit(point=point, distance=best)


@dataclass
class MovableReference:
    """ReferencePoint stand-in: tests move `position` between ticks."""

    position: Vec2 = (0.0, 0.0)
    calls: int = field(default=0, compare=False)

    def __call__(self) -> Vec2:
        self.calls += 1
        return self.position


def flat_ground_world(x_start: float = -10.0, x_end: float = 10.0, top: float = 0.0) -> FakeCollisionWorld:
    """Single solid ground line with its surface at `top`."""
    world = FakeCollisionWorld()
    world.add_platform(x_start, x_end, top)
    return world
