# collision/physics query boundary + reference point boundary
# src/contracts/physics.py

from __future__ import annotations

from typing import Optional, Protocol

from .types import RayHit, Vec2


class CollisionQuery(Protocol):
    """Interface to the host game's collision layer.

    Only the navigability layer (ground / solid platforms) is queried. The
    navigation engine works against any implementation of these three calls:
    - point/circle overlap
    - ray cast returning the nearest hit
    - box cast (a swept axis-aligned box) returning the nearest hit
    """

    def overlap_circle(self, center: Vec2, radius: float) -> bool:
        """Return True if a circle at `center` touches any solid geometry."""
        ...

    def raycast(
        self,
        origin: Vec2,
        direction: Vec2,
        max_distance: float,
    ) -> Optional[RayHit]:
        """Cast a ray; return the nearest hit within `max_distance` or None."""
        ...

    def box_cast(
        self,
        center: Vec2,
        size: Vec2,
        direction: Vec2,
        max_distance: float,
    ) -> Optional[RayHit]:
        """Sweep a box of `size` from `center`; return the nearest hit or None."""
        ...


class ReferencePoint(Protocol):
    """Supplies the current world position of the entity the graph follows.

    Typically the player. Called at most once per maintainer tick.
    """

    def __call__(self) -> Vec2:
        ...
