# src/nav_core/occupancy.py
"""
Occupancy helpers for nav_core.

This is the single layer that decides, for navigation purposes:
    - whether a world point is solid
    - whether a world point has ground support below it
    - whether a straight segment is unobstructed

Every other component (grid graph, waypoint synthesis, flight node
placement) goes through an OccupancyOracle instead of probing the host
physics directly, so the ground-probe rules exist exactly once.

This module is intentionally stateless and does NOT:
    - Cache results (the grid graph owns its own classification map)
    - Know about grid cells or spacing
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from contracts.physics import CollisionQuery
from contracts.types import Vec2, distance, normalized, rotated, vec_sub

DOWN: Vec2 = (0.0, -1.0)


@dataclass
class GroundProbeProfile:
    """
    Encapsulates the ground-support probe policy.

    Parameters:
        probe_heights:
            Downward offsets at which a small overlap circle is tested.
            Several heights catch thin platforms and uneven tops.

        check_radius:
            Radius of the overlap circles (and half-width of the box cast).

        check_distance:
            Default maximum probe distance for the box cast and ray fan.

        clear_radius_factor:
            Fraction of check_radius used for the "is this point empty"
            test, so points resting just above a surface still count as open.

        fan_angles:
            Degrees from straight down for the final arc of angled rays.
    """

    probe_heights: Tuple[float, ...] = (0.25, 0.5, 0.75, 1.0, 1.5, 2.0)
    check_radius: float = 0.3
    check_distance: float = 2.0
    clear_radius_factor: float = 0.7
    fan_angles: Tuple[float, ...] = field(
        default_factory=lambda: (-30.0, -15.0, 0.0, 15.0, 30.0)
    )

    @property
    def clear_radius(self) -> float:
        return self.check_radius * self.clear_radius_factor


class OccupancyOracle:
    """
    Pure query wrapper around a CollisionQuery implementation.

    Callers must tolerate false negatives near geometry seams: a single
    "no ground" answer is not permanent, the next generation pass probes
    again.
    """

    def __init__(
        self,
        physics: CollisionQuery,
        profile: Optional[GroundProbeProfile] = None,
    ) -> None:
        self._physics = physics
        self._profile = profile or GroundProbeProfile()

    @property
    def profile(self) -> GroundProbeProfile:
        return self._profile

    # ------------------------------------------------------------------
    # Point queries
    # ------------------------------------------------------------------

    def is_solid(self, point: Vec2, radius: Optional[float] = None) -> bool:
        """
        Decide if `point` is inside solid geometry.

        The default radius is the reduced "clear" radius used when deciding
        whether a grid sample is empty space.
        """
        r = self._profile.clear_radius if radius is None else radius
        return bool(self._physics.overlap_circle(point, r))

    def is_area_clear(self, point: Vec2, radius: float) -> bool:
        """True if a circle of `radius` at `point` touches nothing solid."""
        return not self._physics.overlap_circle(point, radius)

    def has_ground_below(self, point: Vec2, probe_distance: Optional[float] = None) -> bool:
        """
        Decide if there is ground support below `point`.

        Behavior (first success wins):
            1. overlap circles at each probe height (within probe_distance)
            2. a thin box cast straight down
            3. a fan of angled rays

        Only when all three miss is the answer "no ground".
        """
        p = self._profile
        reach = p.check_distance if probe_distance is None else probe_distance

        for offset in p.probe_heights:
            if offset > reach:
                continue
            if self._physics.overlap_circle((point[0], point[1] - offset), p.check_radius):
                return True

        hit = self._physics.box_cast(point, (p.check_radius * 2.0, 0.1), DOWN, reach)
        if hit is not None:
            return True

        for angle in p.fan_angles:
            direction = rotated(DOWN, angle)
            if self._physics.raycast(point, direction, reach) is not None:
                return True

        return False

    def is_navigable(self, point: Vec2) -> bool:
        """Empty at `point` AND ground support below it."""
        return not self.is_solid(point) and self.has_ground_below(point)

    # ------------------------------------------------------------------
    # Segment queries
    # ------------------------------------------------------------------

    def is_line_clear(self, start: Vec2, end: Vec2) -> bool:
        """True if the straight segment start -> end hits nothing solid."""
        length = distance(start, end)
        if length < 1e-9:
            return not self.is_solid(start)
        direction = normalized(vec_sub(end, start))
        return self._physics.raycast(start, direction, length) is None

    def ground_height(self, point: Vec2, max_distance: float = float("inf")) -> Optional[float]:
        """
        Height of the first surface straight below `point`, or None.

        Used to seat flight layers above terrain.
        """
        hit = self._physics.raycast(point, DOWN, max_distance)
        if hit is None:
            return None
        return hit.point[1]


def probe_profile_from_config(cfg) -> GroundProbeProfile:
    """Build a GroundProbeProfile from a nav_env GroundProbeConfig."""
    return GroundProbeProfile(
        probe_heights=tuple(cfg.probe_heights),
        check_radius=float(cfg.check_radius),
        check_distance=float(cfg.check_distance),
        clear_radius_factor=float(cfg.clear_radius_factor),
        fan_angles=tuple(cfg.fan_angles),
    )
