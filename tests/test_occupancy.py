# tests/test_occupancy.py
"""
Tests for nav_core.occupancy.OccupancyOracle over FakeCollisionWorld.

Covers:
- Solid / clear point queries
- Multi-sample ground probe (overlap heights, box cast, angled ray fan)
- Line-of-sight and ground height helpers
"""

from __future__ import annotations

from nav_core.occupancy import GroundProbeProfile, OccupancyOracle
from nav_core.testing.fakes import FakeCollisionWorld, flat_ground_world


def test_point_inside_ground_is_solid() -> None:
    oracle = OccupancyOracle(flat_ground_world())
    assert oracle.is_solid((0.0, -0.5))
    assert not oracle.is_solid((0.0, 1.0))


def test_clear_radius_is_reduced_check_radius() -> None:
    oracle = OccupancyOracle(flat_ground_world())
    # 0.25 above the surface: inside check_radius (0.3) but outside 0.3 * 0.7
    assert not oracle.is_solid((0.0, 0.25))
    assert oracle.is_solid((0.0, 0.25), radius=0.3)


def test_ground_below_found_by_overlap_probe() -> None:
    world = flat_ground_world()
    oracle = OccupancyOracle(world)
    assert oracle.has_ground_below((0.0, 1.0))
    # resolved by the overlap circles alone
    assert world.query_counts["box_cast"] == 0


def test_no_ground_far_above_surface() -> None:
    oracle = OccupancyOracle(flat_ground_world())
    assert not oracle.has_ground_below((0.0, 3.0))


def test_probe_distance_limits_reach() -> None:
    oracle = OccupancyOracle(flat_ground_world())
    assert oracle.has_ground_below((0.0, 2.0))
    assert not oracle.has_ground_below((0.0, 2.0), probe_distance=0.5)


def test_box_cast_catches_thin_platform_between_overlap_samples() -> None:
    world = FakeCollisionWorld()
    world.add_platform(-1.0, 1.0, 0.0, thickness=0.02)
    profile = GroundProbeProfile(probe_heights=(1.0,), check_radius=0.1)
    oracle = OccupancyOracle(world, profile)

    assert oracle.has_ground_below((0.0, 1.6))
    assert world.query_counts["box_cast"] == 1


def test_ray_fan_catches_ground_off_to_the_side() -> None:
    world = FakeCollisionWorld()
    # ledge to the right, not straight below the probe point
    world.add_platform(0.6, 3.0, 0.0)
    profile = GroundProbeProfile(probe_heights=(), check_radius=0.1)
    oracle = OccupancyOracle(world, profile)

    assert oracle.has_ground_below((0.0, 1.0))
    assert world.query_counts["raycast"] >= 1


def test_line_clear_and_blocked() -> None:
    world = FakeCollisionWorld()
    world.add_box(4.0, -1.0, 5.0, 10.0)
    oracle = OccupancyOracle(world)

    assert oracle.is_line_clear((0.0, 0.0), (3.0, 0.0))
    assert not oracle.is_line_clear((0.0, 0.0), (8.0, 0.0))


def test_ground_height_reports_surface() -> None:
    world = FakeCollisionWorld()
    world.add_platform(-5.0, 5.0, 2.5)
    oracle = OccupancyOracle(world)

    assert oracle.ground_height((0.0, 10.0)) == 2.5
    assert oracle.ground_height((9.0, 10.0)) is None
