# tests/test_direction_field.py
"""
Tests for nav_core.nav.field.DirectionFieldCache.

Covers:
- Zero direction at the goal, unit vectors elsewhere
- Horizontal-only propagation toward the goal
- Cache hits, jitter reuse (and when it is skipped), LRU bound
- Invalidation by graph mutation (stale fields are misses, not crashes)
- Visit budget truncation and empty fields for unreachable goals
"""

from __future__ import annotations

import math

from monitoring.bus import EventBus
from monitoring.events import EventType, MonitoringEvent
from nav_core.nav.field import DirectionFieldCache
from nav_core.nav.grid import GridNavGraph


def test_goal_has_zero_direction_and_others_are_unit(scenario_graph: GridNavGraph) -> None:
    cache = DirectionFieldCache(scenario_graph)
    field = cache.field_for((4, 1))

    assert field.seed_cell == (4, 1)
    assert field.direction_at((4, 1)) == (0.0, 0.0)
    for cell, (dx, dy) in field.directions.items():
        if cell == (4, 1):
            continue
        assert math.isclose(math.hypot(dx, dy), 1.0)


def test_directions_point_toward_goal(scenario_graph: GridNavGraph) -> None:
    field = DirectionFieldCache(scenario_graph).field_for((4, 1))

    for x in range(-5, 4):
        assert field.direction_at((x, 1)) == (1.0, 0.0)
    assert field.direction_at((5, 1)) == (-1.0, 0.0)


def test_propagation_stays_on_the_goal_row(scenario_graph: GridNavGraph) -> None:
    field = DirectionFieldCache(scenario_graph).field_for((0, 1))

    assert len(field) == 11
    assert (0, 2) not in field


def test_repeated_query_is_a_cache_hit(scenario_graph: GridNavGraph) -> None:
    cache = DirectionFieldCache(scenario_graph)
    first = cache.field_for((4, 1))
    second = cache.field_for((4, 1))

    assert first is second
    assert cache.hits == 1
    assert cache.misses == 1


def test_goal_jitter_reuses_last_field(scenario_graph: GridNavGraph) -> None:
    cache = DirectionFieldCache(scenario_graph, jitter_tolerance=2.0)
    first = cache.field_for((4, 1))

    assert cache.field_for((5, 1)) is first
    assert cache.field_for((0, 1)) is not first


def test_jitter_reuse_skipped_when_caller_is_near_goal(scenario_graph: GridNavGraph) -> None:
    cache = DirectionFieldCache(scenario_graph, jitter_tolerance=2.0)
    first = cache.field_for((4, 1))

    exact = cache.field_for((5, 1), near=(5, 1))

    assert exact is not first
    assert exact.goal_cell == (5, 1)
    assert exact.direction_at((5, 1)) == (0.0, 0.0)
    assert cache.field_for((4, 1), near=(10, 1)) is first


def test_graph_mutation_invalidates_fields(scenario_graph: GridNavGraph) -> None:
    cache = DirectionFieldCache(scenario_graph)
    before = cache.field_for((0, 1))

    scenario_graph.prune_beyond((0.0, 1.0), 4.0)
    after = cache.field_for((0, 1))

    assert after is not before
    assert after.revision == scenario_graph.revision
    assert all(cell in scenario_graph for cell in after.directions)


def test_visit_budget_truncates(scenario_graph: GridNavGraph) -> None:
    field = DirectionFieldCache(scenario_graph, max_visits=3).field_for((0, 1))

    assert field.truncated
    assert len(field) == 3


def test_unreachable_goal_gives_empty_field(scenario_graph: GridNavGraph) -> None:
    field = DirectionFieldCache(scenario_graph).field_for((50, 1))

    assert field.empty
    assert field.seed_cell is None


def test_cache_is_bounded(scenario_graph: GridNavGraph) -> None:
    cache = DirectionFieldCache(scenario_graph, jitter_tolerance=0.0, max_cached_fields=2)
    for goal in ((-4, 1), (0, 1), (4, 1)):
        cache.field_for(goal)

    assert len(cache) == 2


def test_field_computation_is_published(scenario_graph: GridNavGraph) -> None:
    bus = EventBus()
    seen: list[MonitoringEvent] = []
    bus.subscribe(seen.append)

    DirectionFieldCache(scenario_graph, bus=bus).field_for((0, 1))

    assert [e.event_type for e in seen] == [EventType.FIELD_COMPUTED]
    assert seen[0].payload["cells"] == 11
