# tests/test_nav_pathfinder.py
"""
Unit tests for the A* search over WaypointGraph.

We build small hand-wired waypoint graphs, so no collision world is
required.
"""

from __future__ import annotations

import math

import pytest

from monitoring.bus import EventBus
from monitoring.events import EventType, MonitoringEvent
from nav_core.nav.pathfinder import (
    REASON_EXHAUSTED,
    REASON_NO_PATH,
    AStarSearch,
    find_path,
)
from nav_core.nav.waypoints import WaypointGraph, WaypointNode


def make_chain(*points) -> tuple[WaypointGraph, list[WaypointNode]]:
    """Bidirectional chain through `points` in order."""
    graph = WaypointGraph()
    nodes = [graph.add_node(p) for p in points]
    for a, b in zip(nodes, nodes[1:]):
        graph.connect(a, b)
    return graph, nodes


def test_path_through_middle_node() -> None:
    graph, (a, b, c) = make_chain((0.0, 0.0), (5.0, 0.0), (10.0, 0.0))

    result = AStarSearch(graph)(a, c)

    assert result.success
    assert list(result.path) == [a, b, c]
    assert result.cost == pytest.approx(10.0)
    assert result.positions == ((0.0, 0.0), (5.0, 0.0), (10.0, 0.0))


def test_shorter_detour_beats_fewer_hops() -> None:
    graph = WaypointGraph()
    a = graph.add_node((0.0, 0.0))
    up = graph.add_node((5.0, 1.0))
    far = graph.add_node((5.0, 20.0))
    goal = graph.add_node((10.0, 0.0))
    graph.connect(a, up)
    graph.connect(up, goal)
    graph.connect(a, far)
    graph.connect(far, goal)

    result = AStarSearch(graph).find_path(a, goal)

    assert list(result.path) == [a, up, goal]
    assert result.cost == pytest.approx(2 * math.hypot(5.0, 1.0))


def test_disconnected_nodes_return_no_path() -> None:
    graph, (a, b) = make_chain((0.0, 0.0), (5.0, 0.0))
    island = graph.add_node((50.0, 0.0))

    result = AStarSearch(graph).find_path(a, island)

    assert not result.success
    assert result.reason == REASON_NO_PATH
    assert result.path == ()
    assert len(result) == 0


def test_start_equals_goal_costs_nothing() -> None:
    graph, (a, _) = make_chain((0.0, 0.0), (5.0, 0.0))

    result = AStarSearch(graph).find_path(a, a)

    assert result.success
    assert list(result.path) == [a]
    assert result.cost == 0.0


def test_missing_endpoint_is_misuse() -> None:
    graph, (a, _) = make_chain((0.0, 0.0), (5.0, 0.0))
    search = AStarSearch(graph)

    with pytest.raises(ValueError):
        search.find_path(None, a)  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        find_path(a, None)  # type: ignore[arg-type]


def test_foreign_node_is_misuse() -> None:
    graph, (a, _) = make_chain((0.0, 0.0), (5.0, 0.0))
    _, (stranger, _) = make_chain((0.0, 0.0), (5.0, 0.0))

    with pytest.raises(ValueError):
        AStarSearch(graph).find_path(a, stranger)


def test_expansion_budget_is_reported() -> None:
    _, nodes = make_chain(*[(float(x), 0.0) for x in range(0, 20, 2)])

    result = find_path(nodes[0], nodes[-1], max_expansions=2)

    assert not result.success
    assert result.reason == REASON_EXHAUSTED
    assert result.expanded == 2


def test_goal_reached_on_the_last_allowed_expansion() -> None:
    _, (a, b) = make_chain((0.0, 0.0), (5.0, 0.0))

    result = find_path(a, b, max_expansions=1)

    assert result.success
    assert list(result.path) == [a, b]
    assert result.reason is None


def test_repeated_searches_do_not_leak_state() -> None:
    graph, (a, b, c, d) = make_chain((0.0, 0.0), (2.0, 0.0), (4.0, 0.0), (6.0, 0.0))
    search = AStarSearch(graph)

    first = search.find_path(a, d)
    reverse = search.find_path(d, a)
    again = search.find_path(a, d)

    assert list(first.path) == [a, b, c, d]
    assert list(reverse.path) == [d, c, b, a]
    assert again.path == first.path
    assert again.cost == first.cost
    assert search.last_result is again


def test_directed_edges_are_respected() -> None:
    graph = WaypointGraph()
    a = graph.add_node((0.0, 0.0))
    b = graph.add_node((3.0, 0.0))
    graph.connect(a, b, bidirectional=False)

    assert find_path(a, b).success
    assert not find_path(b, a).success


def test_search_publishes_outcome() -> None:
    bus = EventBus()
    seen: list[MonitoringEvent] = []
    bus.subscribe(seen.append)
    graph, (a, b) = make_chain((0.0, 0.0), (5.0, 0.0))
    island = graph.add_node((50.0, 0.0))
    search = AStarSearch(graph, bus=bus)

    search.find_path(a, b)
    search.find_path(a, island)

    assert [e.event_type for e in seen] == [EventType.PATH_FOUND, EventType.PATH_NOT_FOUND]
    assert seen[0].payload["path"] == [0, 1]
    assert seen[1].payload["reason"] == REASON_NO_PATH
