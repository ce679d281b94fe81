#tests/test_monitoring_dashboard_tui.py
"""
Smoke tests for monitoring.dashboard_tui.NavDashboard and render_ascii_map.

Covers:
- Layout builds cleanly
- Event updates patch internal state
- ASCII map glyphs and cropping
"""

from __future__ import annotations

import io

from rich.console import Console

from monitoring.bus import EventBus
from monitoring.dashboard_tui import NavDashboard, render_ascii_map
from monitoring.events import EventType, MonitoringEvent
from nav_core.nav.grid import GridNavGraph
from nav_core.snapshot import GraphSnapshot


def make_event(event_type: EventType, payload: dict) -> MonitoringEvent:
    return MonitoringEvent(
        ts=0.0,
        module="test",
        event_type=event_type,
        message="",
        payload=payload,
        correlation_id=None,
    )


def test_dashboard_handles_navigation_events_and_renders():
    bus = EventBus()
    dashboard = NavDashboard(bus, console=Console(file=io.StringIO()))

    bus.publish(make_event(EventType.GRAPH_REBUILT, {"cells": 22}))
    bus.publish(
        make_event(
            EventType.GRAPH_GENERATED,
            {"center": [0.0, 1.0], "radius": 12.0, "added": 8, "total": 30, "reason": "moved"},
        )
    )
    bus.publish(make_event(EventType.GRAPH_PRUNED, {"removed": 4, "remaining": 26}))
    bus.publish(make_event(EventType.FIELD_COMPUTED, {"cells": 11, "revision": 7}))
    bus.publish(
        make_event(
            EventType.MOVEMENT_DECIDED,
            {"action": "move_right", "source": "field", "height_difference": 1},
        )
    )
    bus.publish(make_event(EventType.WAYPOINTS_BUILT, {"nodes": 24, "edges": 90, "islands": 1}))
    bus.publish(make_event(EventType.PATH_FOUND, {"path": [0, 3, 7], "cost": 9.0}))

    state = dashboard.state
    assert state["rebuilds"] == 1
    assert state["last_generated"]["added"] == 8
    assert state["last_pruned"]["removed"] == 4
    assert state["fields_computed"] == 1
    assert state["revision"] == 7
    assert state["last_action"] == "move_right"
    assert state["last_height_difference"] == 1
    assert state["waypoints"] == {"nodes": 24, "edges": 90, "islands": 1}
    assert state["last_path"] == {"success": True, "length": 3, "reason": None}

    bus.publish(make_event(EventType.PATH_NOT_FOUND, {"reason": "no_path_found"}))
    assert state["last_path"]["reason"] == "no_path_found"

    layout = dashboard.build_layout()
    assert layout is not None


def test_dashboard_stops_listening_after_close():
    bus = EventBus()
    dashboard = NavDashboard(bus, console=Console(file=io.StringIO()))
    dashboard.close()

    bus.publish(make_event(EventType.GRAPH_REBUILT, {}))

    assert dashboard.state["rebuilds"] == 0


def test_dashboard_attach_snapshot_and_run_one_frame(scenario_graph: GridNavGraph):
    bus = EventBus()
    dashboard = NavDashboard(bus, console=Console(file=io.StringIO()))

    dashboard.attach_snapshot(scenario_graph.snapshot(reference=(0.0, 1.0)))

    assert dashboard.state["base"] == 18
    assert dashboard.state["edge"] == 4
    dashboard.run(refresh_per_second=50.0, max_frames=1)


def test_ascii_map_glyphs(scenario_graph: GridNavGraph):
    snapshot = scenario_graph.snapshot(reference=(0.0, 1.0), last_path=((2.0, 1.0), (4.0, 1.0)))

    assert render_ascii_map(snapshot).splitlines() == [
        "|.........|",
        "|....@**..|",
    ]


def test_ascii_map_crops_around_reference(scenario_graph: GridNavGraph):
    snapshot = scenario_graph.snapshot(reference=(0.0, 1.0))

    assert render_ascii_map(snapshot, max_width=3).splitlines() == ["...", ".@."]


def test_ascii_map_of_empty_graph():
    snapshot = GraphSnapshot(cells={}, revision=0, node_spacing=2.0, node_height=1.0)
    assert render_ascii_map(snapshot) == "<empty graph>"
