# rich-based TUI dashboard
# src/monitoring/dashboard_tui.py
"""
TUI dashboard for the navigation engine.

A lightweight terminal UI (using `rich`) that subscribes to the monitoring
EventBus and renders:

- Grid graph:
    - Base / Edge cell counts and revision
    - Last generation and prune
- Movement:
    - Last action, its source (field / fallback) and height difference
    - Field computations seen
- Waypoints:
    - Network size and island count
    - Last path outcome and length
- Map:
    - ASCII rendering of the latest GraphSnapshot handed to the dashboard

This runs entirely offline and is never required for correctness.
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from contracts.types import NodeClassification
from nav_core.snapshot import GraphSnapshot

from .bus import EventBus
from .events import EventType, MonitoringEvent


# Map glyphs
GLYPH_BASE = "."
GLYPH_EDGE = "|"
GLYPH_EMPTY = " "
GLYPH_PATH = "*"
GLYPH_REFERENCE = "@"


def render_ascii_map(snapshot: GraphSnapshot, max_width: int = 80, max_height: int = 24) -> str:
    """
    Render a GraphSnapshot as text, highest row first.

    Cells outside a max_width x max_height window centered on the
    reference (or the graph bounds center) are cropped.
    """
    bounds = snapshot.cell_bounds
    if bounds is None:
        return "<empty graph>"

    min_x, min_y, max_x, max_y = bounds
    if snapshot.reference is not None:
        cx = int(round(snapshot.reference[0] / snapshot.node_spacing))
        cy = int(round(snapshot.reference[1] / snapshot.node_height))
    else:
        cx = (min_x + max_x) // 2
        cy = (min_y + max_y) // 2
    x0 = max(min_x, cx - max_width // 2)
    x1 = min(max_x, x0 + max_width - 1)
    y0 = max(min_y, cy - max_height // 2)
    y1 = min(max_y, y0 + max_height - 1)

    path_cells = {
        (int(round(p[0] / snapshot.node_spacing)), int(round(p[1] / snapshot.node_height)))
        for p in snapshot.last_path
    }
    ref_cell = (cx, cy) if snapshot.reference is not None else None

    lines: List[str] = []
    for y in range(y1, y0 - 1, -1):
        row = []
        for x in range(x0, x1 + 1):
            cell = (x, y)
            if cell == ref_cell:
                row.append(GLYPH_REFERENCE)
            elif cell in path_cells:
                row.append(GLYPH_PATH)
            else:
                cls = snapshot.classification(cell)
                if cls is NodeClassification.EDGE:
                    row.append(GLYPH_EDGE)
                elif cls is NodeClassification.BASE:
                    row.append(GLYPH_BASE)
                else:
                    row.append(GLYPH_EMPTY)
        lines.append("".join(row).rstrip())
    return "\n".join(lines)


# ============================================================
# TUI Dashboard
# ============================================================

class NavDashboard:
    """
    Live terminal dashboard bound to a monitoring.EventBus.

    It consumes MonitoringEvents and keeps a small in-memory state
    representation, which is rendered periodically via rich.
    """

    def __init__(self, bus: EventBus, console: Optional[Console] = None) -> None:
        self._bus = bus
        self._console = console or Console()
        self._snapshot: Optional[GraphSnapshot] = None

        self._state: Dict[str, Any] = {
            "base": 0,
            "edge": 0,
            "revision": None,
            "last_generated": None,    # {"added", "total", "reason"}
            "last_pruned": None,       # {"removed", "remaining"}
            "rebuilds": 0,
            "fields_computed": 0,
            "last_action": None,
            "last_source": None,
            "last_height_difference": None,
            "decisions": 0,
            "waypoints": {"nodes": 0, "edges": 0, "islands": 0},
            "last_path": None,         # {"success", "length", "reason"}
        }

        self._bus.subscribe(self._on_event)

    @property
    def state(self) -> Dict[str, Any]:
        return self._state

    def close(self) -> None:
        self._bus.unsubscribe(self._on_event)

    def attach_snapshot(self, snapshot: GraphSnapshot) -> None:
        """Use `snapshot` for the map and the cell counters."""
        self._snapshot = snapshot
        self._state["base"] = snapshot.base_count
        self._state["edge"] = snapshot.edge_count
        self._state["revision"] = snapshot.revision

    # --------------------------------------------------------
    # Event handler
    # --------------------------------------------------------

    def _on_event(self, event: MonitoringEvent) -> None:
        """
        Update dashboard state based on a MonitoringEvent.
        This should be cheap and non-blocking.
        """
        et = event.event_type
        p = event.payload

        if et == EventType.GRAPH_GENERATED:
            self._state["last_generated"] = {
                "added": p.get("added", 0),
                "total": p.get("total"),
                "reason": p.get("reason", ""),
            }

        elif et == EventType.GRAPH_PRUNED:
            self._state["last_pruned"] = {
                "removed": p.get("removed", 0),
                "remaining": p.get("remaining"),
            }

        elif et == EventType.GRAPH_REBUILT:
            self._state["rebuilds"] += 1

        elif et == EventType.FIELD_COMPUTED:
            self._state["fields_computed"] += 1
            if p.get("revision") is not None:
                self._state["revision"] = p["revision"]

        elif et == EventType.MOVEMENT_DECIDED:
            self._state["decisions"] += 1
            self._state["last_action"] = p.get("action")
            self._state["last_source"] = p.get("source")
            self._state["last_height_difference"] = p.get("height_difference")

        elif et == EventType.WAYPOINTS_BUILT:
            self._state["waypoints"] = {
                "nodes": p.get("nodes", 0),
                "edges": p.get("edges", 0),
                "islands": p.get("islands", 0),
            }

        elif et == EventType.PATH_FOUND:
            self._state["last_path"] = {
                "success": True,
                "length": len(p.get("path") or []),
                "reason": None,
            }

        elif et == EventType.PATH_NOT_FOUND:
            self._state["last_path"] = {
                "success": False,
                "length": 0,
                "reason": p.get("reason", "unknown"),
            }

        elif et == EventType.SNAPSHOT:
            self._state["base"] = p.get("base", self._state["base"])
            self._state["edge"] = p.get("edge", self._state["edge"])
            self._state["revision"] = p.get("revision", self._state["revision"])

    # --------------------------------------------------------
    # Rendering helpers
    # --------------------------------------------------------

    def _render_graph_panel(self) -> Panel:
        s = self._state
        table = Table.grid(pad_edge=False)
        table.add_column(justify="left")

        table.add_row(f"[bold]Base:[/bold] {s['base']}  [bold]Edge:[/bold] {s['edge']}")
        table.add_row(f"[bold]Revision:[/bold] {s['revision'] if s['revision'] is not None else '-'}")
        table.add_row(f"[bold]Rebuilds:[/bold] {s['rebuilds']}")

        gen = s["last_generated"]
        if gen:
            table.add_row(f"[bold]Last generate:[/bold] +{gen['added']} ({gen['reason']})")
        else:
            table.add_row("[bold]Last generate:[/bold] -")

        pruned = s["last_pruned"]
        if pruned:
            table.add_row(f"[bold]Last prune:[/bold] -{pruned['removed']}")
        else:
            table.add_row("[bold]Last prune:[/bold] -")

        return Panel(table, title="Grid Graph", border_style="cyan")

    def _render_movement_panel(self) -> Panel:
        s = self._state
        txt = Text()
        txt.append("Action: ", style="bold")
        txt.append(f"{s['last_action'] or '<none>'}\n")
        txt.append("Source: ", style="bold")
        txt.append(f"{s['last_source'] or '-'}\n")
        txt.append("Height diff: ", style="bold")
        dh = s["last_height_difference"]
        txt.append(f"{dh if dh is not None else '-'}\n")
        txt.append("Decisions: ", style="bold")
        txt.append(f"{s['decisions']}  ")
        txt.append("Fields: ", style="bold")
        txt.append(f"{s['fields_computed']}\n")
        return Panel(txt, title="Movement", border_style="green")

    def _render_waypoint_panel(self) -> Panel:
        s = self._state
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Metric", style="bold", width=12)
        table.add_column("Value", justify="right")
        table.add_row("Nodes", str(s["waypoints"]["nodes"]))
        table.add_row("Edges", str(s["waypoints"]["edges"]))
        table.add_row("Islands", str(s["waypoints"]["islands"]))

        last = s["last_path"]
        if last is None:
            table.add_row("Last path", "-")
        elif last["success"]:
            table.add_row("Last path", f"{last['length']} nodes")
        else:
            table.add_row("Last path", f"[red]{last['reason']}[/red]")

        return Panel(table, title="Waypoints", border_style="magenta")

    def _render_map_panel(self) -> Panel:
        if self._snapshot is None:
            body = Text("<no snapshot>")
        else:
            body = Text(render_ascii_map(self._snapshot))
        return Panel(body, title="Map", border_style="yellow")

    def build_layout(self) -> Layout:
        """Construct the overall layout for the dashboard."""
        layout = Layout()
        layout.split(
            Layout(name="top", size=10),
            Layout(name="map", ratio=1),
        )
        layout["top"].split_row(
            Layout(name="graph"),
            Layout(name="movement"),
            Layout(name="waypoints"),
        )
        layout["graph"].update(self._render_graph_panel())
        layout["movement"].update(self._render_movement_panel())
        layout["waypoints"].update(self._render_waypoint_panel())
        layout["map"].update(self._render_map_panel())
        return layout

    # --------------------------------------------------------
    # Main loop
    # --------------------------------------------------------

    def run(self, refresh_per_second: float = 4.0, max_frames: Optional[int] = None) -> None:
        """
        Run the TUI loop.

        Blocks the current thread; `max_frames` stops it after that many
        redraws (None runs until interrupted).
        """
        refresh_delay = 1.0 / max(refresh_per_second, 0.1)
        frames = 0
        with Live(self.build_layout(), console=self._console, refresh_per_second=refresh_per_second) as live:
            while max_frames is None or frames < max_frames:
                live.update(self.build_layout())
                frames += 1
                time.sleep(refresh_delay)
