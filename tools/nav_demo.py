#!/usr/bin/env python3
"""
tools/nav_demo.py

Minimal harness to sanity-check NavEngine wiring without a game engine.

Default mode:
    - Builds a small level out of FakeCollisionWorld boxes
      (ground with a gap, a raised ledge, a floating block)
    - Walks a fake player along the ground for N ticks, calling
      tick() and movement_action() for an agent chasing the player
    - Builds a flight waypoint network and runs A* across it
    - Prints decisions, path and a grid map

Use --dashboard to render the rich dashboard once at the end, and
--events PATH to write every monitoring event as JSON lines.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

# ---------------------------------------------------------------------------
# Ensure src/ is on sys.path when running as a script
# ---------------------------------------------------------------------------

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# ---------------------------------------------------------------------------
# Imports from the project
# ---------------------------------------------------------------------------

from app import build_nav_engine, configure_logging  # type: ignore[import]
from contracts.types import Bounds  # type: ignore[import]
from monitoring.dashboard_tui import NavDashboard, render_ascii_map  # type: ignore[import]
from nav_core.testing.fakes import FakeCollisionWorld, MovableReference  # type: ignore[import]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _print_header(title: str) -> None:
    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)


def build_demo_level() -> FakeCollisionWorld:
    """Ground with a gap, one raised ledge and a floating block."""
    world = FakeCollisionWorld()
    world.add_platform(-40.0, 10.0, 0.0)     # main ground
    world.add_platform(14.0, 60.0, 0.0)      # ground after the gap
    world.add_platform(20.0, 30.0, 4.0, thickness=0.5)   # raised ledge
    world.add_box(36.0, 12.0, 44.0, 14.0)    # floating block (flight obstacle)
    return world


def run_demo(ticks: int, profile: Optional[str], dashboard: bool, events: Optional[Path]) -> None:
    world = build_demo_level()
    player = MovableReference(position=(0.0, 1.0))
    runtime = build_nav_engine(
        world,
        player,
        profile_name=profile,
        event_log_path=events,
    )
    engine = runtime.engine
    board = NavDashboard(runtime.bus) if dashboard else None

    try:
        _print_header(f"Walking player for {ticks} ticks (profile={engine.profile.name})")
        agent = (-20.0, 1.0)
        for i in range(ticks):
            player.position = (player.position[0] + 0.5, 1.0)
            report = engine.tick()
            decision = engine.explain_movement(agent, player.position)
            step = {"move_left": -0.5, "move_right": 0.5}.get(decision.action.value, 0.0)
            agent = (agent[0] + step, agent[1])
            if i % 10 == 0:
                print(
                    f"tick={report.tick:4d} player=({player.position[0]:6.1f},{player.position[1]:4.1f}) "
                    f"agent=({agent[0]:6.1f},{agent[1]:4.1f}) action={decision.action.value:<10} "
                    f"source={decision.source:<8} cells={len(engine.graph)} "
                    f"generated={report.generated} pruned={report.pruned}"
                )

        _print_header("Flight waypoints")
        nodes = engine.build_waypoints(Bounds(-20.0, 0.0, 60.0, 20.0))
        start = engine.nearest_waypoint((-20.0, 6.0))
        goal = engine.furthest_waypoint((-20.0, 6.0))
        print(f"nodes={nodes}")
        if start is not None and goal is not None:
            result = engine.find_waypoint_path(start, goal)
            if result.success:
                coords = ", ".join(f"({x:.0f},{y:.0f})" for x, y in result.positions)
                print(f"path cost={result.cost:.2f} expanded={result.expanded}: {coords}")
            else:
                print(f"no path: {result.reason}")

        _print_header("Grid map")
        snap = engine.publish_snapshot()
        print(render_ascii_map(snap))

        if board is not None:
            board.attach_snapshot(snap)
            _print_header("Dashboard")
            board.run(refresh_per_second=10.0, max_frames=1)
    finally:
        runtime.close()


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Navigation engine demo on a fake level.")
    parser.add_argument("--ticks", type=int, default=80, help="number of player steps")
    parser.add_argument("--profile", default=None, help="nav.yaml profile (default: test_small)")
    parser.add_argument("--dashboard", action="store_true", help="render the rich dashboard once")
    parser.add_argument("--events", type=Path, default=None, help="write monitoring events as JSONL")
    parser.add_argument("--log-level", default="INFO")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_arg_parser().parse_args(argv)
    configure_logging(args.log_level)
    run_demo(
        ticks=args.ticks,
        profile=args.profile or "test_small",
        dashboard=args.dashboard,
        events=args.events,
    )


if __name__ == "__main__":
    main()
