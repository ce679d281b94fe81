# NavProfile and per-component config dataclasses
# src/nav_env/schema.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass
class GridConfig:
    """Sampling lattice of the continuous grid graph."""
    node_spacing: float = 2.0          # horizontal distance between samples
    node_height: float = 1.0           # vertical distance between samples
    window_padding: float = 1.2        # squared-radius factor when sweeping a window
    same_row_window: int = 5           # cells; same-row snap window for closest-cell lookup
    below_preference: float = 0.8      # distance weight for cells at or below the query
    max_snap_distance: Optional[float] = 8.0  # grid units; None = unlimited
    max_probes_per_window: Optional[int] = None


@dataclass
class GroundProbeConfig:
    """Multi-sample ground support probe."""
    probe_heights: Tuple[float, ...] = (0.25, 0.5, 0.75, 1.0, 1.5, 2.0)
    check_radius: float = 0.3
    check_distance: float = 2.0
    clear_radius_factor: float = 0.7
    fan_angles: Tuple[float, ...] = (-30.0, -15.0, 0.0, 15.0, 30.0)


@dataclass
class MaintainerConfig:
    """Cadence of windowed generation / pruning around the reference point."""
    coverage_radius: float = 30.0
    update_distance: float = 10.0      # reference displacement that triggers generation
    min_nodes_in_radius: int = 20      # "enough nodes" coverage sample threshold
    check_every_ticks: int = 30        # generation check cadence
    prune_every_ticks: int = 300       # prune cadence (coarser)
    cleanup_factor: float = 2.0        # prune distance = coverage_radius * factor


@dataclass
class FieldConfig:
    """Direction field cache behavior."""
    jitter_tolerance: float = 2.0      # grid units; reuse the last field within this
    max_visits: Optional[int] = None   # BFS node-visit budget per computation
    max_cached_fields: int = 32


@dataclass
class MovementConfig:
    """Movement query thresholds."""
    dead_zone: float = 0.3
    direction_threshold: float = 0.1
    densify_radius: float = 5.0
    densify_reach_factor: float = 1.5  # densify only within coverage_radius * factor


@dataclass
class WaypointConfig:
    """Waypoint placement and connection synthesis."""
    node_spacing: float = 2.0
    vertical_spacing: float = 2.0
    vertical_layers: int = 4
    min_height_above_ground: float = 4.0
    obstacle_check_radius: float = 1.0
    bounds_padding: float = 2.0
    max_connection_distance: float = 8.0
    max_height_difference: float = 5.0
    max_connections_per_node: int = 6
    horizontal_preference: float = 1.0
    same_layer_bonus: float = 0.5


@dataclass
class SearchConfig:
    """A* guard rails."""
    max_expansions: Optional[int] = 10_000


@dataclass
class NavProfile:
    """Resolved navigation configuration for one active profile."""
    name: str
    grid: GridConfig = field(default_factory=GridConfig)
    ground_probe: GroundProbeConfig = field(default_factory=GroundProbeConfig)
    maintainer: MaintainerConfig = field(default_factory=MaintainerConfig)
    direction_field: FieldConfig = field(default_factory=FieldConfig)
    movement: MovementConfig = field(default_factory=MovementConfig)
    waypoints: WaypointConfig = field(default_factory=WaypointConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
