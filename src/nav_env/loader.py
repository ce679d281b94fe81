from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

import yaml

from .schema import (
    FieldConfig,
    GridConfig,
    GroundProbeConfig,
    MaintainerConfig,
    MovementConfig,
    NavProfile,
    SearchConfig,
    WaypointConfig,
)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_ROOT = PROJECT_ROOT / "config"
DEFAULT_CONFIG_NAME = "nav.yaml"

T = TypeVar("T")

# section key in YAML -> dataclass
_SECTIONS: Dict[str, type] = {
    "grid": GridConfig,
    "ground_probe": GroundProbeConfig,
    "maintainer": MaintainerConfig,
    "direction_field": FieldConfig,
    "movement": MovementConfig,
    "waypoints": WaypointConfig,
    "search": SearchConfig,
}


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML config file and require a mapping at the top."""
    if not path.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at top of {path}, got {type(data)}")
    return data


def _select_profile(
    nav_cfg: Dict[str, Any],
    override: Optional[str] = None,
) -> Tuple[str, Dict[str, Any]]:
    """Return (active_profile_name, active_profile_mapping)."""
    profile_name = override or nav_cfg.get("profile")
    if not profile_name:
        raise ValueError("nav.yaml must define a 'profile' key.")
    profiles = nav_cfg.get("profiles")
    if not isinstance(profiles, dict):
        raise ValueError("nav.yaml must define a 'profiles' mapping.")
    if profile_name not in profiles:
        raise KeyError(f"Profile '{profile_name}' not found in nav.yaml profiles.")
    return profile_name, profiles[profile_name] or {}


def _build_section(cls: Type[T], raw: Any, section: str) -> T:
    """
    Build one config dataclass from a raw mapping.

    Unknown keys are rejected so typos in nav.yaml fail loudly instead of
    silently falling back to defaults. Lists become tuples for tuple fields.
    """
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise ValueError(f"Section '{section}' must be a mapping, got {type(raw)}")

    known = {f.name for f in dataclasses.fields(cls)}  # type: ignore[arg-type]
    unknown = set(raw) - known
    if unknown:
        raise ValueError(f"Unknown keys in section '{section}': {sorted(unknown)}")

    values = {k: tuple(v) if isinstance(v, list) else v for k, v in raw.items()}
    return cls(**values)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_nav_profile(
    name: Optional[str] = None,
    path: Optional[Path] = None,
) -> NavProfile:
    """Main entry point: returns a fully resolved NavProfile.

    Resolution order for the profile name: `name` argument, NAV_PROFILE env
    var, then the `profile:` key. The file defaults to config/nav.yaml and
    can be redirected with NAV_CONFIG.
    """
    if path is None:
        env_path = os.getenv("NAV_CONFIG")
        path = Path(env_path) if env_path else CONFIG_ROOT / DEFAULT_CONFIG_NAME

    nav_cfg = _load_yaml(Path(path))
    profile_name, raw_profile = _select_profile(nav_cfg, name or os.getenv("NAV_PROFILE"))

    sections = {
        key: _build_section(cls, raw_profile.get(key), key)
        for key, cls in _SECTIONS.items()
    }
    profile = NavProfile(name=profile_name, **sections)

    # perform basic validation before returning
    _validate_profile(profile)
    return profile


def _validate_profile(profile: NavProfile) -> None:
    """Sanity checks on numeric ranges."""
    grid = profile.grid
    if grid.node_spacing <= 0 or grid.node_height <= 0:
        raise ValueError(
            f"Grid spacing must be positive, got {grid.node_spacing} x {grid.node_height}"
        )
    if grid.window_padding < 1.0:
        raise ValueError(f"window_padding must be >= 1.0, got {grid.window_padding}")
    if not 0.0 < grid.below_preference <= 1.0:
        raise ValueError(f"below_preference must be in (0, 1], got {grid.below_preference}")
    if grid.max_snap_distance is not None and grid.max_snap_distance <= 0:
        raise ValueError("max_snap_distance must be positive or null")

    probe = profile.ground_probe
    if not probe.probe_heights:
        raise ValueError("ground_probe.probe_heights must not be empty")
    if probe.check_radius <= 0 or probe.check_distance <= 0:
        raise ValueError("ground_probe radius and distance must be positive")

    m = profile.maintainer
    if m.coverage_radius <= 0 or m.update_distance < 0:
        raise ValueError("maintainer coverage_radius must be positive, update_distance >= 0")
    if m.check_every_ticks < 1 or m.prune_every_ticks < 1:
        raise ValueError("maintainer tick cadences must be >= 1")
    if m.cleanup_factor < 1.0:
        raise ValueError(f"cleanup_factor must be >= 1.0, got {m.cleanup_factor}")

    if profile.direction_field.jitter_tolerance < 0:
        raise ValueError("direction_field.jitter_tolerance must be >= 0")
    if profile.direction_field.max_cached_fields < 1:
        raise ValueError("direction_field.max_cached_fields must be >= 1")

    if profile.movement.dead_zone < 0 or profile.movement.direction_threshold < 0:
        raise ValueError("movement thresholds must be >= 0")

    wp = profile.waypoints
    if wp.max_connections_per_node < 1:
        raise ValueError("waypoints.max_connections_per_node must be >= 1")
    if wp.node_spacing <= 0 or wp.vertical_spacing <= 0 or wp.vertical_layers < 1:
        raise ValueError("waypoint spacing must be positive and vertical_layers >= 1")
    if wp.max_connection_distance <= 0 or wp.max_height_difference < 0:
        raise ValueError("waypoint connection limits out of range")

    if profile.search.max_expansions is not None and profile.search.max_expansions < 1:
        raise ValueError("search.max_expansions must be >= 1 or null")
