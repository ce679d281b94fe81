# nav_core package
# src/nav_core/__init__.py
"""
nav_core package.

Exports:
    - NavEngine: wired navigation engine (grid + waypoints)
    - NavCoreError: domain-level error type for wiring failures
    - OccupancyOracle: ground / solidity queries over host physics
"""

from __future__ import annotations

from .core import NavCoreError, NavEngine
from .occupancy import GroundProbeProfile, OccupancyOracle

__all__ = [
    "NavEngine",
    "NavCoreError",
    "GroundProbeProfile",
    "OccupancyOracle",
]
