# src/contracts/__init__.py

from __future__ import annotations

"""
Shared contract surface for the navigation engine.

This module re-exports *interfaces and value types* used across packages:
  - Coordinates and regions (Vec2, GridCell, Bounds)
  - Navigation enums (NodeClassification, MovementAction)
  - External boundaries (CollisionQuery, ReferencePoint, NavigationEngine)

Deliberately does NOT export concrete engine classes; those live in
src/nav_core/ and depend on this package, never the other way around.
"""

from .types import (
    Bounds,
    GridCell,
    MovementAction,
    NodeClassification,
    RayHit,
    Vec2,
)
from .physics import CollisionQuery, ReferencePoint
from .navigation import NavigationEngine

__all__ = [
    "Bounds",
    "GridCell",
    "MovementAction",
    "NodeClassification",
    "RayHit",
    "Vec2",
    "CollisionQuery",
    "ReferencePoint",
    "NavigationEngine",
]
