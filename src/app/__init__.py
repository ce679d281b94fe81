# src/app/__init__.py
"""
Application entrypoints for the navigation engine.

Exposes:
- build_nav_engine: wiring nav.yaml + monitoring + NavEngine into a runtime
- configure_logging: one-time stdout logging setup for tools and hosts
"""

from __future__ import annotations

from .logging_config import configure_logging
from .runtime import NavRuntime, build_nav_engine

__all__ = [
    "NavRuntime",
    "build_nav_engine",
    "configure_logging",
]
