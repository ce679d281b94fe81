"""Navigation configuration loading (config/nav.yaml -> NavProfile)."""

from .loader import load_nav_profile
from .schema import NavProfile

__all__ = ["load_nav_profile", "NavProfile"]
