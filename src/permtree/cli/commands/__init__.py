"""
permtree CLI commands.
"""

from . import apply, initialize, menus, stats

__all__ = ["apply", "initialize", "menus", "stats"]
