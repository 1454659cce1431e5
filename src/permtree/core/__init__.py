"""
Core modules for permtree.

This package contains the selection engine:
- types: Raw forest nodes and indexed System/Menu/Resource nodes
- transform: Forest -> id-indexed maps
- state: Passive selection store and derived views
- cascade: Upward/downward selection propagation
- loader: Lazy resource loaders
- session: One role editing session
"""

from .cascade import CascadeSelector
from .loader import RecordResourceLoader, ResourceLoader, StaticResourceLoader
from .session import PermissionSession
from .state import PermissionState
from .transform import PermissionIndex, extract_selected_ids, transform_permission_trees
from .types import (
    MenuNode, NodeKind, PermissionIds, PermissionStats,
    ResourceNode, ResourceType, SelectedIds, SystemNode, ToggleAction,
)

__all__ = [
    # Types
    "MenuNode", "NodeKind", "PermissionIds", "PermissionStats",
    "ResourceNode", "ResourceType", "SelectedIds", "SystemNode", "ToggleAction",
    # Engine
    "PermissionIndex", "transform_permission_trees", "extract_selected_ids",
    "PermissionState", "CascadeSelector", "PermissionSession",
    # Loaders
    "ResourceLoader", "StaticResourceLoader", "RecordResourceLoader",
]
