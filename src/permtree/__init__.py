"""
permtree - Cascading permission selection engine.

permtree powers the "assign permissions to a role" editor: an operator picks
which systems, menus and API/button resources a role may use, and permtree
keeps the three-level selection (System -> Menu -> Resource) consistent while
nodes are toggled and menu resources are lazily loaded.

Key Components:
- core.transform: Permission forest -> flat id-indexed maps
- core.state: Passive selection state store and derived views
- core.cascade: Upward/downward selection propagation
- core.session: One role editing session (seed, toggle, save payload)

Usage:
    from permtree import PermissionSession, StaticResourceLoader

    session = PermissionSession(loader=StaticResourceLoader(records))
    session.open(forest, role_ids)
    await session.toggle_menu("menu-002", True)
    payload = session.to_payload()
"""

__version__ = "0.1.0"

from .core.cascade import CascadeSelector
from .core.loader import RecordResourceLoader, StaticResourceLoader
from .core.session import PermissionSession
from .core.state import PermissionState
from .core.transform import extract_selected_ids, transform_permission_trees
from .core.types import (
    MenuNode,
    NodeKind,
    PermissionIds,
    PermissionStats,
    ResourceNode,
    ResourceType,
    SystemNode,
)

__all__ = [
    "__version__",
    "CascadeSelector",
    "MenuNode",
    "NodeKind",
    "PermissionIds",
    "PermissionSession",
    "PermissionState",
    "PermissionStats",
    "RecordResourceLoader",
    "ResourceNode",
    "ResourceType",
    "StaticResourceLoader",
    "SystemNode",
    "extract_selected_ids",
    "transform_permission_trees",
]
