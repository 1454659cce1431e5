"""
Tree Transformer.

Converts the backend permission forest into flat id-indexed maps plus
parent/child adjacency maps:

- system_map:        system_id -> SystemNode
- menu_map:          menu_id -> MenuNode
- resource_map:      resource id -> ResourceNode
- menu_parent_map:   menu_id -> parent menu_id
- menu_children_map: menu_id -> [child menu_id, ...]
- resource_menu_map: resource id -> owning menu_id

Both entry points are pure: every call walks the forest once and allocates
fresh maps, so nothing leaks between two roles being edited.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from pydantic import BaseModel, ValidationError

from ..config import MAX_MENU_DEPTH
from .types import (
    TREE_NODE_ADAPTER,
    MenuNode,
    MenuTreeNode,
    ResourceNode,
    ResourceTreeNode,
    SelectedIds,
    SystemNode,
    SystemTreeNode,
)

logger = logging.getLogger(__name__)

TreeNode = SystemTreeNode | MenuTreeNode | ResourceTreeNode


@dataclass
class PermissionIndex:
    """Output of :func:`transform_permission_trees`."""
    systems: List[SystemNode] = field(default_factory=list)
    system_map: Dict[str, SystemNode] = field(default_factory=dict)
    menu_map: Dict[str, MenuNode] = field(default_factory=dict)
    resource_map: Dict[str, ResourceNode] = field(default_factory=dict)
    menu_parent_map: Dict[str, str] = field(default_factory=dict)
    menu_children_map: Dict[str, List[str]] = field(default_factory=dict)
    resource_menu_map: Dict[str, str] = field(default_factory=dict)


def parse_tree_node(raw: Any, log_level: int = logging.WARNING) -> Optional[TreeNode]:
    """
    Validate one raw forest node.

    Returns None (and logs) for malformed nodes: non-mappings, a missing or
    unknown ``type`` discriminant, or a missing ``id``.
    """
    if isinstance(raw, (SystemTreeNode, MenuTreeNode, ResourceTreeNode)):
        return raw
    if isinstance(raw, BaseModel):
        raw = raw.model_dump(by_alias=True)
    if not isinstance(raw, dict):
        logger.log(log_level, "Skipping non-object node in permission forest: %r", raw)
        return None

    try:
        return TREE_NODE_ADAPTER.validate_python(raw)
    except ValidationError as e:
        logger.log(
            log_level,
            "Skipping malformed %s node %r (%d validation errors)",
            raw.get("type") or "untyped",
            raw.get("id"),
            e.error_count(),
        )
        return None


def _parse_children(children: Iterable[Any], log_level: int = logging.WARNING) -> List[TreeNode]:
    parsed = []
    for child in children:
        node = parse_tree_node(child, log_level)
        if node is not None:
            parsed.append(node)
    return parsed


class _ForestWalker:
    """Single depth-first pass filling a fresh PermissionIndex."""

    def __init__(self):
        self.index = PermissionIndex()
        self._seen_menus: Set[str] = set()

    def walk(self, forest: Iterable[Any]) -> PermissionIndex:
        for node in _parse_children(forest):
            if isinstance(node, SystemTreeNode):
                self._walk_system(node)
            else:
                logger.debug("Ignoring %s node %s at forest root", node.type, node.id)

        self.index.systems = list(self.index.system_map.values())
        return self.index

    def _walk_system(self, node: SystemTreeNode) -> None:
        system_id = node.system_id
        if system_id in self.index.system_map:
            logger.warning("System %s appears more than once in the forest; skipping repeat", system_id)
            return

        system = SystemNode(id=node.id, name=node.name, system_id=system_id)
        self.index.system_map[system_id] = system

        for child in _parse_children(node.children):
            if isinstance(child, MenuTreeNode):
                menu = self._walk_menu(child, system_id, None, 0)
                if menu is not None:
                    system.menus.append(menu)
            else:
                logger.debug("Ignoring %s node %s directly under system %s", child.type, child.id, system_id)

    def _walk_menu(
        self,
        node: MenuTreeNode,
        system_id: str,
        parent_menu_id: Optional[str],
        level: int,
    ) -> Optional[MenuNode]:
        menu_id = node.menu_id

        # A repeated id means a duplicate entry or a cyclic parent chain
        if menu_id in self._seen_menus:
            logger.warning("Menu %s appears more than once in the forest; skipping repeat", menu_id)
            return None
        if level > MAX_MENU_DEPTH:
            logger.warning("Menu %s nested deeper than %d levels; skipping", menu_id, MAX_MENU_DEPTH)
            return None
        self._seen_menus.add(menu_id)

        menu = MenuNode(
            id=node.id,
            name=node.name,
            menu_id=menu_id,
            system_id=system_id,
            parent_menu_id=parent_menu_id,
            level=level,
        )
        self.index.menu_map[menu_id] = menu

        if parent_menu_id is not None:
            self.index.menu_parent_map[menu_id] = parent_menu_id
            self.index.menu_children_map.setdefault(parent_menu_id, []).append(menu_id)

        children = _parse_children(node.children)

        for child in children:
            if isinstance(child, ResourceTreeNode):
                resource = ResourceNode(
                    id=child.id,
                    name=child.name,
                    resource_id=child.resource_id,
                    menu_id=menu_id,
                    type=child.resource_type,
                    code=child.code,
                )
                menu.resources.append(resource)
                self.index.resource_map[resource.id] = resource
                self.index.resource_menu_map[resource.id] = menu_id

        for child in children:
            if isinstance(child, MenuTreeNode):
                submenu = self._walk_menu(child, system_id, menu_id, level + 1)
                if submenu is not None:
                    menu.children.append(submenu)

        return menu


def transform_permission_trees(forest: Iterable[Any]) -> PermissionIndex:
    """
    Convert a permission forest into indexed maps.

    Only ``system`` roots are processed; menus nest under systems or other
    menus to any depth, and resources are only recognised inside a menu.
    Malformed nodes are skipped with a warning, never raised.

    Args:
        forest: Ordered root nodes (raw dicts or parsed tree node models).

    Returns:
        PermissionIndex: Freshly allocated maps.
    """
    return _ForestWalker().walk(forest)


def extract_selected_ids(forest: Iterable[Any]) -> SelectedIds:
    """
    Collect the ids of every menu and resource flagged ``selected``.

    Systems are never collected: system selection is always derived from
    its menus.
    """
    selected = SelectedIds()

    def traverse(node: TreeNode, depth: int) -> None:
        if depth > MAX_MENU_DEPTH + 1:
            return
        if node.is_selected:
            if isinstance(node, MenuTreeNode):
                selected.menu_ids.add(node.menu_id)
            elif isinstance(node, ResourceTreeNode):
                selected.resource_ids.add(node.id)

        # The transform pass already reported malformed nodes
        for child in _parse_children(node.children, logging.DEBUG):
            traverse(child, depth + 1)

    for root in _parse_children(forest, logging.DEBUG):
        traverse(root, 0)

    return selected
