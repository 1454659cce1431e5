"""
Selection State Store.

A passive container for one editing session: the six indices built by the
tree transformer, the three selection sets, UI state (expanded menus,
search keyword, focused system/menu) and the derived views the editor
renders. It performs no cascade logic; the CascadeSelector is the only
component that mutates the selection sets.
"""

import logging
from typing import Dict, Iterable, List, Optional, Set

from .transform import PermissionIndex
from .types import MenuNode, PermissionStats, ResourceNode, SystemNode

logger = logging.getLogger(__name__)


def _filter_menu(menu: MenuNode, keyword: str) -> Optional[MenuNode]:
    kept = []
    for child in menu.children:
        match = _filter_menu(child, keyword)
        if match is not None:
            kept.append(match)

    if kept:
        return menu.model_copy(update={"children": kept})
    if keyword in menu.name.lower():
        return menu
    return None


class PermissionState:
    """
    Indices, selection sets and derived views for one role being edited.

    Attributes are public so the cascade selector can mutate the sets in
    place; everything else should read through the view methods.
    """

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        """Drop every map and set, leaving the store as freshly constructed."""
        self.systems: List[SystemNode] = []
        self.system_map: Dict[str, SystemNode] = {}
        self.menu_map: Dict[str, MenuNode] = {}
        self.resource_map: Dict[str, ResourceNode] = {}
        self.menu_parent_map: Dict[str, str] = {}
        self.menu_children_map: Dict[str, List[str]] = {}
        self.resource_menu_map: Dict[str, str] = {}

        self.selected_system_ids: Set[str] = set()
        self.selected_menu_ids: Set[str] = set()
        self.selected_resource_ids: Set[str] = set()
        self.expanded_menu_ids: Set[str] = set()
        self.loaded_menu_ids: Set[str] = set()

        self.active_system_id: Optional[str] = None
        self.active_menu_id: Optional[str] = None
        self.search_keyword: str = ""

    def load_index(self, index: PermissionIndex) -> None:
        """Install the maps of a freshly transformed forest."""
        self.systems = list(index.systems)
        self.system_map = index.system_map
        self.menu_map = index.menu_map
        self.resource_map = index.resource_map
        self.menu_parent_map = index.menu_parent_map
        self.menu_children_map = index.menu_children_map
        self.resource_menu_map = index.resource_menu_map

    def attach_resources(self, menu_id: str, resources: Iterable[ResourceNode]) -> List[ResourceNode]:
        """
        Index lazily loaded resources onto their menu, in place.

        Resources already present on the menu are not duplicated. The menu is
        marked as loaded even when the list is empty.

        Returns:
            The menu's resource list after the merge.
        """
        menu = self.menu_map.get(menu_id)
        if menu is None:
            logger.warning("Cannot attach resources to unknown menu %s", menu_id)
            return []

        known = set(menu.resource_ids())
        for resource in resources:
            if resource.menu_id != menu_id:
                resource = resource.model_copy(update={"menu_id": menu_id})
            if resource.id in known:
                continue
            known.add(resource.id)
            menu.resources.append(resource)
            self.resource_map[resource.id] = resource
            self.resource_menu_map[resource.id] = menu_id

        self.loaded_menu_ids.add(menu_id)
        logger.debug("Menu %s now has %d resources", menu_id, len(menu.resources))
        return menu.resources

    # --- Derived views ---

    def menus_of_system(self, system_id: str) -> List[MenuNode]:
        system = self.system_map.get(system_id)
        return system.menus if system else []

    def filtered_menus(self, system_id: str, keyword: str) -> List[MenuNode]:
        """
        Menus of a system filtered by a case-insensitive name match.

        A menu is kept when its name matches or when any descendant matches;
        in the latter case a copy is returned that retains only the matching
        descendants. Indexed nodes are never mutated.
        """
        menus = self.menus_of_system(system_id)
        needle = (keyword or "").strip().lower()
        if not needle:
            return menus

        result = []
        for menu in menus:
            match = _filter_menu(menu, needle)
            if match is not None:
                result.append(match)
        return result

    def resources_of_menu(self, menu_id: str) -> List[ResourceNode]:
        menu = self.menu_map.get(menu_id)
        return menu.resources if menu else []

    def current_system_menus(self) -> List[MenuNode]:
        if not self.active_system_id:
            return []
        return self.menus_of_system(self.active_system_id)

    def current_filtered_menus(self) -> List[MenuNode]:
        if not self.active_system_id:
            return []
        return self.filtered_menus(self.active_system_id, self.search_keyword)

    def current_menu_resources(self) -> List[ResourceNode]:
        if not self.active_menu_id:
            return []
        return self.resources_of_menu(self.active_menu_id)

    def stats(self) -> PermissionStats:
        return PermissionStats(
            selected_system_count=len(self.selected_system_ids),
            selected_menu_count=len(self.selected_menu_ids),
            selected_resource_count=len(self.selected_resource_ids),
            total_system_count=len(self.system_map),
            total_menu_count=len(self.menu_map),
            total_resource_count=len(self.resource_map),
        )

    # --- UI state ---

    def toggle_menu_expand(self, menu_id: str) -> bool:
        """Flip the expansion of a menu. Returns True if now expanded."""
        if menu_id in self.expanded_menu_ids:
            self.expanded_menu_ids.discard(menu_id)
            return False
        self.expanded_menu_ids.add(menu_id)
        return True

    def is_menu_expanded(self, menu_id: str) -> bool:
        return menu_id in self.expanded_menu_ids

    def is_system_selected(self, system_id: str) -> bool:
        return system_id in self.selected_system_ids

    def is_menu_selected(self, menu_id: str) -> bool:
        return menu_id in self.selected_menu_ids

    def is_resource_selected(self, resource_id: str) -> bool:
        return resource_id in self.selected_resource_ids
