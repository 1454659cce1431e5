"""
Cascade Selector.

Implements the three-level cascade (System -> Menu(+submenus) -> Resource)
on top of a PermissionState:

- Downward: selecting a menu selects its resources (loading them lazily on
  first use) and all of its submenus; deselecting a menu removes its
  resources and submenus.
- Upward: a menu with any selected child selects its ancestors, and a
  parent whose last selected child menu goes away is deselected.
- Systems follow their menus: a system stays selected while any of its
  menus is selected.

Every operation is a no-op when the target is already in the requested
state. Selecting or deselecting a menu or system may await the resource
loader; resource selection itself never does.
"""

import logging
from typing import Iterable, List, Optional, Set

from .loader import ResourceLoader
from .state import PermissionState
from .types import MenuNode, ResourceNode

logger = logging.getLogger(__name__)


class CascadeSelector:
    """
    Mutates the selection sets of a PermissionState.

    Args:
        state: The store to operate on.
        loader: Async callable fetching the resources of one menu.
        retry_empty_load: Invoke the loader a second time when the first
            call left the menu without resources.
    """

    def __init__(
        self,
        state: PermissionState,
        loader: Optional[ResourceLoader] = None,
        retry_empty_load: bool = True,
    ):
        self.state = state
        self.loader = loader
        self.retry_empty_load = retry_empty_load

    # --- Resources ---

    def select_resource(self, resource_id: str) -> None:
        """
        Select one resource and make sure its menu chain and system follow.

        Sibling resources are not selected.
        """
        menu_id = self.state.resource_menu_map.get(resource_id)
        if menu_id is None or menu_id not in self.state.menu_map:
            logger.warning("select_resource: unknown resource %s ignored", resource_id)
            return

        self.state.selected_resource_ids.add(resource_id)
        self._mark_menu_selected(menu_id)

    async def deselect_resource(self, resource_id: str) -> None:
        """
        Deselect one resource; its menu goes too once it has no other
        selected resource and no selected child menu.
        """
        if resource_id not in self.state.selected_resource_ids:
            return

        self.state.selected_resource_ids.discard(resource_id)

        menu_id = self.state.resource_menu_map.get(resource_id)
        if menu_id is None or menu_id not in self.state.selected_menu_ids:
            return
        if not self._has_selected_child(menu_id) and not self._has_selected_resource(menu_id):
            await self.deselect_menu(menu_id)

    # --- Menus ---

    async def select_menu(self, menu_id: str) -> None:
        """
        Select a menu with all of its resources and submenus.

        Resources are loaded on first use. Loader errors propagate; the menu
        then stays selected without resources, and calling select_menu again
        re-attempts the load.
        """
        menu = self.state.menu_map.get(menu_id)
        if menu is None:
            logger.warning("select_menu: unknown menu %s ignored", menu_id)
            return

        if menu_id in self.state.selected_menu_ids:
            if self._needs_load(menu_id):
                await self._ensure_loaded(menu_id)
                self._select_own_resources(menu_id)
            return

        self.state.selected_menu_ids.add(menu_id)
        self.state.selected_system_ids.add(menu.system_id)
        logger.debug("Menu %s selected (system %s)", menu_id, menu.system_id)

        # Ancestors are committed before the load so a failing loader
        # leaves the chain consistent
        self._propagate_selection_up(menu_id)

        await self._ensure_loaded(menu_id)
        self._select_own_resources(menu_id)

        for child_id in list(self.state.menu_children_map.get(menu_id, [])):
            await self.select_menu(child_id)

    async def deselect_menu(self, menu_id: str) -> None:
        """
        Deselect a menu, its resources and its submenus.

        Resources granted by id before the menu was ever loaded are only tied
        to it after a load, so the lazy load runs first; a loader error
        propagates with the selection untouched. The parent is deselected as
        well once none of its child menus remains selected.
        """
        if menu_id not in self.state.selected_menu_ids:
            return

        await self._ensure_loaded(menu_id)

        self.state.selected_menu_ids.discard(menu_id)
        menu = self.state.menu_map.get(menu_id)
        if menu is not None:
            for resource in menu.resources:
                self.state.selected_resource_ids.discard(resource.id)
        logger.debug("Menu %s deselected", menu_id)

        for child_id in list(self.state.menu_children_map.get(menu_id, [])):
            await self.deselect_menu(child_id)

        parent_id = self.state.menu_parent_map.get(menu_id)
        if (
            parent_id is not None
            and parent_id in self.state.selected_menu_ids
            and not self._has_selected_child(parent_id)
        ):
            await self.deselect_menu(parent_id)

        if menu is not None:
            self._release_system(menu.system_id)

    async def ensure_resources(self, menu_id: str) -> List[ResourceNode]:
        """Lazily load a menu's resources without touching the selection."""
        await self._ensure_loaded(menu_id)
        return self.state.resources_of_menu(menu_id)

    # --- Systems ---

    async def select_system(self, system_id: str) -> None:
        system = self.state.system_map.get(system_id)
        if system is None:
            logger.warning("select_system: unknown system %s ignored", system_id)
            return

        self.state.selected_system_ids.add(system_id)
        for menu in list(system.menus):
            await self.select_menu(menu.menu_id)

    async def deselect_system(self, system_id: str) -> None:
        self.state.selected_system_ids.discard(system_id)
        for menu in list(self.state.menus_of_system(system_id)):
            await self.deselect_menu(menu.menu_id)

    # --- Batch helpers ---

    async def select_all_in_system(self, system_id: str, menus: Optional[Iterable[MenuNode]] = None) -> None:
        """Select every given menu (all root menus of the system by default)."""
        for menu in self._menus_for(system_id, menus):
            await self.select_menu(menu.menu_id)

    async def deselect_all_in_system(self, system_id: str, menus: Optional[Iterable[MenuNode]] = None) -> None:
        for menu in self._menus_for(system_id, menus):
            await self.deselect_menu(menu.menu_id)

    def select_all_resources_in_menu(self, menu_id: str) -> None:
        for resource in list(self.state.resources_of_menu(menu_id)):
            self.select_resource(resource.id)

    async def deselect_all_resources_in_menu(self, menu_id: str) -> None:
        for resource in list(self.state.resources_of_menu(menu_id)):
            await self.deselect_resource(resource.id)

    # --- Internals ---

    def _menus_for(self, system_id: str, menus: Optional[Iterable[MenuNode]]) -> List[MenuNode]:
        if menus is None:
            return list(self.state.menus_of_system(system_id))
        return list(menus)

    def _needs_load(self, menu_id: str) -> bool:
        menu = self.state.menu_map.get(menu_id)
        return (
            self.loader is not None
            and menu is not None
            and not menu.resources
            and menu_id not in self.state.loaded_menu_ids
        )

    async def _ensure_loaded(self, menu_id: str) -> None:
        """
        Await the loader for a menu that has no resources yet.

        At most two loader calls per menu: the initial one and, when
        ``retry_empty_load`` is set and the menu is still empty, one retry.
        A completed load marks the menu as loaded so it is never re-fetched.
        """
        if not self._needs_load(menu_id):
            return

        attempts = 2 if self.retry_empty_load else 1
        for attempt in range(1, attempts + 1):
            logger.debug("Loading resources for menu %s (attempt %d/%d)", menu_id, attempt, attempts)
            loaded = await self.loader(menu_id)
            if loaded is not None:
                self.state.attach_resources(menu_id, loaded)

            # The loader may have replaced or filled the node in place
            menu = self.state.menu_map.get(menu_id)
            if menu is None or menu.resources:
                break

        self.state.loaded_menu_ids.add(menu_id)

    def _select_own_resources(self, menu_id: str) -> None:
        for resource in self.state.resources_of_menu(menu_id):
            self.state.selected_resource_ids.add(resource.id)

    def _mark_menu_selected(self, menu_id: str) -> None:
        """Select a menu and its ancestors without cascading downward."""
        menu = self.state.menu_map[menu_id]
        self.state.selected_system_ids.add(menu.system_id)
        if menu_id in self.state.selected_menu_ids:
            return

        self.state.selected_menu_ids.add(menu_id)
        logger.debug("Menu %s selected through one of its resources", menu_id)
        self._propagate_selection_up(menu_id)

    def _propagate_selection_up(self, menu_id: str) -> None:
        """
        Select every unselected ancestor that now has a selected child.

        Each such parent brings its own resources and system, but its other
        children are left alone.
        """
        visited: Set[str] = {menu_id}
        parent_id = self.state.menu_parent_map.get(menu_id)

        while parent_id is not None and parent_id not in visited:
            visited.add(parent_id)
            if parent_id in self.state.selected_menu_ids:
                break

            parent = self.state.menu_map.get(parent_id)
            if parent is None:
                break

            children = self.state.menu_children_map.get(parent_id, [])
            if not any(child_id in self.state.selected_menu_ids for child_id in children):
                break

            self.state.selected_menu_ids.add(parent_id)
            self.state.selected_system_ids.add(parent.system_id)
            self._select_own_resources(parent_id)
            logger.debug("Parent menu %s selected by propagation", parent_id)

            parent_id = self.state.menu_parent_map.get(parent_id)

    def _has_selected_child(self, menu_id: str) -> bool:
        selected_menus = self.state.selected_menu_ids
        return any(child_id in selected_menus for child_id in self.state.menu_children_map.get(menu_id, []))

    def _has_selected_resource(self, menu_id: str) -> bool:
        selected_resources = self.state.selected_resource_ids
        return any(resource.id in selected_resources for resource in self.state.resources_of_menu(menu_id))

    def _release_system(self, system_id: str) -> None:
        """Drop a system once none of its menus remains selected."""
        if system_id not in self.state.selected_system_ids:
            return

        for menu_id in self.state.selected_menu_ids:
            menu = self.state.menu_map.get(menu_id)
            if menu is not None and menu.system_id == system_id:
                return

        self.state.selected_system_ids.discard(system_id)
        logger.debug("System %s deselected (no selected menus left)", system_id)
