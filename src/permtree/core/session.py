"""
Permission editing session.

Wires the store, the cascade selector and a resource loader together for
one role being edited: open it with the role's permission forest (and the
ids already granted to the role), replay operator toggles, read the derived
views, and produce the payload persisted at save time.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional

from ..config import PermtreeConfig
from .cascade import CascadeSelector
from .loader import ResourceLoader
from .state import PermissionState
from .transform import extract_selected_ids, transform_permission_trees
from .types import (
    MenuNode,
    PermissionIds,
    PermissionStats,
    ResourceNode,
    ToggleAction,
)

logger = logging.getLogger(__name__)


class PermissionSession:
    """
    One open permission editor.

    A session edits one role at a time; ``open`` resets everything left over
    from a previous role.
    """

    def __init__(
        self,
        loader: Optional[ResourceLoader] = None,
        config: Optional[PermtreeConfig] = None,
        state: Optional[PermissionState] = None,
    ):
        self.config = config or PermtreeConfig()
        self.state = state or PermissionState()
        self.selector = CascadeSelector(
            self.state,
            loader,
            retry_empty_load=self.config.cascade.retry_empty_load,
        )
        self.role_id: Optional[str] = None

    def open(
        self,
        forest: Iterable[Any],
        role_ids: PermissionIds | Mapping[str, Any] | None = None,
        role_id: Optional[str] = None,
    ) -> PermissionStats:
        """
        Load a role's permission forest and seed the selection.

        Seeds come from nodes flagged ``selected`` in the forest plus, when
        given, the role's granted ids. Systems of seeded menus are derived.
        """
        forest = list(forest)
        self.state.reset()
        self.state.load_index(transform_permission_trees(forest))
        self.role_id = role_id

        seeded = extract_selected_ids(forest)
        self.state.selected_menu_ids.update(seeded.menu_ids)
        self.state.selected_resource_ids.update(seeded.resource_ids)

        if role_ids is not None:
            granted = role_ids if isinstance(role_ids, PermissionIds) else PermissionIds.model_validate(role_ids)
            self.state.selected_system_ids.update(granted.system_ids)
            self.state.selected_menu_ids.update(granted.menu_ids)
            self.state.selected_resource_ids.update(granted.resource_ids)

        for menu_id in self.state.selected_menu_ids:
            menu = self.state.menu_map.get(menu_id)
            if menu is not None:
                self.state.selected_system_ids.add(menu.system_id)

        if self.state.systems:
            self.state.active_system_id = self.state.systems[0].system_id

        stats = self.state.stats()
        logger.info(
            "Opened permission session for role %s: %d systems, %d menus, %d resources (%d menus pre-selected)",
            role_id or "<unnamed>",
            stats.total_system_count,
            stats.total_menu_count,
            stats.total_resource_count,
            stats.selected_menu_count,
        )
        return stats

    def close(self) -> None:
        self.state.reset()
        self.role_id = None

    # --- Focus & UI ---

    def focus_system(self, system_id: str) -> List[MenuNode]:
        """Make a system the active one. Returns its (filtered) menus."""
        if system_id not in self.state.system_map:
            logger.warning("focus_system: unknown system %s ignored", system_id)
            return self.state.current_filtered_menus()

        if self.state.active_system_id != system_id:
            self.state.active_system_id = system_id
            self.state.active_menu_id = None
        return self.state.current_filtered_menus()

    async def focus_menu(self, menu_id: str) -> List[ResourceNode]:
        """Make a menu the active one, loading its resources for display."""
        if menu_id not in self.state.menu_map:
            logger.warning("focus_menu: unknown menu %s ignored", menu_id)
            return self.state.current_menu_resources()

        self.state.active_menu_id = menu_id
        return await self.selector.ensure_resources(menu_id)

    async def expand_menu(self, menu_id: str) -> bool:
        """Toggle a menu's expansion; expanding loads its resources."""
        expanded = self.state.toggle_menu_expand(menu_id)
        if expanded:
            await self.selector.ensure_resources(menu_id)
        return expanded

    def set_search_keyword(self, keyword: str) -> List[MenuNode]:
        self.state.search_keyword = keyword or ""
        return self.state.current_filtered_menus()

    # --- Toggles ---

    async def toggle_resource(self, resource_id: str, selected: bool) -> None:
        if selected:
            self.selector.select_resource(resource_id)
        else:
            await self.selector.deselect_resource(resource_id)

    async def toggle_menu(self, menu_id: str, selected: bool) -> None:
        if selected:
            await self.selector.select_menu(menu_id)
        else:
            await self.selector.deselect_menu(menu_id)

    async def toggle_system(self, system_id: str, selected: bool) -> None:
        if selected:
            await self.selector.select_system(system_id)
        else:
            await self.selector.deselect_system(system_id)

    async def apply(self, action: ToggleAction | str, target_id: str) -> None:
        """Replay one operator action, e.g. ``apply("select-menu", "menu-002")``."""
        action = ToggleAction(action)
        if action is ToggleAction.SELECT_SYSTEM:
            await self.toggle_system(target_id, True)
        elif action is ToggleAction.DESELECT_SYSTEM:
            await self.toggle_system(target_id, False)
        elif action is ToggleAction.SELECT_MENU:
            await self.toggle_menu(target_id, True)
        elif action is ToggleAction.DESELECT_MENU:
            await self.toggle_menu(target_id, False)
        elif action is ToggleAction.SELECT_RESOURCE:
            await self.toggle_resource(target_id, True)
        elif action is ToggleAction.DESELECT_RESOURCE:
            await self.toggle_resource(target_id, False)

    # --- Output ---

    def stats(self) -> PermissionStats:
        return self.state.stats()

    def to_payload(self) -> PermissionIds:
        """The (systemIds, menuIds, resourceIds) triple to persist."""
        return PermissionIds(
            system_ids=sorted(self.state.selected_system_ids),
            menu_ids=sorted(self.state.selected_menu_ids),
            resource_ids=sorted(self.state.selected_resource_ids),
        )
