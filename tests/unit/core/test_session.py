"""Unit tests for the permission editing session."""

import logging

import pytest

from permtree.config import CascadeSettings, PermtreeConfig
from permtree.core.demo import DemoManager
from permtree.core.loader import StaticResourceLoader
from permtree.core.session import PermissionSession
from permtree.core.types import PermissionIds, ToggleAction


@pytest.fixture
def loader():
    return StaticResourceLoader(DemoManager.RESOURCES)


@pytest.fixture
def session(loader):
    s = PermissionSession(loader=loader)
    s.open(DemoManager.FOREST, role_id="role-1")
    return s


class TestOpen:
    def test_open_indexes_forest(self, session):
        stats = session.stats()

        assert stats.total_system_count == 3
        assert stats.total_menu_count == 8
        # Only menu-008 ships its resources in the forest
        assert stats.total_resource_count == 3
        assert stats.selected_menu_count == 0
        assert session.state.active_system_id == "sys-001"
        assert session.role_id == "role-1"

    def test_open_seeds_role_ids(self, loader):
        session = PermissionSession(loader=loader)
        session.open(DemoManager.FOREST, DemoManager.ROLE)

        payload = session.to_payload()
        assert payload.system_ids == ["sys-001", "sys-002"]
        assert payload.menu_ids == ["menu-001", "menu-002", "menu-004", "menu-005"]
        assert "res-010" in payload.resource_ids

    def test_open_seeds_selected_flags_and_derives_systems(self):
        forest = [{"type": "system", "id": "S1", "children": [
            {"type": "menu", "id": "M1", "selected": True, "children": [
                {"type": "resource", "id": "R1", "selected": True},
            ]},
        ]}]
        session = PermissionSession()
        session.open(forest)

        assert session.to_payload() == PermissionIds(system_ids=["S1"], menu_ids=["M1"], resource_ids=["R1"])

    def test_reopen_discards_previous_role(self, session):
        session.state.selected_menu_ids.add("menu-007")
        session.state.expanded_menu_ids.add("menu-007")

        session.open(DemoManager.FOREST, {"menuIds": ["menu-004"]})

        assert session.state.selected_menu_ids == {"menu-004"}
        assert session.state.expanded_menu_ids == set()
        assert session.state.selected_system_ids == {"sys-001"}

    def test_open_logs_summary(self, loader, caplog):
        with caplog.at_level(logging.INFO, logger="permtree.core.session"):
            PermissionSession(loader=loader).open(DemoManager.FOREST, role_id="ops")
        assert "Opened permission session for role ops" in caplog.text

    def test_close(self, session):
        session.close()
        assert session.state.menu_map == {}
        assert session.role_id is None

    def test_config_disables_retry(self):
        config = PermtreeConfig(cascade=CascadeSettings(retry_empty_load=False))
        session = PermissionSession(config=config)
        assert session.selector.retry_empty_load is False


class TestFocus:
    def test_focus_system_resets_active_menu(self, session):
        session.state.active_menu_id = "menu-002"

        menus = session.focus_system("sys-002")

        assert [m.menu_id for m in menus] == ["menu-005", "menu-007"]
        assert session.state.active_menu_id is None

    def test_focus_unknown_system_keeps_current(self, session):
        menus = session.focus_system("sys-404")
        assert session.state.active_system_id == "sys-001"
        assert [m.menu_id for m in menus] == ["menu-001", "menu-004"]

    def test_search_keyword_filters_active_system(self, session):
        menus = session.set_search_keyword("advanced")
        assert [m.menu_id for m in menus] == ["menu-001"]
        assert [c.menu_id for c in menus[0].children] == ["menu-003"]

    @pytest.mark.asyncio
    async def test_focus_menu_loads_without_selecting(self, session, loader):
        resources = await session.focus_menu("menu-004")

        assert [r.id for r in resources] == ["res-006", "res-007", "res-008", "res-009"]
        assert session.state.active_menu_id == "menu-004"
        assert session.state.selected_resource_ids == set()
        assert loader.calls == ["menu-004"]

    @pytest.mark.asyncio
    async def test_expand_loads_once(self, session, loader):
        assert await session.expand_menu("menu-002") is True
        assert await session.expand_menu("menu-002") is False
        assert await session.expand_menu("menu-002") is True

        assert loader.calls == ["menu-002"]


class TestToggles:
    @pytest.mark.asyncio
    async def test_select_menu_cascades_through_demo_tree(self, session):
        await session.toggle_menu("menu-001", True)

        payload = session.to_payload()
        assert payload.system_ids == ["sys-001"]
        assert payload.menu_ids == ["menu-001", "menu-002", "menu-003"]
        assert payload.resource_ids == ["res-001", "res-002", "res-003", "res-004", "res-005"]

    @pytest.mark.asyncio
    async def test_apply_replays_actions(self, session):
        await session.apply("select-system", "sys-003")
        await session.apply(ToggleAction.DESELECT_RESOURCE, "res-016")
        await session.apply("select-menu", "menu-006")

        payload = session.to_payload()
        assert payload.system_ids == ["sys-002", "sys-003"]
        assert payload.menu_ids == ["menu-005", "menu-006", "menu-008"]
        assert "res-016" not in payload.resource_ids
        assert {"res-015", "res-017", "res-013"} <= set(payload.resource_ids)

    @pytest.mark.asyncio
    async def test_deselect_system(self, session):
        await session.toggle_system("sys-002", True)
        await session.toggle_system("sys-002", False)

        assert session.to_payload() == PermissionIds()

    @pytest.mark.asyncio
    async def test_deselecting_granted_menu_drops_granted_resources(self, loader):
        session = PermissionSession(loader=loader)
        session.open(DemoManager.FOREST, DemoManager.ROLE)

        await session.toggle_menu("menu-002", False)

        payload = session.to_payload()
        assert payload.system_ids == ["sys-001", "sys-002"]
        # menu-001 had no other selected child
        assert payload.menu_ids == ["menu-004", "menu-005"]
        assert payload.resource_ids == ["res-006", "res-007", "res-010"]

    @pytest.mark.asyncio
    async def test_deselecting_granted_system_leaves_no_orphans(self, loader):
        session = PermissionSession(loader=loader)
        session.open(DemoManager.FOREST, DemoManager.ROLE)

        await session.toggle_system("sys-002", False)
        await session.toggle_system("sys-001", False)

        assert session.to_payload() == PermissionIds()

    @pytest.mark.asyncio
    async def test_apply_rejects_unknown_action(self, session):
        with pytest.raises(ValueError):
            await session.apply("explode", "menu-001")

    def test_payload_wire_shape(self, session):
        session.state.selected_menu_ids.update({"menu-002", "menu-001"})
        wire = session.to_payload().to_wire()
        assert wire == {"systemIds": [], "menuIds": ["menu-001", "menu-002"], "resourceIds": []}
