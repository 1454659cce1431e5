"""
Unit tests for the 'menus' command.
"""

import json
from unittest.mock import AsyncMock, patch

from permtree.cli.commands.menus import menus


class TestMenusCommand:
    def test_defaults_to_first_system(self, runner, demo_dir, cli_obj):
        result = runner.invoke(menus, [str(demo_dir / "forest.json")], obj=cli_obj)

        assert result.exit_code == 0
        assert "System Management" in result.output
        assert "Basic Config" in result.output
        assert "User List" not in result.output

    def test_loads_resources_for_listed_menus(self, runner, demo_dir, cli_obj):
        result = runner.invoke(
            menus,
            [str(demo_dir / "forest.json"), "-s", "sys-002", "--resources", str(demo_dir / "resources.json")],
            obj=cli_obj,
        )

        assert result.exit_code == 0
        assert "Add User" in result.output
        assert "View Active Users" in result.output

    def test_no_resources_flag_hides_leaves(self, runner, demo_dir, cli_obj):
        result = runner.invoke(menus, [str(demo_dir / "forest.json"), "-s", "sys-003", "--no-resources"], obj=cli_obj)

        assert result.exit_code == 0
        assert "Order List" in result.output
        assert "View Orders" not in result.output

    def test_search_filter(self, runner, demo_dir, cli_obj):
        result = runner.invoke(menus, [str(demo_dir / "forest.json"), "-q", "advanced"], obj=cli_obj)

        assert result.exit_code == 0
        assert "Advanced Config" in result.output
        assert "Basic Config" not in result.output
        assert "Role Management" not in result.output

    def test_search_without_match(self, runner, demo_dir, cli_obj):
        result = runner.invoke(menus, [str(demo_dir / "forest.json"), "-q", "zzz"], obj=cli_obj)

        assert result.exit_code == 0
        assert "No menus match" in result.output

    def test_loader_failure(self, runner, demo_dir, cli_obj):
        with patch(
            "permtree.cli.utils.StaticResourceLoader.__call__",
            new=AsyncMock(side_effect=ConnectionError("backend down")),
        ):
            result = runner.invoke(
                menus,
                [str(demo_dir / "forest.json"), "--resources", str(demo_dir / "resources.json")],
                obj=cli_obj,
            )

        assert result.exit_code == 1
        assert "Resource loading failed: backend down" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_unknown_system(self, runner, demo_dir, cli_obj):
        result = runner.invoke(menus, [str(demo_dir / "forest.json"), "-s", "sys-999"], obj=cli_obj)

        assert result.exit_code == 1
        assert "Unknown system: sys-999" in result.output

    def test_empty_forest(self, runner, tmp_path, cli_obj):
        forest = tmp_path / "forest.json"
        forest.write_text(json.dumps([]))

        result = runner.invoke(menus, [str(forest)], obj=cli_obj)

        assert result.exit_code == 0
        assert "no systems" in result.output
