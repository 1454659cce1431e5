"""
Unit tests for the 'apply' command.
"""

import json
from unittest.mock import AsyncMock, patch

import click
import pytest

from permtree.cli.commands.apply import apply, parse_operation
from permtree.cli.main import main
from permtree.core.types import ToggleAction


class TestParseOperation:
    def test_valid(self):
        assert parse_operation("select-menu:menu-002") == (ToggleAction.SELECT_MENU, "menu-002")
        assert parse_operation("Deselect-Resource: res-1") == (ToggleAction.DESELECT_RESOURCE, "res-1")

    @pytest.mark.parametrize("raw", ["select-menu", "select-menu:", "grant:menu-001"])
    def test_invalid(self, raw):
        with pytest.raises(click.BadParameter):
            parse_operation(raw)


class TestApplyCommand:
    def test_select_menu_prints_payload(self, runner, demo_dir, cli_obj):
        result = runner.invoke(
            apply,
            [
                str(demo_dir / "forest.json"),
                "select-menu:menu-002",
                "--resources", str(demo_dir / "resources.json"),
            ],
            obj=cli_obj,
        )

        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "systemIds": ["sys-001"],
            "menuIds": ["menu-001", "menu-002"],
            "resourceIds": ["res-001", "res-002", "res-003"],
        }

    def test_role_edit_written_to_file(self, runner, demo_dir, cli_obj):
        output = demo_dir / "grant.json"

        result = runner.invoke(
            apply,
            [
                str(demo_dir / "forest.json"),
                "deselect-system:sys-002",
                "select-system:sys-003",
                "--role", str(demo_dir / "role.json"),
                "-o", str(output),
            ],
            obj=cli_obj,
        )

        assert result.exit_code == 0
        assert "Payload written to" in result.output

        payload = json.loads(output.read_text())
        assert payload["systemIds"] == ["sys-001", "sys-003"]
        assert "menu-005" not in payload["menuIds"]
        assert "menu-008" in payload["menuIds"]
        assert {"res-015", "res-016", "res-017"} <= set(payload["resourceIds"])

    def test_no_operations_echoes_seed(self, runner, demo_dir, cli_obj):
        result = runner.invoke(
            apply, [str(demo_dir / "forest.json"), "--role", str(demo_dir / "role.json")], obj=cli_obj
        )

        assert result.exit_code == 0
        assert json.loads(result.output)["menuIds"] == ["menu-001", "menu-002", "menu-004", "menu-005"]

    def test_bad_operation_is_usage_error(self, runner, demo_dir, cli_obj):
        result = runner.invoke(apply, [str(demo_dir / "forest.json"), "toggle:menu-001"], obj=cli_obj)

        assert result.exit_code == 2
        assert "unknown action" in result.output

    def test_loader_failure(self, runner, demo_dir, cli_obj):
        with patch(
            "permtree.cli.utils.StaticResourceLoader.__call__",
            new=AsyncMock(side_effect=ConnectionError("backend down")),
        ):
            result = runner.invoke(
                apply,
                [
                    str(demo_dir / "forest.json"),
                    "select-menu:menu-002",
                    "--resources", str(demo_dir / "resources.json"),
                ],
                obj=cli_obj,
            )

        assert result.exit_code == 1
        assert "Resource loading failed: backend down" in result.output


class TestMainGroup:
    def test_invalid_config_aborts(self, runner, demo_dir, tmp_path):
        config_dir = tmp_path / ".permtree"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("cascade: [unclosed")

        with patch("pathlib.Path.cwd", return_value=tmp_path):
            result = runner.invoke(main, ["stats", str(demo_dir / "forest.json")])

        assert result.exit_code == 1
        assert "Invalid YAML" in result.output

    def test_commands_registered(self, runner):
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        for name in ("init", "stats", "menus", "apply"):
            assert name in result.output
