"""Unit tests for CLI utilities."""

import json
import logging
from unittest.mock import patch

from permtree.cli.utils import configure_logging, open_session, resolve_config
from permtree.config import PermtreeConfig


class TestOpenSession:
    def test_opens_demo_documents(self, demo_dir):
        session = open_session(
            str(demo_dir / "forest.json"),
            role_file=str(demo_dir / "role.json"),
            resources_file=str(demo_dir / "resources.json"),
        )

        assert session is not None
        assert session.stats().selected_menu_count == 4
        assert session.selector.loader is not None

    def test_missing_forest(self, tmp_path, capsys):
        assert open_session(str(tmp_path / "missing.json")) is None
        assert "Failed to load forest" in capsys.readouterr().err

    def test_invalid_role(self, demo_dir, capsys):
        role = demo_dir / "bad-role.json"
        role.write_text(json.dumps({"menuIds": 5}))

        assert open_session(str(demo_dir / "forest.json"), role_file=str(role)) is None
        assert "Failed to load role permissions" in capsys.readouterr().err

    def test_invalid_resources(self, demo_dir, capsys):
        resources = demo_dir / "bad-resources.json"
        resources.write_text("[1, 2]")

        assert open_session(str(demo_dir / "forest.json"), resources_file=str(resources)) is None
        assert "Failed to load resources" in capsys.readouterr().err

    def test_no_resources_file_means_no_loader(self, demo_dir):
        session = open_session(str(demo_dir / "forest.json"))
        assert session.selector.loader is None


class TestResolveConfig:
    def test_prefers_context_object(self):
        config = PermtreeConfig()

        class Ctx:
            obj = {"config": config}

        assert resolve_config(Ctx()) is config

    def test_loads_from_cwd(self, tmp_path):
        config_dir = tmp_path / ".permtree"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("cascade:\n  retry_empty_load: false\n")

        with patch("pathlib.Path.cwd", return_value=tmp_path):
            config = resolve_config(None)

        assert config.cascade.retry_empty_load is False

    def test_invalid_config_reports_error(self, tmp_path, capsys):
        config_dir = tmp_path / ".permtree"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("logging:\n  level: LOUD\n")

        with patch("pathlib.Path.cwd", return_value=tmp_path):
            assert resolve_config(None) is None
        assert "Invalid configuration" in capsys.readouterr().err


class TestConfigureLogging:
    @patch("permtree.cli.utils.logging.basicConfig")
    def test_verbose_forces_debug(self, mock_basic):
        configure_logging(PermtreeConfig(), verbose=True)
        assert mock_basic.call_args.kwargs["level"] == logging.DEBUG

    @patch("permtree.cli.utils.logging.basicConfig")
    def test_uses_configured_level(self, mock_basic, monkeypatch):
        monkeypatch.delenv("PERMTREE_LOG_LEVEL", raising=False)
        config = PermtreeConfig.model_validate({"logging": {"level": "error"}})

        configure_logging(config)

        assert mock_basic.call_args.kwargs["level"] == logging.ERROR
