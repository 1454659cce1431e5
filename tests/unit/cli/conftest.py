import pytest
from click.testing import CliRunner

from permtree.config import PermtreeConfig
from permtree.core.demo import DemoManager


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def demo_dir(tmp_path):
    """A provisioned demo workspace (forest.json, resources.json, role.json)."""
    return DemoManager(tmp_path).provision()


@pytest.fixture
def cli_obj():
    """Context object as set up by the ``main`` group."""
    return {"config": PermtreeConfig()}
