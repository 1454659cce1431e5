"""
permtree CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

import sys

import click

from ..config import ConfigError, PermtreeConfig
from .commands import apply, initialize, menus, stats
from .utils import configure_logging, echo_error


@click.group()
@click.version_option(package_name="permtree")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool):
    """permtree: Cascading permission selection engine.

    Inspect a role's permission forest and replay system/menu/resource
    toggles to produce the payload that grants them.

    \b
    Quick Start:
      permtree init --demo
      permtree stats permtree-demo/forest.json --role permtree-demo/role.json
      permtree apply permtree-demo/forest.json select-menu:menu-002 \\
          --resources permtree-demo/resources.json
    """
    try:
        config = PermtreeConfig.load()
    except ConfigError as e:
        echo_error(str(e))
        sys.exit(1)

    configure_logging(config, verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# Register commands
main.add_command(initialize.init)
main.add_command(stats.stats)
main.add_command(menus.menus)
main.add_command(apply.apply)

if __name__ == "__main__":
    main()
