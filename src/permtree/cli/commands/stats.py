"""
Stats Command - Selection summary for a role.

Opens a permission forest (optionally seeded with the role's granted ids)
and prints how many systems, menus and resources are selected out of the
known totals.
"""

import json
import sys
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ..utils import open_session, resolve_config

console = Console()


@click.command()
@click.argument("forest_file", type=click.Path())
@click.option("-r", "--role", "role_file", default=None, help="JSON file with the role's granted ids")
@click.option("--json", "json_mode", is_flag=True, help="Output stats as JSON")
@click.pass_context
def stats(ctx: click.Context, forest_file: str, role_file: Optional[str], json_mode: bool):
    """
    Show selected/total counts for a permission forest.

    \b
    Examples:
        permtree stats forest.json
        permtree stats forest.json --role role.json --json
    """
    config = resolve_config(ctx)
    if config is None:
        sys.exit(1)

    session = open_session(forest_file, role_file=role_file, config=config)
    if session is None:
        sys.exit(1)

    summary = session.stats()

    if json_mode:
        click.echo(json.dumps(summary.model_dump(), indent=2))
        return

    table = Table(title="Permission Selection")
    table.add_column("Level", style="cyan")
    table.add_column("Selected", justify="right", style="green")
    table.add_column("Total", justify="right")

    table.add_row("Systems", str(summary.selected_system_count), str(summary.total_system_count))
    table.add_row("Menus", str(summary.selected_menu_count), str(summary.total_menu_count))
    table.add_row("Resources", str(summary.selected_resource_count), str(summary.total_resource_count))

    console.print(table)
