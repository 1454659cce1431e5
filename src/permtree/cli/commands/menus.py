"""
Menus Command - Render the menu tree of one system.

Shows the (optionally search-filtered) menus of a system with their
selection state, and the resources of each menu when they are known.
With --resources, every listed menu's resources are lazily loaded first.
"""

import asyncio
import sys
from typing import List, Optional

import click
from rich.console import Console
from rich.tree import Tree

from ...core.session import PermissionSession
from ...core.types import MenuNode
from ..utils import echo_error, echo_warning, open_session, resolve_config

console = Console()


def _checkbox(selected: bool) -> str:
    return "[green]☑[/green]" if selected else "☐"


def _add_menu(branch: Tree, menu: MenuNode, session: PermissionSession, show_resources: bool) -> None:
    state = session.state
    node = branch.add(f"{_checkbox(state.is_menu_selected(menu.menu_id))} {menu.name} [dim]({menu.menu_id})[/dim]")

    if show_resources:
        for resource in menu.resources:
            node.add(
                f"{_checkbox(state.is_resource_selected(resource.id))} "
                f"[magenta]{resource.type}[/magenta] {resource.name} [dim]{resource.code}[/dim]"
            )

    for child in menu.children:
        _add_menu(node, child, session, show_resources)


def _walk(menus: List[MenuNode]):
    for menu in menus:
        yield menu
        yield from _walk(menu.children)


async def _load_all(session: PermissionSession, menus: List[MenuNode]) -> None:
    for menu in _walk(menus):
        await session.selector.ensure_resources(menu.menu_id)


@click.command()
@click.argument("forest_file", type=click.Path())
@click.option("-s", "--system", "system_id", default=None, help="System id (defaults to the first system)")
@click.option("-q", "--search", "keyword", default="", help="Case-insensitive menu name filter")
@click.option("-r", "--role", "role_file", default=None, help="JSON file with the role's granted ids")
@click.option("--resources", "resources_file", default=None, help="JSON mapping menu id -> resources (lazy loader)")
@click.option("--no-resources", "hide_resources", is_flag=True, help="Only show menus")
@click.pass_context
def menus(
    ctx: click.Context,
    forest_file: str,
    system_id: Optional[str],
    keyword: str,
    role_file: Optional[str],
    resources_file: Optional[str],
    hide_resources: bool,
):
    """
    Show the menu tree of a system.

    \b
    Examples:
        permtree menus forest.json --system sys-001
        permtree menus forest.json -s sys-002 --search user --role role.json
    """
    config = resolve_config(ctx)
    if config is None:
        sys.exit(1)

    session = open_session(forest_file, role_file=role_file, resources_file=resources_file, config=config)
    if session is None:
        sys.exit(1)

    if not session.state.systems:
        echo_warning("The forest contains no systems.")
        return

    if system_id is not None and system_id not in session.state.system_map:
        echo_error(f"Unknown system: {system_id}")
        sys.exit(1)

    if system_id is not None:
        session.focus_system(system_id)
    visible = session.set_search_keyword(keyword)

    if resources_file and not hide_resources:
        try:
            asyncio.run(_load_all(session, visible))
        except Exception as e:
            echo_error(f"Resource loading failed: {e}")
            sys.exit(1)
        # Loaded resources are attached in place; re-read the filtered view
        visible = session.state.current_filtered_menus()

    system = session.state.system_map[session.state.active_system_id]
    root = Tree(
        f"{_checkbox(session.state.is_system_selected(system.system_id))} "
        f"[bold]{system.name}[/bold] [dim]({system.system_id})[/dim]"
    )

    if not visible:
        root.add("[yellow]No menus match[/yellow]")
    for menu in visible:
        _add_menu(root, menu, session, not hide_resources)

    console.print(root)
