"""
Apply Command - Replay operator toggles and emit the save payload.

Opens a permission session, applies operations such as
``select-menu:menu-002`` or ``deselect-resource:res-001`` in the order
given, and prints (or writes) the ``{systemIds, menuIds, resourceIds}``
payload that would be persisted for the role.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click

from ...core.session import PermissionSession
from ...core.types import ToggleAction
from ..utils import echo_error, echo_info, echo_success, open_session, resolve_config

logger = logging.getLogger(__name__)


def parse_operation(raw: str) -> Tuple[ToggleAction, str]:
    """
    Parse ``action:id`` into a ToggleAction and a target id.

    Raises:
        click.BadParameter: On a missing separator, empty id or unknown action.
    """
    action, sep, target_id = raw.partition(":")
    if not sep or not target_id:
        raise click.BadParameter(f"expected ACTION:ID, got {raw!r}", param_hint="OPERATIONS")

    try:
        return ToggleAction(action.strip().lower()), target_id.strip()
    except ValueError:
        choices = ", ".join(a.value for a in ToggleAction)
        raise click.BadParameter(f"unknown action {action!r} (choose from {choices})", param_hint="OPERATIONS")


async def _replay(session: PermissionSession, operations: List[Tuple[ToggleAction, str]]) -> None:
    for action, target_id in operations:
        logger.debug("Applying %s on %s", action, target_id)
        await session.apply(action, target_id)


@click.command()
@click.argument("forest_file", type=click.Path())
@click.argument("operations", nargs=-1)
@click.option("-r", "--role", "role_file", default=None, help="JSON file with the role's granted ids")
@click.option("--resources", "resources_file", default=None, help="JSON mapping menu id -> resources (lazy loader)")
@click.option("-o", "--output", default=None, help="Write the payload to this file instead of stdout")
@click.pass_context
def apply(
    ctx: click.Context,
    forest_file: str,
    operations: Tuple[str, ...],
    role_file: Optional[str],
    resources_file: Optional[str],
    output: Optional[str],
):
    """
    Apply toggles to a role and print the resulting payload.

    OPERATIONS are ACTION:ID pairs where ACTION is one of select-system,
    deselect-system, select-menu, deselect-menu, select-resource,
    deselect-resource.

    \b
    Examples:
        permtree apply forest.json select-menu:menu-001 --resources resources.json
        permtree apply forest.json deselect-resource:res-001 --role role.json -o grant.json
    """
    parsed = [parse_operation(op) for op in operations]

    config = resolve_config(ctx)
    if config is None:
        sys.exit(1)

    session = open_session(forest_file, role_file=role_file, resources_file=resources_file, config=config)
    if session is None:
        sys.exit(1)

    try:
        asyncio.run(_replay(session, parsed))
    except Exception as e:
        echo_error(f"Resource loading failed: {e}")
        sys.exit(1)

    payload = json.dumps(session.to_payload().to_wire(), indent=2)

    if output:
        Path(output).write_text(payload + "\n", encoding="utf-8")
        summary = session.stats()
        echo_success(f"Payload written to {output}")
        echo_info(
            f"{summary.selected_system_count} systems, {summary.selected_menu_count} menus, "
            f"{summary.selected_resource_count} resources selected"
        )
        return

    click.echo(payload)
