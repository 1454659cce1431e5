"""
CLI Utilities - Shared helper functions for command line operations.

This module provides common functionality used across the CLI commands:
formatted printing, logging setup, configuration lookup and opening a
permission session from documents on disk.
"""

import logging
from typing import Optional

import click

from ..config import ConfigError, PermtreeConfig
from ..core.documents import load_forest, load_resource_records, load_role_ids
from ..core.loader import StaticResourceLoader
from ..core.session import PermissionSession


def echo_success(message: str) -> None:
    """
    Print a success message with a green checkmark.

    Args:
        message (str): The message to display.
    """
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_warning(message: str) -> None:
    """
    Print a warning message with a yellow alert symbol.

    Args:
        message (str): The warning message to display.
    """
    click.echo(click.style(f"⚠️  {message}", fg="yellow"))


def echo_info(message: str) -> None:
    """
    Print an informational message, dimmed.

    Args:
        message (str): The info message to display.
    """
    click.echo(click.style(f"   {message}", dim=True))


def configure_logging(config: PermtreeConfig, verbose: bool = False) -> None:
    """Route library logging to stderr at the configured level."""
    level = logging.DEBUG if verbose else config.effective_log_level()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )


def resolve_config(ctx: Optional[click.Context]) -> Optional[PermtreeConfig]:
    """
    Return the config loaded by the ``main`` group, or load it now.

    Returns None (after printing the error) if the config file is invalid.
    """
    if ctx is not None and isinstance(ctx.obj, dict) and "config" in ctx.obj:
        return ctx.obj["config"]

    try:
        return PermtreeConfig.load()
    except ConfigError as e:
        echo_error(str(e))
        return None


def open_session(
    forest_file: str,
    role_file: Optional[str] = None,
    resources_file: Optional[str] = None,
    config: Optional[PermtreeConfig] = None,
) -> Optional[PermissionSession]:
    """
    Open a permission session from documents on disk.

    Args:
        forest_file (str): JSON permission forest.
        role_file (str, optional): JSON ``{systemIds, menuIds, resourceIds}``.
        resources_file (str, optional): JSON mapping menu id -> resource records,
            used as the lazy resource loader.
        config (PermtreeConfig, optional): Engine configuration.

    Returns:
        Optional[PermissionSession]: The opened session, or None if any
        document failed to load.
    """
    config = config or PermtreeConfig()

    forest = load_forest(forest_file)
    if forest.is_err():
        echo_error(f"Failed to load forest: {forest.error}")
        return None

    role_ids = None
    if role_file:
        role = load_role_ids(role_file)
        if role.is_err():
            echo_error(f"Failed to load role permissions: {role.error}")
            return None
        role_ids = role.unwrap()

    loader = None
    if resources_file:
        records = load_resource_records(resources_file)
        if records.is_err():
            echo_error(f"Failed to load resources: {records.error}")
            return None
        loader = StaticResourceLoader(records.unwrap(), default_type=config.resources.default_type)

    session = PermissionSession(loader=loader, config=config)
    session.open(forest.unwrap(), role_ids)
    return session
