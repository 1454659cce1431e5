"""
Init Command - Project bootstrap.

This module handles the `permtree init` command, which writes the project
configuration file and, with --demo, a sample workspace containing a
permission forest, lazily loaded resources and a role's granted ids.
"""

from pathlib import Path

import click
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm

from ...config import CONFIG_DIR, CONFIG_FILE
from ...core.demo import DemoManager

console = Console()

# Default configuration template
DEFAULT_CONFIG = {
    "version": "1.0",
    "cascade": {
        "retry_empty_load": True,
    },
    "resources": {
        "default_type": "BUTTON",
    },
    "logging": {
        "level": "WARNING",
    },
}


def _init_project(root_dir: Path) -> Path:
    """Write the default configuration under root_dir. Returns its path."""
    config_dir = root_dir / CONFIG_DIR
    config_file = config_dir / CONFIG_FILE

    config_dir.mkdir(parents=True, exist_ok=True)
    with open(config_file, "w") as f:
        yaml.dump(DEFAULT_CONFIG, f, sort_keys=False, default_flow_style=False)

    console.print("\n✨ [bold green]Initialized successfully![/bold green]")
    console.print(f"   Config created at: [dim]{config_file}[/dim]")
    return config_file


@click.command()
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
@click.option("--demo", is_flag=True, help="Write a sample forest, resources and role to try permtree")
def init(force: bool, demo: bool):
    """
    Initialize permtree in the current directory.

    If --demo is used, a sample workspace is created in ./permtree-demo
    and initialized automatically.
    """
    console.print(Panel.fit("🔐 [bold blue]permtree Initialization[/bold blue]", border_style="blue"))

    if demo:
        manager = DemoManager(Path.cwd())
        demo_dir = manager.provision()
        console.print(f"📂 Created demo workspace at: [bold]{demo_dir}[/bold]")

        _init_project(demo_dir)

        console.print("\n[bold green]Ready to go! Try these commands:[/bold green]")
        console.print(f"1. cd {demo_dir.name}")
        console.print("2. [bold cyan]permtree stats forest.json --role role.json[/bold cyan]")
        console.print("3. [bold cyan]permtree apply forest.json select-menu:menu-001 --resources resources.json[/bold cyan]")
        return

    root_dir = Path.cwd()
    config_file = root_dir / CONFIG_DIR / CONFIG_FILE

    if config_file.exists() and not force:
        console.print(f"[yellow]Configuration already exists at {config_file}[/yellow]")
        if not Confirm.ask("Do you want to overwrite it?"):
            console.print("Aborted.")
            return

    _init_project(root_dir)
