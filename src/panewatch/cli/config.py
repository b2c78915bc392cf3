"""
Config commands: init, show, path.
"""

from typing import Annotated

import typer
from rich import print as rprint

from ._shared import config_app


@config_app.callback(invoke_without_command=True)
def config_default(ctx: typer.Context):
    """Show current configuration (default when no subcommand given)."""
    if ctx.invoked_subcommand is None:
        _config_show()


@config_app.command("init")
def config_init(
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Overwrite existing config file")
    ] = False,
):
    """Create a config file with documented defaults.

    Creates ~/.panewatch/config.yaml with all options commented out.
    Use --force to overwrite an existing config file.
    """
    from ..config import CONFIG_TEMPLATE
    from ..settings import get_config_path

    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.exists() and not force:
        rprint(f"[yellow]Config file already exists:[/yellow] {path}")
        rprint("[dim]Use --force to overwrite[/dim]")
        raise typer.Exit(1)

    path.write_text(CONFIG_TEMPLATE)
    rprint(f"[green]✓[/green] Created config file: [bold]{path}[/bold]")
    rprint("[dim]Edit to customize your settings[/dim]")


@config_app.command("show")
def config_show():
    """Show current configuration."""
    _config_show()


def _config_show():
    from dataclasses import asdict

    from ..config import get_relay_settings, load_config, load_engine_settings
    from ..settings import EngineSettings, get_config_path

    path = get_config_path()
    if not path.exists():
        rprint(f"[dim]No config file found at {path}[/dim]")
        rprint("[dim]Run 'panewatch config init' to create one[/dim]")
        return

    config = load_config()
    if not config:
        rprint(f"[dim]Config file is empty: {path}[/dim]")
        return

    rprint(f"[bold]Configuration[/bold] ({path}):\n")

    defaults = asdict(EngineSettings())
    settings = asdict(load_engine_settings())
    rprint("  engine:")
    for key, value in settings.items():
        marker = "" if value == defaults[key] else "  [cyan](custom)[/cyan]"
        rprint(f"    {key}: {value}{marker}")

    relay = get_relay_settings()
    rprint("  relay:")
    rprint(f"    timeout: {relay['timeout']:.0f}s")
    rprint(f"    poll_interval: {relay['poll_interval']:.0f}s")


@config_app.command("path")
def config_path():
    """Show the config file path."""
    from ..settings import get_config_path

    print(get_config_path())
