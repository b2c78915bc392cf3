"""
Relay commands: setup, test, show.
"""

from typing import Annotated, Optional

import typer
from rich import print as rprint

from ._shared import relay_app


@relay_app.command("setup")
def relay_setup(
    bot_token: Annotated[
        Optional[str], typer.Option("--bot-token", help="Slack bot token (xoxb-...)")
    ] = None,
    channel_id: Annotated[
        Optional[str], typer.Option("--channel", help="Slack channel ID, e.g. C0123456")
    ] = None,
):
    """Save the Slack bot token and channel used for remote approvals.

    The bot needs chat:write and channels:history (or groups:history for
    private channels). Toggle the relay on with 's' in the dashboard.
    """
    from ..approval_relay import RelayConfig
    from ..settings import get_relay_config_path

    bot_token = bot_token or typer.prompt("Slack bot token", hide_input=True)
    channel_id = channel_id or typer.prompt("Slack channel ID")

    config = RelayConfig(bot_token=bot_token.strip(), channel_id=channel_id.strip())
    if not config.is_complete:
        rprint("[red]Error:[/red] both a bot token and a channel ID are required")
        raise typer.Exit(1)

    config.save()
    rprint(f"[green]✓[/green] Saved relay config to [bold]{get_relay_config_path()}[/bold]")
    rprint("[dim]Run 'panewatch relay test' to check it[/dim]")


@relay_app.command("test")
def relay_test():
    """Send a test message to the configured channel."""
    from ..approval_relay import RelayConfig, RelayError, SlackRelay

    config = RelayConfig.load()
    if config is None:
        rprint("[yellow]Relay is not configured.[/yellow] Run 'panewatch relay setup'")
        raise typer.Exit(1)

    try:
        SlackRelay(config).send_message(":wave: panewatch relay test")
    except RelayError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    rprint("[green]✓[/green] Test message sent")


@relay_app.command("show")
def relay_show():
    """Show relay configuration (token masked)."""
    from ..approval_relay import RelayConfig
    from ..settings import TUIPreferences, get_relay_config_path

    config = RelayConfig.load()
    if config is None:
        rprint(f"[dim]No relay config at {get_relay_config_path()}[/dim]")
        return
    masked = config.bot_token[:8] + "…" if len(config.bot_token) > 8 else "…"
    enabled = TUIPreferences.load().relay_enabled
    rprint(f"[bold]Relay[/bold] ({get_relay_config_path()}):\n")
    rprint(f"  bot_token: {masked}")
    rprint(f"  channel_id: {config.channel_id}")
    rprint(f"  enabled: {enabled}")
