"""
Shared CLI state: Typer apps, console, and the default command.
"""

from typing import Annotated, Optional

import typer
from rich.console import Console

# Main app
app = typer.Typer(
    name="panewatch",
    help="Dashboard for Claude Code sessions running in tmux",
    no_args_is_help=False,
    invoke_without_command=True,
    rich_markup_mode="rich",
)

# Hooks subcommand group
hooks_app = typer.Typer(
    name="hooks",
    help="Manage Claude Code hook integration.",
    no_args_is_help=True,
)
app.add_typer(hooks_app, name="hooks")

# Relay subcommand group
relay_app = typer.Typer(
    name="relay",
    help="Configure remote approval of permission requests over Slack.",
    no_args_is_help=True,
)
app.add_typer(relay_app, name="relay")

# Config subcommand group
config_app = typer.Typer(
    name="config",
    help="Manage configuration",
    no_args_is_help=False,
    invoke_without_command=True,
)
app.add_typer(config_app, name="config")

# Console for rich output
console = Console()


def validate_strategy(strategy: Optional[str]) -> Optional[str]:
    """Reject unknown --strategy values before anything starts."""
    from ..settings import STRATEGY_EVENTS, STRATEGY_PASSIVE

    if strategy is not None and strategy not in (STRATEGY_EVENTS, STRATEGY_PASSIVE):
        raise typer.BadParameter(f"expected '{STRATEGY_EVENTS}' or '{STRATEGY_PASSIVE}', got '{strategy}'")
    return strategy


StrategyOption = Annotated[
    Optional[str],
    typer.Option(
        "--strategy",
        callback=validate_strategy,
        help="Status detection: 'events' (hooks) or 'passive' (pane scraping)",
    ),
]


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    strategy: StrategyOption = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Debug logging to the log file")
    ] = False,
):
    """Launch the dashboard when no command is given."""
    if ctx.invoked_subcommand is None:
        from ..tui import run_tui

        run_tui(strategy=strategy, verbose=verbose)