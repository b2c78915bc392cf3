"""
Monitoring commands: hook (called by Claude Code) and status.
"""

import sys
import time
from typing import Annotated

import typer
from rich import print as rprint
from rich.table import Table

from ._shared import app, console, StrategyOption


@app.command("hook", hidden=True)
def hook_cmd(
    event: Annotated[str, typer.Argument(help="Event kind, e.g. stop or permission-request")],
):
    """Handle a Claude Code hook event (internal).

    Reads the hook's JSON payload from stdin and records the pane's status.
    For permission requests with the relay on, prints the decision.
    """
    from ..config import load_engine_settings
    from ..event_store import EventStore
    from ..hook_handler import handle_hook_event
    from ..logging_config import setup_logging
    from ..settings import get_log_path

    # stdout belongs to Claude Code here
    try:
        setup_logging(log_file=get_log_path(), console=False)
    except OSError:
        setup_logging(console=False)

    try:
        stdin_text = sys.stdin.read()
    except OSError:
        stdin_text = ""

    settings = load_engine_settings()
    store = EventStore(suppression_window=settings.suppression_window)
    output = handle_hook_event(event, stdin_text, store=store)
    if output:
        print(output)


@app.command()
def status(strategy: StrategyOption = None):
    """Print one snapshot of every Claude pane and exit."""
    from ..config import load_engine_settings
    from ..implementations import RealTmux
    from ..models import relative_time
    from ..poller import PollOrchestrator
    from ..logging_config import setup_cli_logging
    from ..status_constants import get_status_color, get_status_symbol, get_status_label

    setup_cli_logging()
    settings = load_engine_settings()
    if strategy:
        settings.strategy = strategy

    orchestrator = PollOrchestrator.from_settings(
        RealTmux(sidebar_title=settings.sidebar_title), settings
    )
    result = orchestrator.snapshot()
    if result.error:
        rprint(f"[red]Error:[/red] {result.error}")
        raise typer.Exit(1)
    if not result.sessions:
        rprint("[dim]No Claude sessions found[/dim]")
        return

    now = time.time()
    table = Table(box=None, pad_edge=False)
    table.add_column("")
    table.add_column("Target")
    table.add_column("Session")
    table.add_column("Status")
    table.add_column("Activity", style="dim")
    table.add_column("Directory", style="dim")
    for session in result.sessions:
        color = get_status_color(session.status)
        symbol, _ = get_status_symbol(session.status)
        table.add_row(
            symbol,
            session.target,
            session.title,
            f"[{color}]{get_status_label(session.status)}[/{color}]",
            relative_time(session.pane.last_activity, now) if session.pane.last_activity else "",
            session.working_dir,
        )
    console.print(table)
