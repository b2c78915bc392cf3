"""
Hooks commands: install, uninstall, status.
"""

from typing import Annotated

import typer
from rich import print as rprint

from ._shared import hooks_app

ProjectOption = Annotated[
    bool,
    typer.Option("--project", "-p", help="Use project-level .claude/settings.json instead of user-level"),
]


def _editor(project: bool):
    from ..claude_config import ClaudeConfigEditor

    if project:
        return ClaudeConfigEditor.project_level(), "project"
    return ClaudeConfigEditor.user_level(), "user"


@hooks_app.command("install")
def hooks_install(project: ProjectOption = False):
    """Install the panewatch hooks into Claude Code settings.

    One hook per lifecycle event, each running 'panewatch hook <event>'.
    Hooks you added yourself are left alone.
    """
    from ..claude_config import install_hooks
    from ..hook_handler import HOOK_EVENTS

    editor, level = _editor(project)
    try:
        added = install_hooks(editor)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if added:
        rprint(f"[green]✓[/green] Installed {len(added)} hook(s) in {level} settings")
        rprint(f"  [dim]{editor.path}[/dim]")
        rprint(f"\n  Events: {', '.join(added)}")
    else:
        rprint(f"[green]✓[/green] All {len(HOOK_EVENTS)} hooks already installed in {level} settings")


@hooks_app.command("uninstall")
def hooks_uninstall(project: ProjectOption = False):
    """Remove the panewatch hooks from Claude Code settings."""
    from ..claude_config import uninstall_hooks

    editor, level = _editor(project)
    try:
        removed = uninstall_hooks(editor)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if removed:
        rprint(f"[green]✓[/green] Removed {len(removed)} hook(s) from {level} settings")
    else:
        rprint(f"[dim]No panewatch hooks found in {level} settings[/dim]")


@hooks_app.command("status")
def hooks_status_cmd():
    """Show which panewatch hooks are installed."""
    from ..claude_config import ClaudeConfigEditor, hooks_status
    from ..hook_handler import HOOK_EVENTS, hook_command

    for level_name, editor in [
        ("User-level", ClaudeConfigEditor.user_level()),
        ("Project-level", ClaudeConfigEditor.project_level()),
    ]:
        rprint(f"\n{level_name} ({editor.path}):")
        if not editor.path.exists():
            rprint("  [dim](no settings file)[/dim]")
            continue
        try:
            status = hooks_status(editor)
        except ValueError:
            rprint("  [red](invalid JSON)[/red]")
            continue

        for event, installed in status.items():
            mark = "[green]✓[/green]" if installed else "[dim]-[/dim]"
            rprint(f"  {mark} {event:<18} {hook_command(HOOK_EVENTS[event])}")
