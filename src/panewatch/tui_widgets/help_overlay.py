"""
Help overlay widget for TUI.

Keyboard shortcuts and what each status means.
"""

from rich.text import Text
from textual.widgets import Static

from ..status_constants import (
    STATUS_DONE,
    STATUS_ERROR,
    STATUS_IDLE,
    STATUS_PAUSED,
    STATUS_UNREAD,
    STATUS_WORKING,
    get_status_color,
    get_status_label,
    get_status_symbol,
)

KEYS = [
    ("enter", "Jump to session"),
    ("tab", "Next needing attention"),
    ("j/k", "Move selection"),
    ("n", "New Claude window"),
    ("r", "Refresh now"),
    ("p", "Toggle preview"),
    ("m", "Cycle bell (off/bell/both)"),
    ("s", "Toggle Slack relay"),
    ("h/?", "Toggle help"),
    ("q/esc", "Quit"),
]

STATUS_HELP = [
    (STATUS_WORKING, "Claude is running"),
    (STATUS_PAUSED, "Waiting on a permission or question"),
    (STATUS_UNREAD, "Finished, you haven't looked yet"),
    (STATUS_DONE, "Finished and seen, fades to idle"),
    (STATUS_IDLE, "At the prompt"),
    (STATUS_ERROR, "Showing an API error"),
]


class HelpOverlay(Static):
    """Keybindings and status legend. Hidden until toggled."""

    def on_mount(self) -> None:
        self.update(self.build_help())

    @staticmethod
    def build_help() -> Text:
        t = Text()
        t.append(" KEYS\n", style="bold bright_white")
        for key, desc in KEYS:
            t.append(f"  {key:<7}", style="bold cyan")
            t.append(f"{desc}\n")
        t.append("\n STATUS\n", style="bold bright_white")
        for status, desc in STATUS_HELP:
            color = get_status_color(status)
            t.append(f"  {get_status_symbol(status)[0]} ")
            t.append(f"{get_status_label(status):<9}", style=color)
            t.append(f"{desc}\n", style="dim")
        return t
