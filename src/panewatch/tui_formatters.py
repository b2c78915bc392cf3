"""
Pure formatting functions for the dashboard.

They turn sessions into Rich Text. No I/O and no widget state, so they
are tested directly.
"""

from typing import List, Optional, Sequence

from rich.text import Text

from .models import PaneSession, VcsSummary, relative_time
from .status_constants import (
    STATUS_WORKING,
    get_status_color,
    get_status_label,
    get_status_symbol,
    needs_attention,
)

SPINNER_FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"


def spinner_frame(tick: int) -> str:
    return SPINNER_FRAMES[tick % len(SPINNER_FRAMES)]


def format_diff(vcs: Optional[VcsSummary]) -> Text:
    """'+12 -3' in green/red, or nothing for a clean tree."""
    text = Text()
    if vcs is None or not vcs.dirty:
        return text
    text.append(f"+{vcs.added}", style="green")
    text.append(" ")
    text.append(f"-{vcs.removed}", style="red")
    return text


def truncate(value: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(value) <= width:
        return value
    if width == 1:
        return "…"
    return value[:width - 1] + "…"


def render_session_row(
    session: PaneSession,
    selected: bool = False,
    tick: int = 0,
    width: int = 40,
    now: Optional[float] = None,
) -> Text:
    """Two-line entry: title + status symbol, then status, age and git info."""
    color = get_status_color(session.status)
    symbol = spinner_frame(tick) if session.status == STATUS_WORKING else get_status_symbol(session.status)[0]

    row = Text()
    row.append("▌" if selected else " ", style="bold cyan" if selected else "")
    row.append(f"{symbol} ", style=color)
    row.append(truncate(session.title, max(width - 4, 1)),
               style="bold" if needs_attention(session.status) or selected else "")
    row.append("\n  ")

    row.append(get_status_label(session.status), style=color)
    if session.pane.last_activity:
        row.append(f" · {relative_time(session.pane.last_activity, now)}", style="dim")
    if session.vcs is not None and session.vcs.branch:
        row.append(f"  {truncate(session.vcs.branch, 20)}", style="magenta")
        diff = format_diff(session.vcs)
        if diff.plain:
            row.append(" ")
            row.append_text(diff)
    return row


def render_session_list(
    sessions: Sequence[PaneSession],
    selected_index: int,
    tick: int = 0,
    width: int = 40,
    now: Optional[float] = None,
) -> Text:
    if not sessions:
        return Text("No Claude sessions found\nPress n to start one", style="dim italic")
    text = Text()
    for i, session in enumerate(sessions):
        if i:
            text.append("\n")
        text.append_text(render_session_row(session, i == selected_index, tick, width, now))
    return text


def trim_preview(content: str, max_lines: int, max_width: int) -> List[str]:
    """Last max_lines lines of pane content, each cut to max_width."""
    lines = content.split("\n")
    if max_lines > 0 and len(lines) > max_lines:
        lines = lines[-max_lines:]
    if max_width > 0:
        lines = [line[:max_width] for line in lines]
    return lines


def next_attention_index(sessions: Sequence[PaneSession], current: int) -> Optional[int]:
    """Index of the next session needing attention after ``current``, wrapping."""
    count = len(sessions)
    for offset in range(1, count + 1):
        index = (current + offset) % count
        if needs_attention(sessions[index].status):
            return index
    return None
