"""
Session list widget: one two-line entry per Claude pane.
"""

import time
from typing import List, Optional

from textual.reactive import reactive
from textual.widgets import Static

from ..models import PaneSession
from ..tui_formatters import render_session_list


class SessionList(Static):
    """Selectable list of sessions. Selection follows the pane, not the row."""

    selected_index: reactive[int] = reactive(0)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.sessions: List[PaneSession] = []
        self.tick = 0

    @property
    def selected(self) -> Optional[PaneSession]:
        if not self.sessions:
            return None
        return self.sessions[min(self.selected_index, len(self.sessions) - 1)]

    def set_sessions(self, sessions: List[PaneSession]) -> None:
        """Replace the list, keeping the same pane selected if it's still there."""
        current = self.selected
        self.sessions = list(sessions)
        index = 0
        if current is not None:
            for i, session in enumerate(self.sessions):
                if session.pane_id == current.pane_id:
                    index = i
                    break
        self.selected_index = min(index, max(len(self.sessions) - 1, 0))
        self.refresh_rows()

    def move(self, delta: int) -> None:
        if self.sessions:
            self.selected_index = (self.selected_index + delta) % len(self.sessions)

    def watch_selected_index(self, old: int, new: int) -> None:
        self.refresh_rows()

    def refresh_rows(self) -> None:
        width = self.size.width if self.size.width > 0 else 40
        self.update(render_session_list(self.sessions, self.selected_index, self.tick, width, time.time()))
