"""
In-memory implementations of the protocol interfaces.

Used by the unit tests and handy for driving the dashboard without tmux.
"""

from typing import Dict, List, Optional, Tuple

from .models import PaneInfo, VcsSummary
from .protocols import MultiplexerError


class MockMultiplexer:
    """Mock implementation of MultiplexerInterface for testing."""

    def __init__(self, panes: Optional[List[PaneInfo]] = None):
        self.panes: List[PaneInfo] = list(panes or [])
        self.pane_text: Dict[str, str] = {}
        self.fail_listing: Optional[str] = None
        self.focused: List[Tuple[str, int]] = []
        self.spawned: List[dict] = []

    def set_pane_text(self, pane_id: str, text: str) -> None:
        self.pane_text[pane_id] = text

    def list_panes(self) -> List[PaneInfo]:
        if self.fail_listing:
            raise MultiplexerError(self.fail_listing)
        return list(self.panes)

    def capture_visible_text(self, pane_id: str) -> Optional[str]:
        return self.pane_text.get(pane_id)

    def focus_window(self, group: str, group_index: int) -> bool:
        if not any(p.group == group and p.group_index == group_index for p in self.panes):
            return False
        self.focused.append((group, group_index))
        return True

    def spawn_window(self, name: str = "", directory: str = "",
                     command: Optional[List[str]] = None) -> bool:
        self.spawned.append({"name": name, "directory": directory, "command": command})
        return True


class MockVcs:
    """Mock implementation of VcsInterface for testing."""

    def __init__(self, stats: Optional[Dict[str, VcsSummary]] = None):
        self.stats: Dict[str, VcsSummary] = dict(stats or {})
        self.calls: List[str] = []

    def get_stats(self, directory: str) -> Optional[VcsSummary]:
        self.calls.append(directory)
        return self.stats.get(directory)
