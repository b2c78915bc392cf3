"""
Protocol definitions for external dependencies.

These interfaces allow dependency injection for testing, enabling us to
swap real implementations (subprocess calls to tmux, git, file I/O) with
mock implementations in tests.
"""

from typing import List, Optional, Protocol, runtime_checkable

from .models import PaneInfo, VcsSummary


class MultiplexerError(Exception):
    """The multiplexer could not list panes this cycle."""


@runtime_checkable
class MultiplexerInterface(Protocol):
    """Interface for terminal multiplexer operations"""

    def list_panes(self) -> List[PaneInfo]:
        """List every pane across all sessions.

        Raises:
            MultiplexerError: if the listing itself fails
        """
        ...

    def capture_visible_text(self, pane_id: str) -> Optional[str]:
        """Capture the visible text of a pane.

        Returns:
            Pane content with trailing blank lines trimmed, or None on failure
        """
        ...

    def focus_window(self, group: str, group_index: int) -> bool:
        """Switch focus to a window and its main (non-dashboard) pane."""
        ...

    def spawn_window(self, name: str = "", directory: str = "",
                     command: Optional[List[str]] = None) -> bool:
        """Open a new window running ``command``."""
        ...


@runtime_checkable
class StatusSource(Protocol):
    """Where a live pane's raw status comes from.

    Two implementations exist: lifecycle events written by hooks, and
    passive classification of the pane's visible text. One is chosen when
    the dashboard starts; the resolver only sees this interface.
    """

    def begin_poll(self) -> None:
        """Snapshot whatever backing data is shared by all panes this poll."""
        ...

    def status_for(self, pane: PaneInfo) -> str:
        """Raw status for a pane whose Claude process is alive."""
        ...


@runtime_checkable
class VcsInterface(Protocol):
    """Interface for version-control metadata lookups"""

    def get_stats(self, directory: str) -> Optional[VcsSummary]:
        """Branch and diff line counts, or None if not a repository."""
        ...
