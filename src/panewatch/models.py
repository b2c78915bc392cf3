"""
Data model for tracked panes.

A PaneSession is re-derived from the tmux pane listing on every poll.
Only VCS data (fetched on its own slower cadence) and the refined status
are carried forward between polls.
"""

import time
from dataclasses import dataclass, replace
from typing import Optional

from .status_constants import STATUS_UNKNOWN, get_status_label


@dataclass(frozen=True)
class PaneInfo:
    """One row of the multiplexer's pane listing."""

    group: str  # tmux session name
    group_index: int  # window index within the session
    window_id: str
    window_name: str
    pane_id: str
    root_pid: int  # pid of the pane's shell
    working_dir: str
    last_activity: float  # epoch seconds
    is_focused: bool

    @property
    def target(self) -> str:
        """tmux target string for this pane's window."""
        return f"{self.group}:{self.group_index}"


@dataclass(frozen=True)
class VcsSummary:
    """Git branch and uncommitted line counts for a working directory."""

    branch: str
    added: int = 0
    removed: int = 0
    dirty: bool = False


@dataclass
class PaneSession:
    """A pane believed to host a Claude process, with its current status."""

    pane: PaneInfo
    occupant_pid: int = 0
    is_occupied: bool = False
    status: str = STATUS_UNKNOWN
    vcs: Optional[VcsSummary] = None

    @property
    def pane_id(self) -> str:
        return self.pane.pane_id

    @property
    def target(self) -> str:
        return self.pane.target

    @property
    def working_dir(self) -> str:
        return self.pane.working_dir

    @property
    def is_focused(self) -> bool:
        return self.pane.is_focused

    @property
    def title(self) -> str:
        """Display name: last path component of the working dir, else window name."""
        if self.pane.working_dir:
            last = self.pane.working_dir.rstrip("/").split("/")[-1]
            if last:
                return last
        return self.pane.window_name

    def description(self, now: Optional[float] = None) -> str:
        parts = [get_status_label(self.status)]
        if self.pane.last_activity:
            parts.append(relative_time(self.pane.last_activity, now))
        return " · ".join(parts)

    def fingerprint(self) -> str:
        """Comparable string covering everything the list renders."""
        vcs = self.vcs or VcsSummary(branch="")
        return (
            f"{self.pane.group}:{self.pane.group_index}:{self.status}:"
            f"{int(self.pane.last_activity)}:{vcs.branch}:{vcs.added}:{vcs.removed}"
        )

    def with_vcs(self, vcs: Optional[VcsSummary]) -> "PaneSession":
        return replace(self, vcs=vcs)


def relative_time(epoch: float, now: Optional[float] = None) -> str:
    """Format an epoch timestamp as a short relative duration."""
    now = time.time() if now is None else now
    delta = max(0.0, now - epoch)
    if delta < 60:
        return "just now"
    if delta < 3600:
        return f"{int(delta // 60)}m ago"
    if delta < 86400:
        return f"{int(delta // 3600)}h ago"
    return f"{int(delta // 86400)}d ago"
