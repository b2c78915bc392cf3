"""
Real implementations of protocol interfaces.

These are production implementations that use libtmux for tmux operations.
"""

import logging
import os
from typing import List, Optional

import libtmux
from libtmux.exc import LibTmuxException

from .models import PaneInfo
from .protocols import MultiplexerError

logger = logging.getLogger(__name__)

# Fields for list-panes, tab separated
PANE_FORMAT = "\t".join([
    "#{session_name}",
    "#{window_index}",
    "#{window_id}",
    "#{window_name}",
    "#{pane_id}",
    "#{pane_pid}",
    "#{pane_current_path}",
    "#{window_activity}",
    "#{window_active}",
])
PANE_FIELD_COUNT = 9

DEFAULT_SIDEBAR_TITLE = "panewatch-sidebar"


def _to_int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


def parse_pane_line(line: str) -> Optional[PaneInfo]:
    """Parse one list-panes row. Returns None for malformed rows."""
    fields = line.split("\t")
    if len(fields) < PANE_FIELD_COUNT:
        return None
    return PaneInfo(
        group=fields[0],
        group_index=_to_int(fields[1]),
        window_id=fields[2],
        window_name=fields[3],
        pane_id=fields[4],
        root_pid=_to_int(fields[5]),
        working_dir=fields[6],
        last_activity=float(_to_int(fields[7])),
        is_focused=fields[8] == "1",
    )


class RealTmux:
    """Production implementation of MultiplexerInterface using libtmux."""

    def __init__(self, socket_name: Optional[str] = None,
                 sidebar_title: str = DEFAULT_SIDEBAR_TITLE):
        """Initialize with optional socket name for test isolation.

        If no socket_name is provided, checks PANEWATCH_TMUX_SOCKET env var.
        """
        self._socket_name = socket_name or os.environ.get("PANEWATCH_TMUX_SOCKET")
        self._server: Optional[libtmux.Server] = None
        self.sidebar_title = sidebar_title

    @property
    def server(self) -> libtmux.Server:
        """Lazy-load the tmux server connection."""
        if self._server is None:
            if self._socket_name:
                self._server = libtmux.Server(socket_name=self._socket_name)
            else:
                self._server = libtmux.Server()
        return self._server

    def _cmd(self, *args: str) -> List[str]:
        """Run a tmux command, raising LibTmuxException on stderr output."""
        proc = self.server.cmd(*args)
        if proc.stderr:
            raise LibTmuxException("; ".join(proc.stderr))
        return proc.stdout

    def list_panes(self) -> List[PaneInfo]:
        try:
            rows = self._cmd("list-panes", "-a", "-F", PANE_FORMAT)
        except (LibTmuxException, OSError) as e:
            raise MultiplexerError(f"tmux list-panes: {e}") from e

        panes = []
        for row in rows:
            if not row:
                continue
            pane = parse_pane_line(row)
            if pane is not None:
                panes.append(pane)
        return panes

    def capture_visible_text(self, pane_id: str) -> Optional[str]:
        try:
            lines = self._cmd("capture-pane", "-t", pane_id, "-p")
        except (LibTmuxException, OSError) as e:
            logger.debug("capture-pane %s failed: %s", pane_id, e)
            return None
        return "\n".join(lines).rstrip("\n ")

    def focus_window(self, group: str, group_index: int) -> bool:
        """Select the window, then the first pane that is not a dashboard."""
        target = f"{group}:{group_index}"
        try:
            self._cmd("select-window", "-t", target)
        except (LibTmuxException, OSError) as e:
            logger.warning("select-window %s failed: %s", target, e)
            return False

        # Pane focus is best-effort once the window is selected
        try:
            rows = self._cmd("list-panes", "-t", target, "-F", "#{pane_id}\t#{pane_title}")
            for row in rows:
                pane_id, _, title = row.partition("\t")
                if pane_id and title != self.sidebar_title:
                    self._cmd("select-pane", "-t", pane_id)
                    break
        except (LibTmuxException, OSError) as e:
            logger.debug("select-pane in %s failed: %s", target, e)
        return True

    def spawn_window(self, name: str = "", directory: str = "",
                     command: Optional[List[str]] = None) -> bool:
        args = ["new-window"]
        if name:
            args += ["-n", name]
        if directory:
            args += ["-c", directory]
        args += command or ["claude"]
        try:
            self._cmd(*args)
            return True
        except (LibTmuxException, OSError) as e:
            logger.warning("new-window failed: %s", e)
            return False

    def set_pane_title(self, pane_id: str, title: str) -> bool:
        """Title a pane so focus_window can skip it."""
        try:
            self._cmd("select-pane", "-t", pane_id, "-T", title)
            return True
        except (LibTmuxException, OSError):
            return False
