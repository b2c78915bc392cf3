"""
Attention chime for panes that just finished or need input.

The bell is a BEL written straight to the controlling terminal. Textual owns
stdout, and a BEL written there would be swallowed by the alternate screen.
On macOS the "both" mode also posts a desktop banner.
"""

import logging
import shutil
import subprocess
import sys
import time
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

BELL_OFF = "off"
BELL_ON = "bell"
BELL_BOTH = "both"

BEL = "\a"
TTY_PATH = "/dev/tty"


def next_bell_mode(mode: str) -> str:
    """Cycle off -> bell -> both -> off."""
    modes = AttentionNotifier.MODES
    try:
        return modes[(modes.index(mode) + 1) % len(modes)]
    except ValueError:
        return BELL_ON


class AttentionNotifier:
    """Coalescing bell for attention transitions.

    The dashboard queues pane names while applying a poll, then flushes once.
    Flushes closer together than ``coalesce_seconds`` are held until the next
    cycle so a burst of finishing panes chimes once.
    """

    MODES = (BELL_OFF, BELL_ON, BELL_BOTH)

    def __init__(
        self,
        mode: str = BELL_ON,
        coalesce_seconds: float = 2.0,
        tty_path: str = TTY_PATH,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.mode = mode if mode in self.MODES else BELL_ON
        self.coalesce_seconds = coalesce_seconds
        self.tty_path = tty_path
        self._clock = clock
        self._pending: List[str] = []
        self._last_send: Optional[float] = None
        self._has_terminal_notifier: Optional[bool] = None

    def queue(self, name: str) -> None:
        if self.mode == BELL_OFF:
            return
        self._pending.append(name)

    def flush(self) -> bool:
        """Ring for everything queued. Returns True if a chime went out."""
        if not self._pending or self.mode == BELL_OFF:
            self._pending.clear()
            return False

        now = self._clock()
        if self._last_send is not None and now - self._last_send < self.coalesce_seconds:
            return False

        names = list(self._pending)
        self._pending.clear()
        self._last_send = now

        self.ring()
        if self.mode == BELL_BOTH and sys.platform == "darwin":
            self._send_banner(self.format_message(names))
        return True

    def ring(self) -> None:
        try:
            with open(self.tty_path, "w") as tty:
                tty.write(BEL)
        except OSError as e:
            logger.debug("Could not ring bell on %s: %s", self.tty_path, e)

    @staticmethod
    def format_message(names: List[str]) -> str:
        if len(names) == 1:
            return f"{names[0]} needs attention"
        if len(names) == 2:
            return f"{names[0]} and {names[1]} need attention"
        return f"{names[0]}, {names[1]} and {len(names) - 2} more need attention"

    def _send_banner(self, message: str) -> None:
        if self._has_terminal_notifier is None:
            self._has_terminal_notifier = shutil.which("terminal-notifier") is not None
        if self._has_terminal_notifier:
            cmd = ["terminal-notifier", "-title", "Panewatch", "-group", "panewatch-bell",
                   "-message", message]
        else:
            cmd = ["osascript", "-e", f'display notification "{message}" with title "Panewatch"']
        try:
            subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        except OSError as e:
            logger.debug("Desktop notification failed: %s", e)
