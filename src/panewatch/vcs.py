"""
Git branch and diff statistics with a short-lived per-directory cache.

Each pane's working directory is looked up on every poll from several worker
threads at once, so results are cached for a few seconds behind one lock.
"""

import logging
import re
import subprocess
import threading
import time
from typing import Callable, Dict, Optional, Tuple

from .models import VcsSummary

logger = logging.getLogger(__name__)

DEFAULT_TTL = 3.0  # seconds

SHORTSTAT_PATTERN = re.compile(
    r'(\d+) files? changed(?:, (\d+) insertions?\(\+\))?(?:, (\d+) deletions?\(-\))?'
)


def parse_shortstat(output: str) -> Tuple[int, int]:
    """Parse ``git diff --shortstat`` output into (added, removed)."""
    match = SHORTSTAT_PATTERN.search(output or "")
    if not match:
        return 0, 0
    added = int(match.group(2)) if match.group(2) else 0
    removed = int(match.group(3)) if match.group(3) else 0
    return added, removed


def _git(directory: str, *args: str) -> Optional[str]:
    """Run a git command in ``directory``. Returns stdout or None on failure."""
    try:
        result = subprocess.run(
            ["git", "-C", directory, *args],
            capture_output=True,
            text=True,
            timeout=2,
        )
    except (subprocess.SubprocessError, OSError) as e:
        logger.debug("git %s in %s failed: %s", args[0], directory, e)
        return None
    if result.returncode != 0:
        return None
    return result.stdout


def fetch_git_stats(directory: str) -> Optional[VcsSummary]:
    """Read branch and staged + unstaged line counts. None if not a repo."""
    branch = _git(directory, "rev-parse", "--abbrev-ref", "HEAD")
    if branch is None:
        return None

    added = removed = 0
    for extra in ((), ("--cached",)):
        out = _git(directory, "diff", *extra, "--shortstat")
        if out is not None:
            a, r = parse_shortstat(out)
            added += a
            removed += r

    return VcsSummary(
        branch=branch.strip(),
        added=added,
        removed=removed,
        dirty=added > 0 or removed > 0,
    )


class GitStatsCache:
    """TTL cache in front of fetch_git_stats. Safe to share across threads."""

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        fetcher: Callable[[str], Optional[VcsSummary]] = fetch_git_stats,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self._fetcher = fetcher
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[Optional[VcsSummary], float]] = {}

    def get_stats(self, directory: str) -> Optional[VcsSummary]:
        with self._lock:
            entry = self._entries.get(directory)
            if entry is not None and self._clock() - entry[1] < self.ttl:
                return entry[0]

        # Fetch outside the lock so slow repos don't serialize every pane
        summary = self._fetcher(directory)

        with self._lock:
            self._entries[directory] = (summary, self._clock())
        return summary

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
