"""
File-backed Event Store shared between the hook handler and the dashboard.

One JSON file per tmux pane under ~/.panewatch/events/:

    {"pane_id": "%25", "session_id": "abc", "status": "paused",
     "timestamp": 1234567890.123}

Writers replace a pane's file atomically (temp file in the same directory,
then rename), so a reader never sees a partial record and no cross-process
lock is needed. Any number of hook processes may write while any number of
dashboards read.
"""

import json
import logging
import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from .settings import get_event_dir
from .status_constants import EVENT_IDLE, EVENT_PAUSED

logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"
TEMP_PREFIX = ".tmp-"

DEFAULT_SUPPRESSION_WINDOW = 10.0  # seconds


@dataclass(frozen=True)
class EventRecord:
    """Latest lifecycle status reported for one pane."""

    pane_id: str
    status: str  # working, paused, idle, stopped
    timestamp: float
    session_id: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "pane_id": self.pane_id,
            "status": self.status,
            "timestamp": self.timestamp,
        }
        if self.session_id:
            data["session_id"] = self.session_id
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "EventRecord":
        """Validate and build a record.

        Raises:
            ValueError: if required fields are missing or mistyped
        """
        if not isinstance(data, dict):
            raise ValueError("event record is not an object")
        pane_id = data.get("pane_id")
        status = data.get("status")
        if not isinstance(pane_id, str) or not pane_id:
            raise ValueError("event record has no pane_id")
        if not isinstance(status, str):
            raise ValueError("event record has no status")
        try:
            timestamp = float(data["timestamp"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"event record has bad timestamp: {e}") from e
        session_id = data.get("session_id")
        if session_id is not None and not isinstance(session_id, str):
            session_id = None
        return cls(pane_id=pane_id, status=status, timestamp=timestamp, session_id=session_id)

    def age(self, now: Optional[float] = None) -> float:
        now = time.time() if now is None else now
        return now - self.timestamp

    def is_stale(self, max_age: float, now: Optional[float] = None) -> bool:
        return self.age(now) > max_age


def record_filename(pane_id: str) -> str:
    """Deterministic file name for a pane id ("%25" -> "%25.json")."""
    return pane_id.replace("/", "%2F") + RECORD_SUFFIX


class EventStore:
    """Per-pane status records with atomic replace semantics."""

    def __init__(
        self,
        directory: Optional[Path] = None,
        suppression_window: float = DEFAULT_SUPPRESSION_WINDOW,
    ):
        self.directory = Path(directory) if directory is not None else get_event_dir()
        self.suppression_window = suppression_window

    def _path(self, pane_id: str) -> Path:
        return self.directory / record_filename(pane_id)

    def _load(self, path: Path) -> EventRecord:
        with open(path) as f:
            data = json.load(f)
        return EventRecord.from_dict(data)

    def write(self, record: EventRecord) -> bool:
        """Replace the record for ``record.pane_id``.

        An idle write is dropped while the existing record is a paused one
        younger than the suppression window: the Stop and PermissionRequest
        hooks fire together when Claude shows a permission dialog, and the
        idle from Stop must not hide that the pane is waiting on the user.

        Returns:
            True if the record was written, False if it was suppressed
        """
        if record.status == EVENT_IDLE:
            existing = self.read(record.pane_id)
            if (
                existing is not None
                and existing.status == EVENT_PAUSED
                and record.timestamp - existing.timestamp < self.suppression_window
            ):
                logger.debug("Suppressed idle over recent paused for %s", record.pane_id)
                return False

        self.directory.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(record.to_dict())

        fd, tmp_name = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=self.directory)
        try:
            with os.fdopen(fd, "w") as f:
                f.write(payload)
            os.replace(tmp_name, self._path(record.pane_id))
        except OSError:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise
        return True

    def read(self, pane_id: str) -> Optional[EventRecord]:
        """Read one pane's record, or None if absent or unparsable."""
        try:
            return self._load(self._path(pane_id))
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError, ValueError) as e:
            logger.debug("Unreadable event record for %s: %s", pane_id, e)
            return None

    def _record_paths(self):
        try:
            entries = list(self.directory.iterdir())
        except (FileNotFoundError, NotADirectoryError):
            return []
        return [
            p for p in entries
            if p.name.endswith(RECORD_SUFFIX)
            and not p.name.startswith(TEMP_PREFIX)
            and p.is_file()
        ]

    def read_all(self) -> Dict[str, EventRecord]:
        """Read every record, keyed by pane id. Unparsable files are skipped."""
        result: Dict[str, EventRecord] = {}
        for path in self._record_paths():
            try:
                record = self._load(path)
            except (OSError, json.JSONDecodeError, ValueError):
                continue
            result[record.pane_id] = record
        return result

    def cleanup(self, max_age: float, now: Optional[float] = None) -> int:
        """Delete records older than ``max_age`` and any unparsable record.

        Returns:
            Number of files removed
        """
        now = time.time() if now is None else now
        removed = 0
        for path in self._record_paths():
            try:
                record = self._load(path)
            except OSError:
                continue
            except ValueError:
                record = None
            if record is not None and not record.is_stale(max_age, now):
                continue
            try:
                path.unlink()
                removed += 1
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.debug("Could not remove %s: %s", path, e)
        if removed:
            logger.info("Removed %d stale event record(s)", removed)
        return removed
