"""
Operator state: which window targets the operator has looked at.

A "seen" marker for a target ("session:window") is what turns an Unread pane
into Done. Markers are persisted so a dashboard restart doesn't flip every
finished pane back to Unread.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from .settings import get_operator_state_path

logger = logging.getLogger(__name__)

STATE_VERSION = 1


@dataclass
class OperatorState:
    """Seen markers keyed by window target, plus a dirty flag.

    ``dirty`` is set by every mutation and cleared by save(), so callers can
    save only after polls that actually changed something.
    """

    last_seen: Dict[str, datetime] = field(default_factory=dict)
    version: int = STATE_VERSION
    dirty: bool = False

    def mark_seen(self, target: str, when: Optional[datetime] = None) -> None:
        self.last_seen[target] = when or datetime.now()
        self.dirty = True

    def clear(self, target: str) -> None:
        if self.last_seen.pop(target, None) is not None:
            self.dirty = True

    def has_seen(self, target: str) -> bool:
        return target in self.last_seen

    def to_dict(self) -> dict:
        return {
            "last_seen": {t: when.isoformat() for t, when in self.last_seen.items()},
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OperatorState":
        """Build state from a dict. Unparsable markers are dropped."""
        state = cls()
        if not isinstance(data, dict):
            return state
        state.version = data.get("version", STATE_VERSION)
        raw = data.get("last_seen") or {}
        if isinstance(raw, dict):
            for target, value in raw.items():
                try:
                    state.last_seen[target] = datetime.fromisoformat(value)
                except (TypeError, ValueError):
                    continue
        return state

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "OperatorState":
        """Load persisted state.

        Args:
            path: Optional path override (for testing)

        Returns:
            The saved state, or an empty state if the file is missing or invalid
        """
        path = path or get_operator_state_path()
        try:
            with open(path) as f:
                data = json.load(f)
        except FileNotFoundError:
            return cls()
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable operator state %s: %s", path, e)
            return cls()
        return cls.from_dict(data)

    def save(self, path: Optional[Path] = None) -> bool:
        """Write state atomically and clear the dirty flag.

        Returns:
            True if the file was written
        """
        path = path or get_operator_state_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".state-", suffix=".json")
        except OSError as e:
            logger.warning("Could not save operator state to %s: %s", path, e)
            return False
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(self.to_dict(), f, indent=2)
            os.replace(tmp, path)
        except OSError as e:
            logger.warning("Could not save operator state to %s: %s", path, e)
            try:
                os.unlink(tmp)
            except OSError:
                pass
            return False
        self.dirty = False
        return True
