"""
Centralized settings and file locations for Panewatch.

All state lives under a single root directory (~/.panewatch by default).
Set PANEWATCH_STATE_DIR to relocate it, e.g. for test isolation.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

STRATEGY_EVENTS = "events"  # Lifecycle hooks write the Event Store
STRATEGY_PASSIVE = "passive"  # Scrape the visible pane text

DECAY_TIMER = "timer"  # Done lasts a fixed window after it is entered
DECAY_ACTIVITY = "activity"  # Done lasts while the pane had recent activity


def get_state_dir() -> Path:
    """Root directory for all Panewatch state."""
    env_dir = os.environ.get("PANEWATCH_STATE_DIR")
    if env_dir:
        return Path(env_dir)
    return Path.home() / ".panewatch"


def get_event_dir() -> Path:
    """Directory holding one Event Store record per pane."""
    return get_state_dir() / "events"


def get_operator_state_path() -> Path:
    """Persisted seen-markers file."""
    return get_state_dir() / "state.json"


def get_tui_prefs_path() -> Path:
    return get_state_dir() / "tui_prefs.json"


def get_log_path() -> Path:
    return get_state_dir() / "panewatch.log"


def get_config_path() -> Path:
    return get_state_dir() / "config.yaml"


def get_relay_config_path() -> Path:
    return get_state_dir() / "relay.json"


@dataclass
class EngineSettings:
    """Tunables for the detection and refinement engine.

    Defaults match the values the dashboard ships with; config.yaml's
    ``engine:`` section can override any of them.
    """

    poll_interval: float = 0.25  # seconds between polls
    cleanup_every: int = 10  # run Event Store cleanup every Nth poll
    event_max_age: float = 300.0  # Event Store records older than this are removed
    suppression_window: float = 10.0  # idle can't clobber a paused record younger than this
    done_window: float = 15.0  # Done decays to Idle after this (timer policy)
    activity_window: float = 300.0  # Done decays once activity is older than this (activity policy)
    idle_threshold: int = 3  # polls, counting the last working one, before trusting Working -> Idle (passive)
    program_name: str = "claude"
    search_depth: int = 2  # generations below the pane shell to search
    strategy: str = STRATEGY_EVENTS
    decay_policy: str = DECAY_TIMER
    vcs_ttl: float = 3.0
    sidebar_title: str = "panewatch-sidebar"  # pane title the dashboard sets on itself

    @property
    def debounce_idle(self) -> bool:
        """Passive classification flickers, so only it gets the idle debounce."""
        return self.strategy == STRATEGY_PASSIVE

    @classmethod
    def from_dict(cls, data: dict) -> "EngineSettings":
        """Build settings from a dict, ignoring unknown keys and bad types."""
        settings = cls()
        known = {f.name: f for f in fields(cls)}
        for key, value in (data or {}).items():
            f = known.get(key)
            if f is None or value is None:
                continue
            default = getattr(settings, key)
            try:
                setattr(settings, key, type(default)(value))
            except (TypeError, ValueError):
                continue
        if settings.strategy not in (STRATEGY_EVENTS, STRATEGY_PASSIVE):
            settings.strategy = STRATEGY_EVENTS
        if settings.decay_policy not in (DECAY_TIMER, DECAY_ACTIVITY):
            settings.decay_policy = DECAY_TIMER

        # Values that would stall or crash the poll loop
        defaults = cls()
        if settings.cleanup_every < 1:
            settings.cleanup_every = defaults.cleanup_every
        if settings.idle_threshold < 1:
            settings.idle_threshold = defaults.idle_threshold
        if settings.poll_interval <= 0:
            settings.poll_interval = defaults.poll_interval
        return settings


@dataclass
class TUIPreferences:
    """Dashboard toggles persisted across restarts.

    Shared by every dashboard instance, so a toggle in one sidebar shows up
    in the others on their next poll.
    """

    show_preview: bool = False
    bell: str = "bell"  # off, bell, both
    relay_enabled: bool = False

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "TUIPreferences":
        path = path or get_tui_prefs_path()
        try:
            with open(path) as f:
                data = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError, OSError):
            return cls()
        if not isinstance(data, dict):
            return cls()
        prefs = cls()
        prefs.show_preview = bool(data.get("show_preview", prefs.show_preview))
        prefs.bell = str(data.get("bell", prefs.bell))
        prefs.relay_enabled = bool(data.get("relay_enabled", prefs.relay_enabled))
        return prefs

    def save(self, path: Optional[Path] = None) -> bool:
        path = path or get_tui_prefs_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as f:
                json.dump(asdict(self), f, indent=2)
        except OSError as e:
            logger.warning("Could not save preferences to %s: %s", path, e)
            return False
        return True
