"""
User configuration loaded from ~/.panewatch/config.yaml.

Every section is optional. A missing or malformed file means defaults.
"""

import logging
from pathlib import Path
from typing import Optional

import yaml

from .settings import EngineSettings, get_config_path

logger = logging.getLogger(__name__)


CONFIG_TEMPLATE = """\
# Panewatch configuration
# Location: ~/.panewatch/config.yaml

# Detection and refinement engine
# engine:
#   poll_interval: 0.25        # seconds between polls
#   strategy: events           # events (lifecycle hooks) or passive (pane scraping)
#   decay_policy: timer        # timer (done_window) or activity (activity_window)
#   done_window: 15            # seconds Done stays visible before decaying to Idle
#   activity_window: 300       # seconds of inactivity before Done decays (activity policy)
#   idle_threshold: 3          # polls, counting the last working one, to confirm Working -> Unread (passive)
#   cleanup_every: 10          # Event Store cleanup cadence, in polls
#   event_max_age: 300         # seconds before an Event Store record is removed
#   suppression_window: 10     # seconds a paused record is protected from idle
#   program_name: claude       # process name searched for under each pane
#   vcs_ttl: 3                 # seconds git stats are cached per directory

# Remote approval relay (Slack)
# relay:
#   timeout: 300               # seconds to wait for a reply before falling back
#   poll_interval: 3
"""


def load_config(path: Optional[Path] = None) -> dict:
    """Load config.yaml as a dict. Returns {} if missing or invalid."""
    path = path or get_config_path()
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        return {}
    except (yaml.YAMLError, OSError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def load_engine_settings(path: Optional[Path] = None) -> EngineSettings:
    """Engine settings with the config file's ``engine:`` overrides applied."""
    section = load_config(path).get("engine")
    if not isinstance(section, dict):
        section = {}
    return EngineSettings.from_dict(section)


def get_relay_settings(path: Optional[Path] = None) -> dict:
    """Relay timing overrides (timeout, poll_interval)."""
    section = load_config(path).get("relay")
    result = {"timeout": 300.0, "poll_interval": 3.0}
    if isinstance(section, dict):
        for key in result:
            try:
                if key in section:
                    result[key] = float(section[key])
            except (TypeError, ValueError):
                continue
    return result
