"""Hook handler for Claude Code lifecycle events.

Claude Code runs `panewatch hook <event>` for each registered hook. The
handler identifies the pane from $TMUX_PANE, reads the hook's JSON payload
from stdin, and writes the pane's new status to the Event Store.

Hook registrations:
    UserPromptSubmit  -> panewatch hook prompt-submit
    PostToolUse       -> panewatch hook post-tool-use
    Stop              -> panewatch hook stop
    Notification      -> panewatch hook notification
    PermissionRequest -> panewatch hook permission-request
    SessionEnd        -> panewatch hook session-end

Nothing here is ever fatal to Claude: unknown events, a missing pane or a
malformed payload are silently ignored.
"""

import json
import logging
import os
import time
from typing import Callable, Mapping, Optional

from .approval_relay import DECISION_DENY, RelayConfig, SlackRelay
from .config import get_relay_settings
from .event_store import EventRecord, EventStore
from .settings import TUIPreferences
from .status_constants import EVENT_IDLE, EVENT_PAUSED, EVENT_STOPPED, EVENT_WORKING

logger = logging.getLogger(__name__)

HOOK_COMMAND = "panewatch hook"

# Claude Code hook name -> event kind passed to `panewatch hook`
HOOK_EVENTS = {
    "UserPromptSubmit": "prompt-submit",
    "PostToolUse": "post-tool-use",
    "Stop": "stop",
    "Notification": "notification",
    "PermissionRequest": "permission-request",
    "SessionEnd": "session-end",
}

ELICITATION_DIALOG = "elicitation_dialog"

_EVENT_STATUSES = {
    "prompt-submit": EVENT_WORKING,
    "post-tool-use": EVENT_WORKING,
    "stop": EVENT_IDLE,
    "permission-request": EVENT_PAUSED,
    "session-end": EVENT_STOPPED,
}


def hook_command(event_kind: str) -> str:
    return f"{HOOK_COMMAND} {event_kind}"


def map_event_to_status(event: str, notification_type: Optional[str] = None) -> Optional[str]:
    """Event kind -> raw event status, or None for unknown kinds."""
    if event == "notification":
        # Only questions pause. Permission prompts arrive as permission-request,
        # and a late permission notification would race Stop back to paused.
        return EVENT_PAUSED if notification_type == ELICITATION_DIALOG else EVENT_IDLE
    return _EVENT_STATUSES.get(event)


def parse_payload(stdin_text: str) -> dict:
    """Best-effort parse of the hook's JSON payload."""
    if not stdin_text or not stdin_text.strip():
        return {}
    try:
        data = json.loads(stdin_text)
    except json.JSONDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def format_decision(decision: str) -> str:
    """hookSpecificOutput JSON telling Claude Code to allow or deny."""
    body = {"behavior": decision}
    if decision == DECISION_DENY:
        body["message"] = "Denied via Slack"
    return json.dumps({
        "hookSpecificOutput": {
            "hookEventName": "PermissionRequest",
            "decision": body,
        }
    })


def _default_relay() -> Optional[SlackRelay]:
    if not TUIPreferences.load().relay_enabled:
        return None
    config = RelayConfig.load()
    if config is None:
        return None
    relay_settings = get_relay_settings()
    return SlackRelay(
        config,
        poll_interval=relay_settings["poll_interval"],
        timeout=relay_settings["timeout"],
    )


def handle_hook_event(
    event: str,
    stdin_text: str = "",
    env: Optional[Mapping[str, str]] = None,
    store: Optional[EventStore] = None,
    relay_factory: Callable[[], Optional[SlackRelay]] = _default_relay,
    now: Optional[float] = None,
) -> Optional[str]:
    """Handle one hook invocation.

    Args:
        event: event kind, e.g. "stop"
        stdin_text: raw JSON payload Claude Code wrote to stdin
        env: environment (defaults to os.environ)
        store: Event Store to write to
        relay_factory: returns a SlackRelay when remote approval is on

    Returns:
        Text to print to stdout for Claude Code (a permission decision), or None
    """
    env = os.environ if env is None else env
    pane_id = env.get("TMUX_PANE")
    if not pane_id:
        return None

    payload = parse_payload(stdin_text)
    notification_type = payload.get("notification_type")

    status = map_event_to_status(event, notification_type)
    if status is None:
        logger.debug("Ignoring unknown hook event %r", event)
        return None

    session_id = payload.get("session_id")
    record = EventRecord(
        pane_id=pane_id,
        status=status,
        timestamp=time.time() if now is None else now,
        session_id=session_id if isinstance(session_id, str) and session_id else None,
    )
    try:
        (store or EventStore()).write(record)
    except OSError as e:
        logger.warning("Could not write event record for %s: %s", pane_id, e)

    # Paused is already on disk while the relay waits
    if event == "permission-request":
        relay = relay_factory()
        if relay is not None:
            decision = relay.request_approval(payload)
            if decision:
                return format_decision(decision)
    elif event == "notification" and notification_type == ELICITATION_DIALOG:
        relay = relay_factory()
        if relay is not None:
            relay.notify(":bell: *Claude needs input*\nCheck your terminal, Claude is asking a question.")
    return None
