"""
Remote approval of Claude permission requests over Slack.

When the relay is switched on in the dashboard, the permission-request hook
posts the request to a channel and waits for a threaded reply ("yes"/"no").
Every failure, including a timeout, returns None so Claude falls back to
asking in the terminal.

Configuration lives in ~/.panewatch/relay.json:

    {"bot_token": "xoxb-...", "channel_id": "C0123456"}
"""

import json
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from .settings import get_relay_config_path

logger = logging.getLogger(__name__)

SLACK_API_URL = "https://slack.com/api"

DEFAULT_TIMEOUT = 300.0  # seconds to wait for a human reply
DEFAULT_POLL_INTERVAL = 3.0

DECISION_ALLOW = "allow"
DECISION_DENY = "deny"
ALLOW_REPLIES = {"allow", "yes", "y", "approve", "ok"}

MAX_DETAIL_CHARS = 500


class RelayError(Exception):
    """A Slack API call failed."""


@dataclass
class RelayConfig:
    bot_token: str = ""
    channel_id: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.bot_token and self.channel_id)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> Optional["RelayConfig"]:
        """Load relay.json. Returns None if absent, invalid or incomplete."""
        path = path or get_relay_config_path()
        try:
            with open(path) as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable relay config %s: %s", path, e)
            return None
        if not isinstance(data, dict):
            return None
        config = cls(
            bot_token=str(data.get("bot_token") or ""),
            channel_id=str(data.get("channel_id") or ""),
        )
        return config if config.is_complete else None

    def save(self, path: Optional[Path] = None) -> None:
        path = path or get_relay_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        # Holds a bot token
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        os.fchmod(fd, 0o600)
        with os.fdopen(fd, "w") as f:
            json.dump({"bot_token": self.bot_token, "channel_id": self.channel_id}, f, indent=2)
            f.write("\n")


def parse_decision(reply: str) -> str:
    """Normalize a free-text reply. Anything not clearly a yes is a deny."""
    if reply.strip().lower() in ALLOW_REPLIES:
        return DECISION_ALLOW
    return DECISION_DENY


def format_tool_input(tool_input: Optional[dict]) -> str:
    """Readable one-glance summary of a tool call's input."""
    if not tool_input:
        return ""
    command = tool_input.get("command")
    if isinstance(command, str):
        return command
    file_path = tool_input.get("file_path")
    if isinstance(file_path, str):
        return file_path
    try:
        text = json.dumps(tool_input, indent=2)
    except (TypeError, ValueError):
        return ""
    if len(text) > MAX_DETAIL_CHARS:
        text = text[:MAX_DETAIL_CHARS] + "\n..."
    return text


def format_permission_message(payload: dict) -> str:
    lines = [":lock: *Permission Request*"]
    tool_name = payload.get("tool_name")
    if tool_name:
        lines.append(f"*Tool:* `{tool_name}`")
    cwd = payload.get("cwd")
    if cwd:
        lines.append(f"*Dir:* `{cwd}`")
    tool_input = payload.get("tool_input")
    detail = format_tool_input(tool_input if isinstance(tool_input, dict) else None)
    if detail:
        lines.append(f"```\n{detail}\n```")
    lines.append("Reply in thread: *yes* or *no*")
    return "\n".join(lines)


class SlackRelay:
    """Minimal Slack Web API client for the approval round trip."""

    def __init__(
        self,
        config: RelayConfig,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
        request_timeout: int = 10,
        opener: Callable = urlopen,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.request_timeout = request_timeout
        self._open = opener
        self._sleep = sleep
        self._clock = clock

    def _call(self, method: str, params: Optional[dict] = None, body: Optional[dict] = None) -> dict:
        """Call a Web API method. Raises RelayError on transport or API errors."""
        url = f"{SLACK_API_URL}/{method}"
        if params:
            url += "?" + urlencode(params)
        data = json.dumps(body).encode("utf-8") if body is not None else None
        req = Request(url, data=data, method="POST" if body is not None else "GET")
        req.add_header("Authorization", f"Bearer {self.config.bot_token}")
        if body is not None:
            req.add_header("Content-Type", "application/json; charset=utf-8")

        try:
            with self._open(req, timeout=self.request_timeout) as resp:
                result = json.loads(resp.read().decode("utf-8"))
        except HTTPError as e:
            raise RelayError(f"{method}: HTTP {e.code}") from e
        except (URLError, OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise RelayError(f"{method}: {e}") from e

        if not isinstance(result, dict) or not result.get("ok"):
            error = result.get("error", "unknown error") if isinstance(result, dict) else "bad response"
            raise RelayError(f"{method}: {error}")
        return result

    def send_message(self, text: str, thread_ts: Optional[str] = None) -> str:
        """Post to the channel. Returns the message ts (the thread id)."""
        body = {
            "channel": self.config.channel_id,
            "text": text,
            "unfurl_links": False,
            "unfurl_media": False,
        }
        if thread_ts:
            body["thread_ts"] = thread_ts
        return str(self._call("chat.postMessage", body=body).get("ts", ""))

    def check_for_reply(self, thread_ts: str) -> Optional[str]:
        """First non-bot reply in the thread, if any."""
        result = self._call("conversations.replies", params={
            "channel": self.config.channel_id,
            "ts": thread_ts,
            "limit": "10",
        })
        # messages[0] is the parent
        for message in (result.get("messages") or [])[1:]:
            if not isinstance(message, dict) or "bot_id" in message:
                continue
            text = message.get("text")
            if text:
                return text
        return None

    def wait_for_reply(self, thread_ts: str) -> Optional[str]:
        """Poll the thread until a reply arrives or the timeout passes."""
        deadline = self._clock() + self.timeout
        while self._clock() < deadline:
            reply = self.check_for_reply(thread_ts)
            if reply:
                return reply
            self._sleep(self.poll_interval)
        return None

    def request_approval(self, payload: dict) -> Optional[str]:
        """Ask the channel to approve a permission request.

        Returns:
            "allow", "deny", or None when there is no answer (timeout or error)
        """
        try:
            thread_ts = self.send_message(format_permission_message(payload))
            if not thread_ts:
                return None
            reply = self.wait_for_reply(thread_ts)
        except RelayError as e:
            logger.warning("Slack approval failed: %s", e)
            return None
        if reply is None:
            logger.info("No Slack reply within %.0fs", self.timeout)
            return None
        return parse_decision(reply)

    def notify(self, text: str) -> bool:
        """One-way message. Returns False on failure."""
        try:
            self.send_message(text)
            return True
        except RelayError as e:
            logger.warning("Slack notify failed: %s", e)
            return False
