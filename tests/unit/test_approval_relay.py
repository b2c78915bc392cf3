"""
Tests for the Slack approval relay.
"""

import io
import json
import os
import stat
from urllib.error import URLError
from unittest.mock import patch

import pytest

from panewatch.approval_relay import (
    DECISION_ALLOW,
    DECISION_DENY,
    RelayConfig,
    RelayError,
    SlackRelay,
    format_permission_message,
    format_tool_input,
    parse_decision,
)


class FakeSlack:
    """Stands in for urlopen, answering by API method."""

    def __init__(self, replies=None, fail=None):
        self.replies = list(replies or [])  # successive conversations.replies payloads
        self.fail = fail
        self.requests = []

    def __call__(self, req, timeout=None):
        self.requests.append(req)
        if self.fail is not None:
            raise self.fail
        method = req.full_url.split("/api/")[1].split("?")[0]
        if method == "chat.postMessage":
            body = {"ok": True, "ts": "1700000000.000100"}
        elif method == "conversations.replies":
            messages = self.replies.pop(0) if self.replies else []
            body = {"ok": True, "messages": [{"text": "parent", "bot_id": "B1"}] + messages}
        else:
            body = {"ok": False, "error": "unknown_method"}
        return io.BytesIO(json.dumps(body).encode())

    def methods(self):
        return [r.full_url.split("/api/")[1].split("?")[0] for r in self.requests]


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.now += seconds


CONFIG = RelayConfig(bot_token="xoxb-test", channel_id="C123")


def make_relay(slack, timeout=30.0):
    clock = FakeClock()
    return SlackRelay(CONFIG, poll_interval=3.0, timeout=timeout,
                      opener=slack, sleep=clock.sleep, clock=clock)


class TestParseDecision:
    @pytest.mark.parametrize("reply", ["yes", "Y", " allow ", "approve", "OK"])
    def test_allow(self, reply):
        assert parse_decision(reply) == DECISION_ALLOW

    @pytest.mark.parametrize("reply", ["no", "deny", "nope", "yes please", ""])
    def test_everything_else_denies(self, reply):
        assert parse_decision(reply) == DECISION_DENY


class TestFormatting:
    def test_command_shown_verbatim(self):
        assert format_tool_input({"command": "rm -rf build"}) == "rm -rf build"

    def test_file_path(self):
        assert format_tool_input({"file_path": "/src/a.py", "content": "x"}) == "/src/a.py"

    def test_long_input_truncated(self):
        text = format_tool_input({"data": "x" * 2000})
        assert text.endswith("\n...")
        assert len(text) < 600

    def test_empty(self):
        assert format_tool_input(None) == ""

    def test_message(self):
        message = format_permission_message({
            "tool_name": "Bash",
            "cwd": "/repo",
            "tool_input": {"command": "npm publish"},
        })
        assert "`Bash`" in message
        assert "`/repo`" in message
        assert "npm publish" in message
        assert message.endswith("Reply in thread: *yes* or *no*")


class TestRelayConfig:
    def test_round_trip_and_permissions(self, tmp_path):
        path = tmp_path / "relay.json"
        CONFIG.save(path)
        assert RelayConfig.load(path) == CONFIG
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_created_owner_only(self, tmp_path):
        path = tmp_path / "relay.json"
        real_open = os.open
        modes = []

        def recording_open(file, flags, mode=0o777):
            modes.append(mode)
            return real_open(file, flags, mode)

        with patch("panewatch.approval_relay.os.open", side_effect=recording_open):
            CONFIG.save(path)
        assert modes == [0o600]

    def test_tightens_existing_file(self, tmp_path):
        path = tmp_path / "relay.json"
        path.write_text("{}")
        path.chmod(0o644)
        CONFIG.save(path)
        assert stat.S_IMODE(path.stat().st_mode) == 0o600
        assert RelayConfig.load(path) == CONFIG

    def test_missing(self, tmp_path):
        assert RelayConfig.load(tmp_path / "relay.json") is None

    def test_incomplete(self, tmp_path):
        path = tmp_path / "relay.json"
        path.write_text(json.dumps({"bot_token": "xoxb"}))
        assert RelayConfig.load(path) is None

    def test_corrupt(self, tmp_path):
        path = tmp_path / "relay.json"
        path.write_text("{")
        assert RelayConfig.load(path) is None


class TestSlackRelay:
    """Test the approval round trip against a fake Slack"""

    def test_allow_reply(self):
        slack = FakeSlack(replies=[[], [{"text": "yes", "user": "U1"}]])
        relay = make_relay(slack)
        assert relay.request_approval({"tool_name": "Bash"}) == DECISION_ALLOW
        assert slack.methods() == ["chat.postMessage", "conversations.replies",
                                   "conversations.replies"]

    def test_deny_reply(self):
        relay = make_relay(FakeSlack(replies=[[{"text": "no way", "user": "U1"}]]))
        assert relay.request_approval({}) == DECISION_DENY

    def test_bot_replies_ignored(self):
        slack = FakeSlack(replies=[[{"text": "yes", "bot_id": "B2"}], [{"text": "no"}]])
        assert make_relay(slack).request_approval({}) == DECISION_DENY

    def test_timeout_returns_none(self):
        slack = FakeSlack()
        relay = make_relay(slack, timeout=9.0)
        assert relay.request_approval({}) is None
        assert slack.methods().count("conversations.replies") == 3

    def test_transport_failure_returns_none(self):
        relay = make_relay(FakeSlack(fail=URLError("offline")))
        assert relay.request_approval({}) is None

    def test_post_sends_auth_and_channel(self):
        slack = FakeSlack()
        make_relay(slack).send_message("hi", thread_ts="123.4")
        req = slack.requests[0]
        assert req.get_header("Authorization") == "Bearer xoxb-test"
        body = json.loads(req.data)
        assert body["channel"] == "C123"
        assert body["thread_ts"] == "123.4"

    def test_api_error_raises(self):
        relay = make_relay(FakeSlack())
        with pytest.raises(RelayError):
            relay._call("does.not.exist")

    def test_notify(self):
        assert make_relay(FakeSlack()).notify("hello")
        assert not make_relay(FakeSlack(fail=URLError("down"))).notify("hello")
