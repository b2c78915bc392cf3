"""
Tests for the lifecycle hook handler.
"""

import json

import pytest

from panewatch.event_store import EventStore
from panewatch.hook_handler import (
    HOOK_EVENTS,
    format_decision,
    handle_hook_event,
    hook_command,
    map_event_to_status,
    parse_payload,
)


class StubRelay:
    def __init__(self, decision=None):
        self.decision = decision
        self.requests = []
        self.notes = []

    def request_approval(self, payload):
        self.requests.append(payload)
        return self.decision

    def notify(self, text):
        self.notes.append(text)
        return True


@pytest.fixture
def store(tmp_path):
    return EventStore(directory=tmp_path / "events")


PANE_ENV = {"TMUX_PANE": "%12"}


class TestMapping:
    @pytest.mark.parametrize("event,expected", [
        ("prompt-submit", "working"),
        ("post-tool-use", "working"),
        ("stop", "idle"),
        ("permission-request", "paused"),
        ("session-end", "stopped"),
    ])
    def test_event_kinds(self, event, expected):
        assert map_event_to_status(event) == expected

    def test_question_notification_pauses(self):
        assert map_event_to_status("notification", "elicitation_dialog") == "paused"

    def test_other_notifications_are_idle(self):
        assert map_event_to_status("notification", "permission_prompt") == "idle"
        assert map_event_to_status("notification") == "idle"

    def test_unknown(self):
        assert map_event_to_status("pre-compact") is None

    def test_hook_commands(self):
        assert hook_command(HOOK_EVENTS["Stop"]) == "panewatch hook stop"


class TestParsePayload:
    def test_object(self):
        assert parse_payload('{"session_id": "s"}') == {"session_id": "s"}

    @pytest.mark.parametrize("text", ["", "   ", "{oops", "[1, 2]"])
    def test_bad_input_is_empty(self, text):
        assert parse_payload(text) == {}


class TestHandleHookEvent:
    """Test writes to the Event Store"""

    def test_writes_record(self, store):
        out = handle_hook_event("prompt-submit", '{"session_id": "abc"}', env=PANE_ENV,
                                store=store, relay_factory=lambda: None, now=50.0)
        assert out is None
        record = store.read("%12")
        assert record.status == "working"
        assert record.session_id == "abc"
        assert record.timestamp == 50.0

    def test_no_pane_does_nothing(self, store):
        assert handle_hook_event("stop", env={}, store=store) is None
        assert store.read_all() == {}

    def test_unknown_event_does_nothing(self, store):
        assert handle_hook_event("pre-compact", env=PANE_ENV, store=store) is None
        assert store.read_all() == {}

    def test_malformed_payload_still_records(self, store):
        handle_hook_event("stop", "not json", env=PANE_ENV, store=store, now=1.0)
        record = store.read("%12")
        assert record.status == "idle"
        assert record.session_id is None

    def test_stop_after_permission_request_keeps_paused(self, store):
        handle_hook_event("permission-request", env=PANE_ENV, store=store,
                          relay_factory=lambda: None, now=100.0)
        handle_hook_event("stop", env=PANE_ENV, store=store, now=100.5)
        assert store.read("%12").status == "paused"

    def test_unwritable_store_is_not_fatal(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        store = EventStore(directory=blocker / "events")
        assert handle_hook_event("stop", env=PANE_ENV, store=store) is None


class TestRelay:
    """Test the permission relay path"""

    def test_decision_printed(self, store):
        relay = StubRelay("allow")
        payload = {"tool_name": "Bash", "tool_input": {"command": "ls"}}
        out = handle_hook_event("permission-request", json.dumps(payload), env=PANE_ENV,
                                store=store, relay_factory=lambda: relay)
        assert json.loads(out) == {
            "hookSpecificOutput": {
                "hookEventName": "PermissionRequest",
                "decision": {"behavior": "allow"},
            }
        }
        assert relay.requests == [payload]
        assert store.read("%12").status == "paused"

    def test_deny_carries_message(self):
        decision = json.loads(format_decision("deny"))["hookSpecificOutput"]["decision"]
        assert decision == {"behavior": "deny", "message": "Denied via Slack"}

    def test_no_answer_prints_nothing(self, store):
        out = handle_hook_event("permission-request", env=PANE_ENV, store=store,
                                relay_factory=lambda: StubRelay(None))
        assert out is None

    def test_relay_off_prints_nothing(self, store):
        out = handle_hook_event("permission-request", env=PANE_ENV, store=store,
                                relay_factory=lambda: None)
        assert out is None

    def test_question_sends_notification(self, store):
        relay = StubRelay()
        handle_hook_event("notification", '{"notification_type": "elicitation_dialog"}',
                          env=PANE_ENV, store=store, relay_factory=lambda: relay)
        assert len(relay.notes) == 1
        assert relay.requests == []

    @pytest.mark.parametrize("event", ["prompt-submit", "post-tool-use", "stop", "session-end"])
    def test_relay_untouched_for_other_events(self, store, event):
        def factory():
            raise AssertionError("relay should not be built")
        handle_hook_event(event, env=PANE_ENV, store=store, relay_factory=factory)

    def test_default_relay_off_by_preference(self, store, isolated_state_dir):
        # No prefs file, so the relay is disabled and nothing is printed
        assert handle_hook_event("permission-request", env=PANE_ENV, store=store) is None
