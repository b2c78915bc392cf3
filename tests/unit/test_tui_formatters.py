"""
Tests for the dashboard's pure formatting helpers.
"""

from panewatch.models import VcsSummary
from panewatch.status_constants import (
    STATUS_DONE,
    STATUS_IDLE,
    STATUS_PAUSED,
    STATUS_UNREAD,
    STATUS_WORKING,
)
from panewatch.tui_formatters import (
    SPINNER_FRAMES,
    format_diff,
    next_attention_index,
    render_session_list,
    render_session_row,
    spinner_frame,
    trim_preview,
    truncate,
)
from tests.fixtures import create_session

NOW = 1_700_000_000.0


class TestSpinner:
    def test_wraps(self):
        assert spinner_frame(0) == SPINNER_FRAMES[0]
        assert spinner_frame(len(SPINNER_FRAMES)) == SPINNER_FRAMES[0]


class TestFormatDiff:
    def test_dirty(self):
        assert format_diff(VcsSummary(branch="main", added=12, removed=3, dirty=True)).plain == "+12 -3"

    def test_clean_or_missing(self):
        assert format_diff(VcsSummary(branch="main")).plain == ""
        assert format_diff(None).plain == ""


class TestTruncate:
    def test_short(self):
        assert truncate("api", 10) == "api"

    def test_long(self):
        assert truncate("frontend-app", 6) == "front…"

    def test_tiny_widths(self):
        assert truncate("abc", 1) == "…"
        assert truncate("abc", 0) == ""


class TestRenderSessionRow:
    def test_title_status_and_age(self):
        session = create_session(STATUS_PAUSED, working_dir="/src/api", last_activity=NOW - 120)
        text = render_session_row(session, now=NOW).plain
        assert "api" in text
        assert "Paused" in text
        assert "2m ago" in text

    def test_working_uses_spinner(self):
        session = create_session(STATUS_WORKING)
        assert render_session_row(session, tick=1, now=NOW).plain.startswith(f" {SPINNER_FRAMES[1]}")

    def test_selected_marker(self):
        session = create_session(STATUS_IDLE)
        assert render_session_row(session, selected=True, now=NOW).plain.startswith("▌")

    def test_branch_and_diff(self):
        vcs = VcsSummary(branch="feature/login", added=5, removed=2, dirty=True)
        text = render_session_row(create_session(STATUS_IDLE, vcs=vcs), now=NOW).plain
        assert "feature/login" in text
        assert "+5 -2" in text

    def test_long_title_truncated(self):
        session = create_session(STATUS_IDLE, working_dir="/src/" + "x" * 80)
        first_line = render_session_row(session, width=20, now=NOW).plain.split("\n")[0]
        assert first_line.endswith("…")


class TestRenderSessionList:
    def test_empty(self):
        assert "No Claude sessions found" in render_session_list([], 0).plain

    def test_rows_in_order(self):
        sessions = [
            create_session(STATUS_IDLE, pane_id="%1", working_dir="/src/api"),
            create_session(STATUS_IDLE, pane_id="%2", working_dir="/src/web"),
        ]
        text = render_session_list(sessions, 1, now=NOW).plain
        assert text.index("api") < text.index("web")
        assert text.count("▌") == 1


class TestTrimPreview:
    def test_keeps_last_lines(self):
        assert trim_preview("a\nb\nc\nd", 2, 80) == ["c", "d"]

    def test_cuts_width(self):
        assert trim_preview("abcdef", 5, 3) == ["abc"]


class TestNextAttentionIndex:
    def test_wraps_past_end(self):
        sessions = [
            create_session(STATUS_UNREAD, pane_id="%1"),
            create_session(STATUS_IDLE, pane_id="%2"),
            create_session(STATUS_WORKING, pane_id="%3"),
        ]
        assert next_attention_index(sessions, 1) == 0

    def test_skips_current(self):
        sessions = [
            create_session(STATUS_PAUSED, pane_id="%1"),
            create_session(STATUS_DONE, pane_id="%2"),
        ]
        assert next_attention_index(sessions, 0) == 1

    def test_nothing_needs_attention(self):
        assert next_attention_index([create_session(STATUS_IDLE)], 0) is None
        assert next_attention_index([], 0) is None
