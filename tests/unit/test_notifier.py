"""
Tests for the attention bell.
"""

from unittest.mock import patch

import pytest

from panewatch.notifier import (
    BEL,
    BELL_BOTH,
    BELL_OFF,
    BELL_ON,
    AttentionNotifier,
    next_bell_mode,
)


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


@pytest.fixture
def tty(tmp_path):
    return tmp_path / "tty"


def make_notifier(tty, mode=BELL_ON):
    clock = FakeClock()
    return AttentionNotifier(mode=mode, coalesce_seconds=2.0, tty_path=str(tty), clock=clock), clock


class TestNextBellMode:
    def test_cycle(self):
        assert next_bell_mode(BELL_OFF) == BELL_ON
        assert next_bell_mode(BELL_ON) == BELL_BOTH
        assert next_bell_mode(BELL_BOTH) == BELL_OFF

    def test_unknown_mode(self):
        assert next_bell_mode("loud") == BELL_ON


class TestAttentionNotifier:
    """Test queueing, coalescing and the bell write"""

    def test_flush_rings_once_for_several_panes(self, tty):
        notifier, _ = make_notifier(tty)
        notifier.queue("api")
        notifier.queue("web")
        assert notifier.flush()
        assert tty.read_text() == BEL

    def test_nothing_queued(self, tty):
        notifier, _ = make_notifier(tty)
        assert not notifier.flush()
        assert not tty.exists()

    def test_off_mode_drops_everything(self, tty):
        notifier, _ = make_notifier(tty, mode=BELL_OFF)
        notifier.queue("api")
        assert not notifier.flush()
        assert not tty.exists()

    def test_burst_is_coalesced(self, tty):
        notifier, clock = make_notifier(tty)
        notifier.queue("api")
        assert notifier.flush()

        clock.now += 1.0
        notifier.queue("web")
        assert not notifier.flush()

        clock.now += 1.0
        assert notifier.flush()

    def test_missing_tty_is_not_fatal(self, tmp_path):
        notifier, _ = make_notifier(tmp_path / "missing" / "tty")
        notifier.queue("api")
        assert notifier.flush()

    def test_invalid_mode_falls_back_to_bell(self, tty):
        assert AttentionNotifier(mode="loud", tty_path=str(tty)).mode == BELL_ON

    def test_banner_only_in_both_mode_on_macos(self, tty):
        notifier, _ = make_notifier(tty, mode=BELL_BOTH)
        notifier.queue("api")
        with patch("panewatch.notifier.sys.platform", "darwin"), \
                patch.object(notifier, "_send_banner") as banner:
            notifier.flush()
        banner.assert_called_once_with("api needs attention")

    def test_no_banner_in_bell_mode(self, tty):
        notifier, _ = make_notifier(tty, mode=BELL_ON)
        notifier.queue("api")
        with patch("panewatch.notifier.sys.platform", "darwin"), \
                patch.object(notifier, "_send_banner") as banner:
            notifier.flush()
        banner.assert_not_called()


class TestFormatMessage:
    @pytest.mark.parametrize("names,expected", [
        (["api"], "api needs attention"),
        (["api", "web"], "api and web need attention"),
        (["api", "web", "cli", "docs"], "api, web and 2 more need attention"),
    ])
    def test_messages(self, names, expected):
        assert AttentionNotifier.format_message(names) == expected
