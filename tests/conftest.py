"""
Pytest configuration for Panewatch tests.
"""

import pytest


@pytest.fixture(autouse=True)
def isolated_state_dir(tmp_path, monkeypatch):
    """Point all Panewatch state at a temp directory.

    Keeps tests away from ~/.panewatch, and from a real tmux pane's
    identity when the suite itself runs inside tmux.
    """
    state_dir = tmp_path / "panewatch-state"
    monkeypatch.setenv("PANEWATCH_STATE_DIR", str(state_dir))
    monkeypatch.delenv("TMUX_PANE", raising=False)
    return state_dir
