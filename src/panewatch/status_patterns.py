"""
Text markers used to classify a pane from its visible output.

Claude Code prints a status bar at the very bottom of the pane while it has
focus. The bar always carries ``esc to interrupt``; while a turn is in
progress it also carries ``(running)``:

    Working:  "... (running) · esc to interrupt"
    Idle:     "... esc to interrupt"

Only status-bar lines are trusted for the running marker, since output
above the bar can quote "(running)" from earlier tool calls.
"""

import re
from dataclasses import dataclass, field
from typing import List

# Regex to match ANSI escape sequences (colors, cursor movement, etc.)
ANSI_ESCAPE_PATTERN = re.compile(r'\x1b\[[0-9;?]*[a-zA-Z]')


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from text."""
    return ANSI_ESCAPE_PATTERN.sub('', text)


@dataclass
class PaneTextPatterns:
    """Markers and scan widths for passive classification."""

    # Present on every status-bar line; lines without it are plain output
    status_bar_marker: str = "esc to interrupt"

    # Present in the status bar only while Claude is mid-turn
    running_marker: str = "(running)"

    # Error banners, matched as substrings of the bottom lines
    error_markers: List[str] = field(default_factory=lambda: [
        "APIError",
        "API Error",
    ])

    # Claude Code's input prompt (U+276F); a line starting with it is idle
    prompt_glyphs: List[str] = field(default_factory=lambda: [
        "❯",
    ])

    # Non-blank lines scanned from the bottom for the status bar
    status_bar_scan_lines: int = 5

    # Non-blank lines scanned from the bottom for errors and the prompt
    fallback_scan_lines: int = 8


DEFAULT_PATTERNS = PaneTextPatterns()


def get_patterns() -> PaneTextPatterns:
    """Get the pane text patterns."""
    return DEFAULT_PATTERNS
