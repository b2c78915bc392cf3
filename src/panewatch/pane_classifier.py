"""
Passive status classification from a pane's visible text.

Used when no lifecycle events are available for a pane. Pure function over
captured text so it can be tested against recorded pane buffers.
"""

from typing import List, Optional

from .status_constants import STATUS_ERROR, STATUS_IDLE, STATUS_UNKNOWN, STATUS_WORKING
from .status_patterns import PaneTextPatterns, get_patterns, strip_ansi


def _bottom_lines(lines: List[str], limit: int) -> List[str]:
    """Up to ``limit`` non-blank lines, bottom first, stripped."""
    result = []
    for line in reversed(lines):
        stripped = line.strip()
        if not stripped:
            continue
        result.append(stripped)
        if len(result) >= limit:
            break
    return result


def classify_pane_text(text: str, patterns: Optional[PaneTextPatterns] = None) -> str:
    """Infer a raw status from the visible text of a Claude pane.

    Terminal redraws can leave blank padding under the status bar, so
    trailing blank lines are ignored when locating the bottom.

    Returns:
        One of working, idle, error, unknown
    """
    patterns = patterns or get_patterns()
    lines = strip_ansi(text or "").split("\n")

    while lines and not lines[-1].strip():
        lines.pop()
    if not lines:
        return STATUS_UNKNOWN

    status_bar = " ".join(
        line for line in _bottom_lines(lines, patterns.status_bar_scan_lines)
        if patterns.status_bar_marker in line
    )
    if patterns.running_marker in status_bar:
        return STATUS_WORKING
    if patterns.status_bar_marker in status_bar:
        return STATUS_IDLE

    for line in _bottom_lines(lines, patterns.fallback_scan_lines):
        if any(marker in line for marker in patterns.error_markers):
            return STATUS_ERROR
        if any(line.startswith(glyph) for glyph in patterns.prompt_glyphs):
            return STATUS_IDLE

    # Alive but unclear
    return STATUS_IDLE
