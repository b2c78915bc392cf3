"""
Status constants and mappings for Panewatch.

Centralizes all status-related constants, colors, symbols, and display
mappings used throughout the application.
"""

from typing import Tuple


# =============================================================================
# Pane Status Values
# =============================================================================

STATUS_UNKNOWN = "unknown"
STATUS_WORKING = "working"  # Claude is actively processing
STATUS_PAUSED = "paused"  # Waiting for user input (permission, question)
STATUS_IDLE = "idle"  # At prompt, output already seen
STATUS_UNREAD = "unread"  # Finished since the user last looked
STATUS_DONE = "done"  # Finished and seen, shown briefly before decaying to idle
STATUS_ERROR = "error"
STATUS_EXITED = "exited"  # Claude process is gone

ALL_STATUSES = [
    STATUS_UNKNOWN,
    STATUS_WORKING,
    STATUS_PAUSED,
    STATUS_IDLE,
    STATUS_UNREAD,
    STATUS_DONE,
    STATUS_ERROR,
    STATUS_EXITED,
]

# Statuses detection can produce. Unread and Done only come out of the
# refinement state machine.
RAW_STATUSES = frozenset({
    STATUS_UNKNOWN,
    STATUS_WORKING,
    STATUS_PAUSED,
    STATUS_IDLE,
    STATUS_ERROR,
    STATUS_EXITED,
})

# Statuses the jump-to-attention key cycles through
ATTENTION_STATUSES = (STATUS_PAUSED, STATUS_UNREAD, STATUS_DONE)


# =============================================================================
# Event Store vocabulary
# =============================================================================

EVENT_WORKING = "working"
EVENT_PAUSED = "paused"
EVENT_IDLE = "idle"
EVENT_STOPPED = "stopped"

EVENT_STATUS_MAP = {
    EVENT_WORKING: STATUS_WORKING,
    EVENT_PAUSED: STATUS_PAUSED,
    EVENT_IDLE: STATUS_IDLE,
    EVENT_STOPPED: STATUS_EXITED,
}


def map_event_status(raw: str) -> str:
    """Map an Event Store status string onto a pane status."""
    return EVENT_STATUS_MAP.get(raw, STATUS_UNKNOWN)


# =============================================================================
# Display Labels
# =============================================================================

STATUS_LABELS = {
    STATUS_WORKING: "Working…",
    STATUS_PAUSED: "Paused",
    STATUS_IDLE: "Idle",
    STATUS_UNREAD: "Unread",
    STATUS_DONE: "Done",
    STATUS_ERROR: "Error",
    STATUS_EXITED: "Exited",
}


def get_status_label(status: str) -> str:
    """Get the human-readable badge text for a status."""
    return STATUS_LABELS.get(status, "?")


# =============================================================================
# Status to Color Mappings (for Rich/Textual styling)
# =============================================================================

STATUS_COLORS = {
    STATUS_WORKING: "green",
    STATUS_PAUSED: "bold orange1",
    STATUS_IDLE: "dim",
    STATUS_UNREAD: "bold yellow",
    STATUS_DONE: "cyan",
    STATUS_ERROR: "bold red",
    STATUS_EXITED: "dim",
}


def get_status_color(status: str) -> str:
    """Get color name for a pane status."""
    return STATUS_COLORS.get(status, "dim")


# =============================================================================
# Status to Symbol+Color (combined for display)
# =============================================================================

STATUS_SYMBOLS = {
    STATUS_WORKING: ("🟢", "green"),
    STATUS_PAUSED: ("🟠", "orange1"),
    STATUS_IDLE: ("⚪", "dim"),
    STATUS_UNREAD: ("🔔", "yellow"),
    STATUS_DONE: ("✅", "cyan"),
    STATUS_ERROR: ("🟣", "red"),
    STATUS_EXITED: ("⚫", "dim"),
}


def get_status_symbol(status: str) -> Tuple[str, str]:
    """Get (emoji, color) tuple for a pane status."""
    return STATUS_SYMBOLS.get(status, ("⚪", "dim"))


# =============================================================================
# Status Categorization
# =============================================================================


def needs_attention(status: str) -> bool:
    """Check if a status is one the operator should look at."""
    return status in ATTENTION_STATUSES


def is_busy(status: str) -> bool:
    """Check if a status means Claude is mid-task (working or blocked on input)."""
    return status in (STATUS_WORKING, STATUS_PAUSED)
