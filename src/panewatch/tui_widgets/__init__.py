"""
TUI widget components for Panewatch.
"""

from .help_overlay import HelpOverlay
from .preview_pane import PreviewPane
from .session_list import SessionList

__all__ = [
    "HelpOverlay",
    "PreviewPane",
    "SessionList",
]
