"""
Preview pane widget for TUI.

Shows the selected pane's visible terminal text below the list.
"""

from typing import List

from rich.text import Text
from textual.widgets import Static


class PreviewPane(Static):
    """Bottom-anchored snapshot of the selected pane."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.pane_id: str = ""
        self.title: str = ""
        self.content_lines: List[str] = []

    def show(self, pane_id: str, title: str, lines: List[str]) -> None:
        self.pane_id = pane_id
        self.title = title
        self.content_lines = lines
        self.update(self._build_content())

    def clear_content(self) -> None:
        self.pane_id = ""
        self.content_lines = []
        self.update(self._build_content())

    def _build_content(self) -> Text:
        content = Text()
        pane_width = self.size.width if self.size.width > 0 else 40
        header = f"─── {self.title} " if self.title else "─── Preview "
        content.append(header, style="bold cyan")
        content.append("─" * max(0, pane_width - len(header)), style="dim")
        content.append("\n")
        if not self.content_lines:
            content.append("(no output)", style="dim italic")
        else:
            content.append(Text.from_ansi("\n".join(self.content_lines)))
        return content
