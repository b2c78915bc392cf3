"""Read and write Claude Code settings.json files.

Panewatch needs one hook per lifecycle event so the Event Store stays
current. ClaudeConfigEditor edits the settings file; install_hooks and
uninstall_hooks manage Panewatch's own entries and never touch hooks the
user added themselves.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path

from .hook_handler import HOOK_COMMAND, HOOK_EVENTS, hook_command


class ClaudeConfigEditor:
    """Read and write a Claude Code settings.json file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    @classmethod
    def user_level(cls) -> ClaudeConfigEditor:
        """Editor for user-level settings (~/.claude/settings.json)."""
        return cls(Path.home() / ".claude" / "settings.json")

    @classmethod
    def project_level(cls, project_dir: Path | None = None) -> ClaudeConfigEditor:
        """Editor for project-level settings (.claude/settings.json).

        Args:
            project_dir: Project root. Defaults to cwd.
        """
        base = Path(project_dir) if project_dir else Path.cwd()
        return cls(base / ".claude" / "settings.json")

    def load(self) -> dict:
        """Load settings.

        Returns {} if the file doesn't exist.
        Raises ValueError on invalid JSON or non-object content.
        """
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} contains non-object JSON")
        return data

    def save(self, settings: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(settings, indent=2) + "\n")

    @staticmethod
    def _commands(settings: dict, event: str) -> list[str]:
        commands = []
        for entry in settings.get("hooks", {}).get(event, []):
            for hook in entry.get("hooks", []):
                commands.append(hook.get("command", ""))
        return commands

    def has_hook(self, event: str, command: str) -> bool:
        return command in self._commands(self.load(), event)

    def add_hook(self, event: str, command: str, matcher: str = "") -> bool:
        """Add a command hook for an event.

        Returns True if added, False if it was already there.
        """
        settings = self.load()
        if command in self._commands(settings, event):
            return False

        updated = copy.deepcopy(settings)
        updated.setdefault("hooks", {}).setdefault(event, []).append({
            "matcher": matcher,
            "hooks": [{"type": "command", "command": command}],
        })
        self.save(updated)
        return True

    def remove_hook(self, event: str, command: str) -> bool:
        """Remove the matcher group holding this command.

        Returns True if removed. Empty event lists and an empty hooks dict
        are dropped.
        """
        settings = self.load()
        entries = settings.get("hooks", {}).get(event, [])
        index = next(
            (i for i, entry in enumerate(entries)
             if any(h.get("command") == command for h in entry.get("hooks", []))),
            None,
        )
        if index is None:
            return False

        updated = copy.deepcopy(settings)
        del updated["hooks"][event][index]
        if not updated["hooks"][event]:
            del updated["hooks"][event]
        if not updated["hooks"]:
            del updated["hooks"]
        self.save(updated)
        return True

    def list_hooks_matching(self, command_prefix: str) -> list[tuple[str, str]]:
        """[(event, command)] for every hook whose command starts with prefix."""
        settings = self.load()
        results = []
        for event in settings.get("hooks", {}):
            for command in self._commands(settings, event):
                if command.startswith(command_prefix):
                    results.append((event, command))
        return results


def install_hooks(editor: ClaudeConfigEditor) -> list[str]:
    """Register every Panewatch hook. Returns the events newly added."""
    return [
        event for event, kind in HOOK_EVENTS.items()
        if editor.add_hook(event, hook_command(kind))
    ]


def uninstall_hooks(editor: ClaudeConfigEditor) -> list[str]:
    """Remove every Panewatch hook. Returns the events removed."""
    removed = []
    for event, command in editor.list_hooks_matching(HOOK_COMMAND):
        if editor.remove_hook(event, command):
            removed.append(event)
    return removed


def hooks_status(editor: ClaudeConfigEditor) -> dict[str, bool]:
    """Event name -> whether its Panewatch hook is installed."""
    settings = editor.load()
    return {
        event: hook_command(kind) in ClaudeConfigEditor._commands(settings, event)
        for event, kind in HOOK_EVENTS.items()
    }
