"""
Test fixtures and factories for Panewatch unit tests.

Factory functions for panes, sessions and process tables, so tests can
describe a tmux layout in a line or two.
"""

from typing import Dict, List, Optional, Tuple

from panewatch.models import PaneInfo, PaneSession, VcsSummary
from panewatch.process_table import ProcessRecord, ProcessTable


def create_pane(
    pane_id: str = "%1",
    group: str = "work",
    group_index: int = 1,
    window_name: str = "claude",
    root_pid: int = 100,
    working_dir: str = "/home/dev/project",
    last_activity: float = 1_700_000_000.0,
    is_focused: bool = False,
    window_id: Optional[str] = None,
) -> PaneInfo:
    return PaneInfo(
        group=group,
        group_index=group_index,
        window_id=window_id or f"@{group_index}",
        window_name=window_name,
        pane_id=pane_id,
        root_pid=root_pid,
        working_dir=working_dir,
        last_activity=last_activity,
        is_focused=is_focused,
    )


def create_session(
    status: str,
    pane_id: str = "%1",
    is_focused: bool = False,
    vcs: Optional[VcsSummary] = None,
    **pane_kwargs,
) -> PaneSession:
    """An occupied session carrying ``status`` as its raw status."""
    pane = create_pane(pane_id=pane_id, is_focused=is_focused, **pane_kwargs)
    return PaneSession(pane=pane, occupant_pid=pane.root_pid + 1, is_occupied=True,
                       status=status, vcs=vcs)


def create_process_table(rows: List[Tuple[int, int, str]]) -> ProcessTable:
    """Build a ProcessTable from (pid, ppid, command) rows."""
    table = ProcessTable()
    for pid, ppid, command in rows:
        table.add(ProcessRecord(pid=pid, ppid=ppid, command=command))
    return table


def claude_under_shell(shell_pid: int, claude_pid: Optional[int] = None) -> List[Tuple[int, int, str]]:
    """Rows for a shell running claude directly."""
    claude_pid = claude_pid or shell_pid + 1
    return [(shell_pid, 1, "zsh"), (claude_pid, shell_pid, "claude")]


def ps_output(rows: List[Tuple[int, int, str]]) -> str:
    """Render rows the way ``ps -eo pid,ppid,comm`` prints them."""
    lines = ["  PID  PPID COMM"]
    lines += [f"{pid:5d} {ppid:5d} {command}" for pid, ppid, command in rows]
    return "\n".join(lines) + "\n"


def statuses(sessions: List[PaneSession]) -> Dict[str, str]:
    return {s.pane_id: s.status for s in sessions}
