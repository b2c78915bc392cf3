"""
Snapshot of the OS process table.

Built once per poll with a single ``ps`` call so every pane is resolved
against the same view of which processes are alive.
"""

import logging
import subprocess
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

PS_COMMAND = ["ps", "-eo", "pid,ppid,comm"]


@dataclass(frozen=True)
class ProcessRecord:
    pid: int
    ppid: int
    command: str  # basename of the executable


@dataclass
class ProcessTable:
    """pid -> record, plus a parent -> children index."""

    processes: Dict[int, ProcessRecord] = field(default_factory=dict)
    children: Dict[int, List[int]] = field(default_factory=dict)

    def add(self, record: ProcessRecord) -> None:
        self.processes[record.pid] = record
        self.children.setdefault(record.ppid, []).append(record.pid)

    def is_alive(self, pid: int) -> bool:
        return pid in self.processes

    def find_monitored_descendant(self, root_pid: int, name: str, max_depth: int = 2) -> int:
        """Find the first descendant of root_pid whose command is ``name``.

        Searches at most ``max_depth`` generations below the root, which
        covers shell -> runtime -> program chains. Returns 0 if not found.
        """
        queue = deque((child, 1) for child in self.children.get(root_pid, []))
        while queue:
            pid, depth = queue.popleft()
            record = self.processes.get(pid)
            if record is not None and record.command == name:
                return pid
            if depth < max_depth:
                queue.extend((child, depth + 1) for child in self.children.get(pid, []))
        return 0

    def __len__(self) -> int:
        return len(self.processes)


def parse_process_table(output: str) -> ProcessTable:
    """Parse ``ps -eo pid,ppid,comm`` output.

    Malformed lines (the header, short rows, non-numeric ids) are skipped.
    """
    table = ProcessTable()
    for line in output.splitlines():
        parts = line.split(None, 2)
        if len(parts) < 3:
            continue
        try:
            pid = int(parts[0])
            ppid = int(parts[1])
        except ValueError:
            continue
        command = parts[2].strip().rsplit("/", 1)[-1]
        table.add(ProcessRecord(pid=pid, ppid=ppid, command=command))
    return table


def build_process_table() -> Optional[ProcessTable]:
    """Run ``ps`` once and build the table.

    Returns None when the listing fails; callers treat that as "no
    information this cycle" and leave prior statuses alone.
    """
    try:
        result = subprocess.run(
            PS_COMMAND,
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (subprocess.SubprocessError, OSError) as e:
        logger.warning("Process listing failed: %s", e)
        return None
    if result.returncode != 0:
        logger.warning("Process listing exited %d", result.returncode)
        return None
    return parse_process_table(result.stdout)
