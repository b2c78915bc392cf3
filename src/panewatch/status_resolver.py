"""
Per-poll raw status resolution for every listed pane.

All panes are resolved against one process table snapshot, so a pane never
sees its Claude process as alive while a related lookup sees it gone.
"""

from typing import Iterable, List

from .models import PaneInfo, PaneSession
from .process_table import ProcessTable
from .protocols import StatusSource
from .status_constants import STATUS_EXITED


class StatusResolver:
    """Combines process liveness with a StatusSource."""

    def __init__(self, source: StatusSource, program_name: str = "claude", search_depth: int = 2):
        self.source = source
        self.program_name = program_name
        self.search_depth = search_depth

    def resolve_pane(self, pane: PaneInfo, table: ProcessTable) -> PaneSession:
        occupant = table.find_monitored_descendant(pane.root_pid, self.program_name, self.search_depth)
        if occupant == 0:
            return PaneSession(pane=pane, is_occupied=False, status=STATUS_EXITED)

        session = PaneSession(pane=pane, occupant_pid=occupant, is_occupied=True)
        if not table.is_alive(occupant):
            session.status = STATUS_EXITED
        else:
            session.status = self.source.status_for(pane)
        return session

    def resolve(self, panes: Iterable[PaneInfo], table: ProcessTable) -> List[PaneSession]:
        """Resolve every pane. Call once per poll with that poll's table."""
        self.source.begin_poll()
        return [self.resolve_pane(pane, table) for pane in panes]
