"""
Poll orchestration: one pass of list -> resolve -> refine per tick.

The dashboard calls poll() from a worker thread on a fixed interval and
apply_vcs() from the UI thread as git results trickle in, so the current
session list is guarded by a lock. A cancelled worker thread may still be
inside poll(), so poll() itself is serialized too.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .event_store import EventStore
from .models import PaneSession, VcsSummary
from .operator_state import OperatorState
from .process_table import ProcessTable, build_process_table
from .protocols import MultiplexerError, MultiplexerInterface
from .settings import EngineSettings
from .status_machine import StatusRefiner
from .status_resolver import StatusResolver
from .status_sources import create_status_source

logger = logging.getLogger(__name__)


@dataclass
class PollResult:
    """What one poll produced for the rendering layer."""

    sessions: List[PaneSession] = field(default_factory=list)
    changed: bool = False  # fingerprints differ from the previous list
    attention: List[PaneSession] = field(default_factory=list)
    error: Optional[str] = None


def sessions_differ(old: List[PaneSession], new: List[PaneSession]) -> bool:
    if len(old) != len(new):
        return True
    return any(a.fingerprint() != b.fingerprint() for a, b in zip(old, new))


class PollOrchestrator:
    """Drives the detection engine and keeps the latest session list."""

    def __init__(
        self,
        multiplexer: MultiplexerInterface,
        resolver: StatusResolver,
        refiner: StatusRefiner,
        store: Optional[EventStore] = None,
        operator_state: Optional[OperatorState] = None,
        settings: Optional[EngineSettings] = None,
        table_builder: Callable[[], Optional[ProcessTable]] = build_process_table,
        clock: Callable[[], float] = time.time,
        state_path: Optional[Path] = None,
    ):
        self.multiplexer = multiplexer
        self.resolver = resolver
        self.refiner = refiner
        self.store = store
        self.settings = settings or EngineSettings()
        self.state_path = state_path
        self.operator_state = operator_state if operator_state is not None else OperatorState.load(state_path)
        self.table_builder = table_builder
        self.clock = clock

        self.poll_count = 0
        self._seeded = False
        self._poll_lock = threading.Lock()
        self._lock = threading.Lock()
        self._state_lock = threading.Lock()  # operator_state is touched from both threads
        self._sessions: List[PaneSession] = []

    @classmethod
    def from_settings(
        cls,
        multiplexer: MultiplexerInterface,
        settings: EngineSettings,
        store: Optional[EventStore] = None,
        state_path: Optional[Path] = None,
    ) -> "PollOrchestrator":
        """Wire up source, resolver and refiner from engine settings."""
        store = store or EventStore(suppression_window=settings.suppression_window)
        source = create_status_source(settings.strategy, store=store, multiplexer=multiplexer)
        resolver = StatusResolver(source, settings.program_name, settings.search_depth)
        refiner = StatusRefiner(
            decay_policy=settings.decay_policy,
            done_window=settings.done_window,
            activity_window=settings.activity_window,
            idle_threshold=settings.idle_threshold,
            debounce=settings.debounce_idle,
        )
        return cls(multiplexer, resolver, refiner, store=store,
                   settings=settings, state_path=state_path)

    @property
    def sessions(self) -> List[PaneSession]:
        with self._lock:
            return list(self._sessions)

    def _cleanup_due(self) -> bool:
        self.poll_count += 1
        return self.store is not None and self.poll_count % self.settings.cleanup_every == 0

    def _list_and_resolve(self) -> Tuple[Optional[List[PaneSession]], Optional[str]]:
        """List panes and resolve raw statuses. Returns (occupied, error)."""
        try:
            panes = self.multiplexer.list_panes()
        except MultiplexerError as e:
            logger.warning("Pane listing failed: %s", e)
            return None, str(e)

        table = self.table_builder()
        if table is None:
            return None, "process table unavailable"

        resolved = self.resolver.resolve(panes, table)
        return [s for s in resolved if s.is_occupied], None

    def poll(self) -> PollResult:
        """Run one cycle. Never raises for environmental failures.

        Cycles never overlap: a second caller waits for the running one, so
        refinement always sees snapshots in the order they were taken.
        """
        with self._poll_lock:
            return self._poll()

    def _poll(self) -> PollResult:
        if self._cleanup_due():
            removed = self.store.cleanup(self.settings.event_max_age, now=self.clock())
            if removed:
                logger.debug("Removed %d stale event records", removed)

        occupied, error = self._list_and_resolve()
        if error:
            return PollResult(sessions=self.sessions, error=error)

        if not self._seeded:
            self.refiner.seed(occupied)
            self._seeded = True
        self.refiner.forget_missing(s.pane_id for s in occupied)

        with self._state_lock:
            refined = self.refiner.refine(occupied, self.operator_state, self.clock())
            if refined.state_dirty or self.operator_state.dirty:
                self.operator_state.save(self.state_path)

        with self._lock:
            previous_vcs = {s.pane_id: s.vcs for s in self._sessions}
            for session in occupied:
                session.vcs = previous_vcs.get(session.pane_id)
            # Group by project directory, keeping tmux order within a group
            occupied.sort(key=lambda s: s.working_dir)
            changed = sessions_differ(self._sessions, occupied)
            self._sessions = occupied

        return PollResult(sessions=list(occupied), changed=changed, attention=refined.attention)

    def snapshot(self) -> PollResult:
        """Raw statuses for a one-off listing.

        Skips refinement and cleanup, so seen markers are left untouched.
        """
        with self._poll_lock:
            occupied, error = self._list_and_resolve()
        if error:
            return PollResult(error=error)
        occupied.sort(key=lambda s: s.working_dir)
        return PollResult(sessions=occupied, changed=True)

    def apply_vcs(self, pane_id: str, summary: Optional[VcsSummary]) -> bool:
        """Merge an async VCS result. Returns True if the list changed.

        Results for panes that have since disappeared are dropped.
        """
        with self._lock:
            for i, session in enumerate(self._sessions):
                if session.pane_id != pane_id:
                    continue
                if session.vcs == summary:
                    return False
                self._sessions[i] = session.with_vcs(summary)
                return True
        return False

    def mark_jumped(self, target: str) -> None:
        """The operator jumped to a target. Record it as seen right away."""
        with self._state_lock:
            self.operator_state.mark_seen(target)
            self.operator_state.save(self.state_path)

    def save_state(self) -> bool:
        with self._state_lock:
            return self.operator_state.save(self.state_path)
