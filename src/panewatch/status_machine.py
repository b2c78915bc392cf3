"""
Refinement of raw pane statuses into what the operator sees.

Detection only knows whether Claude is working, paused, idle and so on. The
dashboard additionally distinguishes:

    Working/Paused -> Idle          = Unread (finished, not reviewed yet)
    Unread + operator looks at it   = Done
    Done                            = Done until the decay window passes, then Idle

The rules live in TRANSITIONS, an explicit table keyed by
(raw status, previous status, focused, seen marker present). StatusRefiner
walks the table once per poll and applies the listed effects.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from .models import PaneSession
from .operator_state import OperatorState
from .settings import DECAY_ACTIVITY, DECAY_TIMER
from .status_constants import (
    ALL_STATUSES,
    RAW_STATUSES,
    STATUS_DONE,
    STATUS_IDLE,
    STATUS_PAUSED,
    STATUS_UNREAD,
    STATUS_WORKING,
)

# Effects a transition can request
CLEAR_MARKER = "clear_marker"  # forget the operator saw this target
MARK_SEEN = "mark_seen"  # record the operator is looking at it now
START_DECAY = "start_decay"  # Done entered, start its decay timer
CHECK_DECAY = "check_decay"  # stay Done only while the decay window holds
CLEAR_DECAY = "clear_decay"  # drop decay memory

ALL_EFFECTS = frozenset({CLEAR_MARKER, MARK_SEEN, START_DECAY, CHECK_DECAY, CLEAR_DECAY})

# None = first observation of the pane
PREVIOUS_STATES: Tuple[Optional[str], ...] = tuple(ALL_STATUSES) + (None,)

TransitionKey = Tuple[str, Optional[str], bool, bool]


@dataclass(frozen=True)
class Transition:
    status: str
    effects: FrozenSet[str] = frozenset()


def _idle_transition(previous: Optional[str], focused: bool, marker: bool) -> Transition:
    if previous in (STATUS_WORKING, STATUS_PAUSED):
        return Transition(STATUS_UNREAD, frozenset({CLEAR_MARKER}))

    if previous == STATUS_UNREAD:
        if focused:
            return Transition(STATUS_DONE, frozenset({MARK_SEEN, START_DECAY}))
        if marker:
            # Operator jumped there and back since the last poll
            return Transition(STATUS_DONE, frozenset({START_DECAY}))
        return Transition(STATUS_UNREAD)

    if previous == STATUS_DONE:
        effects = {CHECK_DECAY}
        if focused:
            effects.add(MARK_SEEN)
        return Transition(STATUS_DONE, frozenset(effects))

    if focused:
        return Transition(STATUS_IDLE, frozenset({MARK_SEEN}))
    return Transition(STATUS_IDLE)


def build_transition_table() -> Dict[TransitionKey, Transition]:
    """Enumerate every (raw, previous, focused, marker) combination."""
    table = {}
    for raw in sorted(RAW_STATUSES):
        for previous in PREVIOUS_STATES:
            for focused in (False, True):
                for marker in (False, True):
                    if raw == STATUS_IDLE:
                        transition = _idle_transition(previous, focused, marker)
                    else:
                        transition = Transition(raw, frozenset({CLEAR_DECAY}))
                    table[(raw, previous, focused, marker)] = transition
    return table


TRANSITIONS = build_transition_table()


def lookup_transition(raw: str, previous: Optional[str], focused: bool, marker: bool) -> Transition:
    """Table lookup. Statuses outside the table pass through unchanged."""
    if previous not in ALL_STATUSES:
        previous = None
    transition = TRANSITIONS.get((raw, previous, focused, marker))
    if transition is None:
        return Transition(raw, frozenset({CLEAR_DECAY}))
    return transition


def raises_attention(previous: Optional[str], status: str) -> bool:
    """Chime-worthy: Working/Paused -> Unread, or Working -> Paused."""
    if status == STATUS_UNREAD and previous in (STATUS_WORKING, STATUS_PAUSED):
        return True
    return status == STATUS_PAUSED and previous == STATUS_WORKING


@dataclass
class RefineResult:
    """Outcome of one refinement pass."""

    attention: List[PaneSession] = field(default_factory=list)
    state_dirty: bool = False


class StatusRefiner:
    """Applies TRANSITIONS to each poll's sessions.

    Keeps per-pane memory between polls: the previous resolved status, the
    consecutive-idle counter used by the debounce, and when Done was entered.
    """

    def __init__(
        self,
        decay_policy: str = DECAY_TIMER,
        done_window: float = 15.0,
        activity_window: float = 300.0,
        idle_threshold: int = 3,
        debounce: bool = False,
    ):
        self.decay_policy = decay_policy
        self.done_window = done_window
        self.activity_window = activity_window
        self.idle_threshold = idle_threshold
        self.debounce = debounce

        self.previous: Dict[str, str] = {}
        self.idle_counts: Dict[str, int] = {}
        self.done_at: Dict[str, float] = {}

    def seed(self, sessions: Sequence[PaneSession]) -> None:
        """Bootstrap previous statuses from the first poll after startup.

        Every pane starts from its raw status, so nothing looks alarming
        until it actually changes.
        """
        for session in sessions:
            self.previous.setdefault(session.pane_id, session.status)

    def forget_missing(self, pane_ids) -> None:
        """Drop memory for panes that are no longer listed."""
        live = set(pane_ids)
        for memory in (self.previous, self.idle_counts, self.done_at):
            for pane_id in [p for p in memory if p not in live]:
                del memory[pane_id]

    def _debounced(self, session: PaneSession, previous: Optional[str]) -> bool:
        """True if this idle observation should be held at Working.

        The threshold counts polls from the last Working observation, so with
        a threshold of 3 the pane is held for one poll and turns Unread on
        the second consecutive idle.
        """
        if not self.debounce or previous != STATUS_WORKING:
            return False
        count = self.idle_counts.get(session.pane_id, 0) + 1
        if count < self.idle_threshold - 1:
            self.idle_counts[session.pane_id] = count
            return True
        self.idle_counts.pop(session.pane_id, None)
        return False

    def _within_decay(self, session: PaneSession, now: float) -> bool:
        if self.decay_policy == DECAY_ACTIVITY:
            return now - session.pane.last_activity < self.activity_window
        started = self.done_at.get(session.pane_id)
        return started is not None and now - started < self.done_window

    def refine(self, sessions: Sequence[PaneSession], operator_state: OperatorState,
               now: float) -> RefineResult:
        """Refine raw statuses in place.

        Args:
            sessions: occupied sessions carrying raw statuses
            operator_state: seen markers, mutated by MARK_SEEN and CLEAR_MARKER
            now: epoch seconds

        Returns:
            RefineResult with the sessions that need attention and whether
            operator_state changed
        """
        result = RefineResult()
        seen_at = datetime.fromtimestamp(now)

        for session in sessions:
            pane_id = session.pane_id
            raw = session.status
            previous = self.previous.get(pane_id)

            if raw != STATUS_IDLE:
                self.idle_counts.pop(pane_id, None)
            elif self._debounced(session, previous):
                session.status = STATUS_WORKING
                self.previous[pane_id] = STATUS_WORKING
                continue

            transition = lookup_transition(
                raw, previous, session.is_focused, operator_state.has_seen(session.target)
            )
            status = transition.status
            effects = transition.effects

            if CLEAR_MARKER in effects and operator_state.has_seen(session.target):
                operator_state.clear(session.target)
                result.state_dirty = True
            if MARK_SEEN in effects:
                operator_state.mark_seen(session.target, seen_at)
                result.state_dirty = True
            if START_DECAY in effects:
                self.done_at[pane_id] = now
            if CHECK_DECAY in effects and not self._within_decay(session, now):
                self.done_at.pop(pane_id, None)
                status = STATUS_IDLE
            if CLEAR_DECAY in effects:
                self.done_at.pop(pane_id, None)

            session.status = status
            if raises_attention(previous, status):
                result.attention.append(session)
            self.previous[pane_id] = status

        return result
