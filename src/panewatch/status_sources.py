"""
Status sources: where a live Claude pane's raw status comes from.

- EventStatusSource reads records written by the lifecycle hooks.
- PassiveStatusSource classifies the pane's visible text.

They are alternative strategies chosen when the dashboard starts, not
layers: with hooks installed the event source is authoritative and an
absent record simply means nothing has happened yet.
"""

from typing import Dict, Optional, TYPE_CHECKING

from .event_store import EventRecord, EventStore
from .models import PaneInfo
from .pane_classifier import classify_pane_text
from .protocols import StatusSource
from .settings import STRATEGY_EVENTS, STRATEGY_PASSIVE
from .status_constants import STATUS_IDLE, STATUS_UNKNOWN, map_event_status
from .status_patterns import PaneTextPatterns

if TYPE_CHECKING:
    from .protocols import MultiplexerInterface


class EventStatusSource:
    """Raw status from the Event Store, read in bulk once per poll."""

    def __init__(self, store: EventStore):
        self.store = store
        self._records: Dict[str, EventRecord] = {}

    def begin_poll(self) -> None:
        self._records = self.store.read_all()

    def status_for(self, pane: PaneInfo) -> str:
        record = self._records.get(pane.pane_id)
        if record is None:
            # Freshly tracked pane, no hook has fired yet
            return STATUS_IDLE
        return map_event_status(record.status)


class PassiveStatusSource:
    """Raw status from the pane's visible text."""

    def __init__(self, multiplexer: "MultiplexerInterface",
                 patterns: Optional[PaneTextPatterns] = None):
        self.multiplexer = multiplexer
        self.patterns = patterns

    def begin_poll(self) -> None:
        pass

    def status_for(self, pane: PaneInfo) -> str:
        text = self.multiplexer.capture_visible_text(pane.pane_id)
        if text is None:
            return STATUS_UNKNOWN
        return classify_pane_text(text, self.patterns)


def create_status_source(
    strategy: str = STRATEGY_EVENTS,
    store: Optional[EventStore] = None,
    multiplexer: Optional["MultiplexerInterface"] = None,
    patterns: Optional[PaneTextPatterns] = None,
) -> StatusSource:
    """Create the status source for the given strategy.

    Args:
        strategy: "events" or "passive"
        store: Event Store for the events strategy (default location if None)
        multiplexer: required for the passive strategy
        patterns: optional PaneTextPatterns for the passive strategy

    Returns:
        A StatusSource implementation
    """
    if strategy == STRATEGY_PASSIVE:
        if multiplexer is None:
            raise ValueError("passive status source needs a multiplexer")
        return PassiveStatusSource(multiplexer, patterns)
    return EventStatusSource(store or EventStore())
