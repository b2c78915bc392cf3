"""
Tests for per-poll raw status resolution.
"""

from panewatch.event_store import EventRecord, EventStore
from panewatch.status_constants import STATUS_EXITED, STATUS_IDLE, STATUS_WORKING
from panewatch.status_resolver import StatusResolver
from panewatch.status_sources import EventStatusSource
from tests.fixtures import claude_under_shell, create_pane, create_process_table


class CountingSource:
    """StatusSource that records how it is driven."""

    def __init__(self, status=STATUS_WORKING):
        self.status = status
        self.begin_calls = 0
        self.asked = []

    def begin_poll(self):
        self.begin_calls += 1

    def status_for(self, pane):
        self.asked.append(pane.pane_id)
        return self.status


class TestStatusResolver:
    """Test liveness plus source resolution"""

    def test_live_claude_gets_source_status(self):
        table = create_process_table(claude_under_shell(100))
        resolver = StatusResolver(CountingSource(STATUS_WORKING))
        session = resolver.resolve_pane(create_pane(root_pid=100), table)
        assert session.is_occupied
        assert session.occupant_pid == 101
        assert session.status == STATUS_WORKING

    def test_no_claude_is_unoccupied_and_exited(self):
        table = create_process_table([(100, 1, "zsh"), (101, 100, "vim")])
        source = CountingSource()
        session = StatusResolver(source).resolve_pane(create_pane(root_pid=100), table)
        assert not session.is_occupied
        assert session.status == STATUS_EXITED
        assert source.asked == []

    def test_exited_even_with_working_event_record(self, tmp_path):
        store = EventStore(directory=tmp_path)
        store.write(EventRecord(pane_id="%1", status="working", timestamp=1.0))
        table = create_process_table([(100, 1, "zsh")])
        resolver = StatusResolver(EventStatusSource(store))
        [session] = resolver.resolve([create_pane(pane_id="%1", root_pid=100)], table)
        assert session.status == STATUS_EXITED

    def test_claude_through_runtime_wrapper(self):
        table = create_process_table([(100, 1, "zsh"), (101, 100, "node"), (102, 101, "claude")])
        session = StatusResolver(CountingSource()).resolve_pane(create_pane(root_pid=100), table)
        assert session.occupant_pid == 102

    def test_search_depth_is_configurable(self):
        table = create_process_table([(100, 1, "zsh"), (101, 100, "node"), (102, 101, "claude")])
        resolver = StatusResolver(CountingSource(), search_depth=1)
        assert not resolver.resolve_pane(create_pane(root_pid=100), table).is_occupied

    def test_program_name_is_configurable(self):
        table = create_process_table([(100, 1, "zsh"), (101, 100, "aider")])
        resolver = StatusResolver(CountingSource(STATUS_IDLE), program_name="aider")
        assert resolver.resolve_pane(create_pane(root_pid=100), table).status == STATUS_IDLE

    def test_begin_poll_once_per_resolve(self):
        rows = claude_under_shell(100) + claude_under_shell(200)
        table = create_process_table(rows)
        source = CountingSource()
        panes = [create_pane(pane_id="%1", root_pid=100), create_pane(pane_id="%2", root_pid=200)]
        sessions = StatusResolver(source).resolve(panes, table)
        assert source.begin_calls == 1
        assert [s.pane_id for s in sessions] == ["%1", "%2"]
