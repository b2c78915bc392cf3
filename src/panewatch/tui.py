"""
Textual dashboard for Panewatch.

Meant to run in a narrow tmux pane beside your work. Every poll interval a
worker thread runs one PollOrchestrator cycle and hands the result back to
the UI thread. Git stats, previews and window switching run in their own
workers so a slow tmux or git call never stalls the list.
"""

import logging
import os
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

from textual import work
from textual.app import App, ComposeResult
from textual.css.query import NoMatches
from textual.widgets import Static

from . import __version__
from .approval_relay import RelayConfig, SlackRelay
from .config import load_engine_settings
from .implementations import RealTmux
from .logging_config import setup_tui_logging
from .models import PaneSession, VcsSummary
from .notifier import AttentionNotifier, next_bell_mode
from .poller import PollOrchestrator, PollResult
from .protocols import MultiplexerInterface, VcsInterface
from .settings import EngineSettings, TUIPreferences
from .tui_formatters import next_attention_index, trim_preview
from .tui_widgets import HelpOverlay, PreviewPane, SessionList
from .vcs import GitStatsCache

logger = logging.getLogger(__name__)

VCS_WORKERS = 4
PREVIEW_LINES = 20


class PanewatchApp(App):
    """Panewatch sidebar"""

    AUTO_FOCUS = None

    CSS_PATH = "tui.tcss"

    BINDINGS = [
        ("enter", "jump", "Jump"),
        ("tab", "next_attention", "Next"),
        ("j", "cursor_down", "Down"),
        ("down", "cursor_down", "Down"),
        ("k", "cursor_up", "Up"),
        ("up", "cursor_up", "Up"),
        ("n", "new_window", "New"),
        ("r", "refresh", "Refresh"),
        ("p", "toggle_preview", "Preview"),
        ("m", "cycle_bell", "Bell"),
        ("s", "toggle_relay", "Slack"),
        ("h", "toggle_help", "Help"),
        ("question_mark", "toggle_help", "Help"),
        ("q", "quit", "Quit"),
        ("escape", "quit", "Quit"),
        ("ctrl+c", "quit", "Quit"),
    ]

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        multiplexer: Optional[MultiplexerInterface] = None,
        orchestrator: Optional[PollOrchestrator] = None,
        vcs: Optional[VcsInterface] = None,
        notifier: Optional[AttentionNotifier] = None,
        prefs_path: Optional[Path] = None,
        auto_poll: bool = True,
    ):
        super().__init__()
        self.settings = settings or EngineSettings()
        self.multiplexer = multiplexer or RealTmux(sidebar_title=self.settings.sidebar_title)
        self.orchestrator = orchestrator or PollOrchestrator.from_settings(self.multiplexer, self.settings)
        self.vcs = vcs or GitStatsCache(ttl=self.settings.vcs_ttl)
        self.prefs_path = prefs_path
        self._prefs = TUIPreferences.load(prefs_path)
        self.notifier = notifier or AttentionNotifier(mode=self._prefs.bell)
        self.auto_poll = auto_poll
        self.tick = 0
        self._poll_in_flight = False
        self.error: Optional[str] = None

    def compose(self) -> ComposeResult:
        yield Static(id="error-banner")
        yield SessionList(id="session-list")
        yield PreviewPane(id="preview-pane")
        yield HelpOverlay(id="help-overlay")
        yield Static(id="footer-bar")

    def on_mount(self) -> None:
        self.title = f"Panewatch v{__version__}"
        self._claim_sidebar_pane()
        self._apply_preview_visibility()
        self._update_footer()
        self.query_one("#error-banner", Static).display = False
        self.query_one("#help-overlay", HelpOverlay).display = False

        self.action_refresh()
        if self.auto_poll:
            self.set_interval(self.settings.poll_interval, self.action_refresh)

    def _claim_sidebar_pane(self) -> None:
        """Title our own pane so focus_window never lands on the dashboard."""
        pane_id = os.environ.get("TMUX_PANE")
        if pane_id and isinstance(self.multiplexer, RealTmux):
            self.multiplexer.set_pane_title(pane_id, self.settings.sidebar_title)

    @property
    def session_list(self) -> SessionList:
        return self.query_one("#session-list", SessionList)

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def action_refresh(self) -> None:
        # Skip the tick while a slow poll is still running
        if self._poll_in_flight:
            return
        self._poll_in_flight = True
        self._poll_async()

    @work(thread=True, exclusive=True, group="poll")
    def _poll_async(self) -> None:
        """Run one poll off the main thread, then apply to UI."""
        try:
            result = self.orchestrator.poll()
            self.call_from_thread(self._apply_poll, result)
        finally:
            self._poll_in_flight = False

    def _apply_poll(self, result: PollResult) -> None:
        """Apply a poll result on the main thread (no I/O beyond prefs)."""
        self._set_error(result.error)
        if result.error:
            return

        self.tick += 1
        self._sync_prefs()

        session_list = self.session_list
        session_list.tick = self.tick
        if result.changed:
            session_list.set_sessions(result.sessions)
        else:
            # Spinner and relative times still move
            session_list.refresh_rows()

        if result.attention:
            for session in result.attention:
                self.notifier.queue(session.title)
        self.notifier.flush()

        self._fetch_vcs_async([(s.pane_id, s.working_dir) for s in result.sessions if s.working_dir])
        if self._prefs.show_preview:
            self._refresh_preview()

    def _set_error(self, error: Optional[str]) -> None:
        self.error = error
        try:
            banner = self.query_one("#error-banner", Static)
        except NoMatches:
            return
        banner.display = bool(error)
        if error:
            banner.update(f"⚠ {error}")

    def _sync_prefs(self) -> None:
        """Pick up toggles made by other dashboard instances."""
        on_disk = TUIPreferences.load(self.prefs_path)
        if on_disk.show_preview != self._prefs.show_preview:
            self._prefs.show_preview = on_disk.show_preview
            self._apply_preview_visibility()
        if on_disk.relay_enabled != self._prefs.relay_enabled:
            self._prefs.relay_enabled = on_disk.relay_enabled
            self._update_footer()

    # ------------------------------------------------------------------
    # Git stats
    # ------------------------------------------------------------------

    @work(thread=True, exclusive=True, group="vcs")
    def _fetch_vcs_async(self, targets: List[tuple]) -> None:
        """Fetch git stats for every pane, applying each result as it lands."""
        with ThreadPoolExecutor(max_workers=VCS_WORKERS) as pool:
            futures = {
                pool.submit(self.vcs.get_stats, directory): pane_id
                for pane_id, directory in targets
            }
            for future, pane_id in futures.items():
                self.call_from_thread(self._apply_vcs, pane_id, future.result())

    def _apply_vcs(self, pane_id: str, summary: Optional[VcsSummary]) -> None:
        if self.orchestrator.apply_vcs(pane_id, summary):
            self.session_list.set_sessions(self.orchestrator.sessions)

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------

    def _apply_preview_visibility(self) -> None:
        try:
            preview = self.query_one("#preview-pane", PreviewPane)
        except NoMatches:
            return
        preview.display = self._prefs.show_preview
        if not self._prefs.show_preview:
            preview.clear_content()

    def _refresh_preview(self) -> None:
        session = self.session_list.selected
        if session is None:
            return
        preview = self.query_one("#preview-pane", PreviewPane)
        width = max(preview.size.width, 20)
        self._capture_preview_async(session.pane_id, session.title, width)

    @work(thread=True, exclusive=True, group="preview")
    def _capture_preview_async(self, pane_id: str, title: str, width: int) -> None:
        text = self.multiplexer.capture_visible_text(pane_id)
        lines = trim_preview(text, PREVIEW_LINES, width) if text else []
        self.call_from_thread(self._apply_preview, pane_id, title, lines)

    def _apply_preview(self, pane_id: str, title: str, lines: List[str]) -> None:
        selected = self.session_list.selected
        # Selection moved while capturing
        if selected is None or selected.pane_id != pane_id:
            return
        self.query_one("#preview-pane", PreviewPane).show(pane_id, title, lines)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def action_cursor_down(self) -> None:
        self.session_list.move(1)
        if self._prefs.show_preview:
            self._refresh_preview()

    def action_cursor_up(self) -> None:
        self.session_list.move(-1)
        if self._prefs.show_preview:
            self._refresh_preview()

    def action_jump(self) -> None:
        session = self.session_list.selected
        if session is not None:
            self._jump_async(session)

    @work(thread=True, group="jump")
    def _jump_async(self, session: PaneSession) -> None:
        if self.multiplexer.focus_window(session.pane.group, session.pane.group_index):
            self.orchestrator.mark_jumped(session.target)
            self.call_from_thread(self.action_refresh)
        else:
            self.call_from_thread(self._set_error, f"could not switch to {session.target}")

    def action_next_attention(self) -> None:
        session_list = self.session_list
        index = next_attention_index(session_list.sessions, session_list.selected_index)
        if index is None:
            self.notify("Nothing needs attention")
            return
        session_list.selected_index = index
        self.action_jump()

    def action_new_window(self) -> None:
        self._spawn_async()

    @work(thread=True, group="spawn")
    def _spawn_async(self) -> None:
        if self.multiplexer.spawn_window(command=[self.settings.program_name]):
            self.call_from_thread(self.action_refresh)
        else:
            self.call_from_thread(self._set_error, "could not open a new window")

    def action_toggle_preview(self) -> None:
        self._prefs.show_preview = not self._prefs.show_preview
        self._prefs.save(self.prefs_path)
        self._apply_preview_visibility()
        if self._prefs.show_preview:
            self._refresh_preview()

    def action_cycle_bell(self) -> None:
        self._prefs.bell = next_bell_mode(self._prefs.bell)
        self.notifier.mode = self._prefs.bell
        self._prefs.save(self.prefs_path)
        self._update_footer()
        self.notify(f"Bell: {self._prefs.bell}")

    def action_toggle_relay(self) -> None:
        config = RelayConfig.load()
        if config is None and not self._prefs.relay_enabled:
            self.notify("Slack relay not configured. Run 'panewatch relay setup'", severity="warning")
            return
        self._prefs.relay_enabled = not self._prefs.relay_enabled
        self._prefs.save(self.prefs_path)
        self._update_footer()
        if config is not None:
            self._announce_relay_async(config, self._prefs.relay_enabled)

    @work(thread=True, group="relay")
    def _announce_relay_async(self, config: RelayConfig, enabled: bool) -> None:
        state = ":large_green_circle: panewatch Slack approvals *enabled*" if enabled \
            else ":red_circle: panewatch Slack approvals *disabled*"
        SlackRelay(config).notify(state)

    def action_toggle_help(self) -> None:
        overlay = self.query_one("#help-overlay", HelpOverlay)
        overlay.display = not overlay.display

    def _update_footer(self) -> None:
        try:
            footer = self.query_one("#footer-bar", Static)
        except NoMatches:
            return
        relay = "slack:on" if self._prefs.relay_enabled else "slack:off"
        footer.update(f"⏎ jump · tab next · n new · bell:{self._prefs.bell} · {relay} · ? help")

    def on_unmount(self) -> None:
        self.orchestrator.save_state()


def run_tui(strategy: Optional[str] = None, verbose: bool = False) -> None:
    """Run the dashboard"""
    if not sys.stdout.isatty():
        print("Error: Must run in a TTY terminal", file=sys.stderr)
        sys.exit(1)
    if not os.environ.get("TMUX"):
        print("Error: Must run inside tmux", file=sys.stderr)
        sys.exit(1)

    setup_tui_logging(level=logging.DEBUG if verbose else logging.INFO)
    settings = load_engine_settings()
    if strategy:
        settings.strategy = strategy
    logger.info("Starting panewatch %s (strategy=%s)", __version__, settings.strategy)

    os.environ.setdefault('TERM', 'xterm-256color')
    PanewatchApp(settings).run()


if __name__ == "__main__":
    run_tui()
