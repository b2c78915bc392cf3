"""
Tests for logging setup.
"""

import logging

import pytest
from rich.logging import RichHandler

from panewatch.logging_config import (
    ROOT_LOGGER,
    get_logger,
    setup_cli_logging,
    setup_logging,
    setup_tui_logging,
)


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logging.getLogger(ROOT_LOGGER).handlers.clear()


class TestSetupLogging:
    def test_rich_console_handler(self):
        logger = setup_logging(console=True)
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)
        assert not logger.propagate

    def test_plain_console_handler(self):
        logger = setup_logging(console=True, rich_console=False)
        assert type(logger.handlers[0]) is logging.StreamHandler

    def test_file_only(self, tmp_path):
        log_file = tmp_path / "logs" / "panewatch.log"
        logger = setup_logging(console=False, log_file=log_file)
        get_logger("engine").info("hello from the engine")
        for handler in logger.handlers:
            handler.flush()
        assert "panewatch.engine: hello from the engine" in log_file.read_text()

    def test_repeated_setup_replaces_handlers(self):
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1

    def test_tui_logs_to_state_dir(self, isolated_state_dir):
        setup_tui_logging()
        handlers = logging.getLogger(ROOT_LOGGER).handlers
        assert [type(h) for h in handlers] == [logging.FileHandler]
        assert (isolated_state_dir / "panewatch.log").exists()

    def test_cli_levels(self):
        setup_cli_logging()
        assert logging.getLogger(ROOT_LOGGER).level == logging.WARNING
        setup_cli_logging(verbose=True)
        assert logging.getLogger(ROOT_LOGGER).level == logging.DEBUG

    def test_get_logger_namespaced(self):
        assert get_logger("tui").name == "panewatch.tui"
