"""
Logging setup for Panewatch.

Every module logs through ``logging.getLogger(__name__)``, which lands under
the ``panewatch`` logger configured here. The dashboard owns the terminal,
so it logs to a file only; CLI commands log warnings to the console.
"""

import logging
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

from .settings import get_log_path

ROOT_LOGGER = "panewatch"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a logger namespaced under panewatch."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    console: bool = True,
    rich_console: bool = True,
) -> logging.Logger:
    """Configure the panewatch logger, replacing any existing handlers."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.setLevel(level)
    logger.propagate = False

    if console:
        if rich_console:
            handler: logging.Handler = RichHandler(
                show_path=False, rich_tracebacks=True, markup=False,
            )
            handler.setFormatter(logging.Formatter("%(message)s"))
        else:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def setup_tui_logging(log_file: Optional[Path] = None, level: int = logging.INFO) -> logging.Logger:
    """File-only logging for the dashboard."""
    setup_logging(level=level, log_file=log_file or get_log_path(), console=False)
    return get_logger("tui")


def setup_cli_logging(verbose: bool = False) -> logging.Logger:
    """Console logging for CLI commands (warnings unless verbose)."""
    setup_logging(level=logging.DEBUG if verbose else logging.WARNING, console=True)
    return get_logger("cli")
