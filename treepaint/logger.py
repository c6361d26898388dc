"""Logging configuration using loguru.

Logs are stored in the logs/ folder and kept for 1 week.
Output goes to file only by default so rendered HTML on stdout stays clean.
"""

import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    import loguru


# Remove default handler
logger.remove()

# Define log directory (default ~/.local/share/treepaint/logs, overridable via TREEPAINT_LOG_DIR)
_default_log_dir = Path.home() / ".local" / "share" / "treepaint" / "logs"
LOG_DIR = Path(os.environ.get("TREEPAINT_LOG_DIR", str(_default_log_dir))).expanduser().resolve()
LOG_DIR.mkdir(parents=True, exist_ok=True)

STDERR_FORMAT = "<level>{level: <8}</level> | <cyan>{name}</cyan> - <level>{message}</level>"


class _LoggingState:
    """Internal state tracker for logging configuration.

    Note: stderr handler is NOT added by default; the command-line tool adds
    it on request.
    """

    def __init__(self) -> None:
        """Initialize logging state without stderr handler."""
        self.stderr_handler_id: int | None = None


_state = _LoggingState()

# Configure file handler with rotation and retention
logger.add(
    LOG_DIR / "treepaint_{time:YYYY-MM-DD}.log",
    level="DEBUG",
    format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
    rotation="00:00",  # New file at midnight
    retention="1 week",  # Keep logs for 1 week
    compression="gz",  # Compress old logs
    backtrace=True,
    diagnose=False,
)


def get_logger(name: str) -> "loguru.Logger":
    """Get a logger instance with the given name.

    Args:
        name: The name for the logger (typically __name__).

    Returns:
        A configured logger instance.
    """
    return logger.bind(name=name)


def add_stderr_sink(level: str = "INFO") -> int:
    """Mirror log records on stderr.

    Replaces a previously added stderr sink, so calling this twice only
    changes the level.

    Args:
        level: Minimum log level for the stderr sink.

    Returns:
        The sink ID.
    """
    remove_stderr_sink()
    _state.stderr_handler_id = logger.add(sys.stderr, level=level, format=STDERR_FORMAT, colorize=True)
    return _state.stderr_handler_id


def remove_stderr_sink() -> None:
    """Remove the stderr sink if one is installed."""
    if _state.stderr_handler_id is not None:
        logger.remove(_state.stderr_handler_id)
        _state.stderr_handler_id = None
