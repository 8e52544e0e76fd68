"""Logging configuration with scheduler-specific verbosity levels."""

from __future__ import annotations

import logging
import sys
from datetime import date
from typing import Any, TextIO

# Levels sitting between the standard ones
CHANGES_LEVEL = 25  # Between INFO (20) and WARNING (30) - order/date changes
CHECKS_LEVEL = 15  # Between DEBUG (10) and INFO (20) - per-item decisions

logging.addLevelName(CHANGES_LEVEL, "CHANGES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")

VERBOSITY_SILENT = 0  # Only errors
VERBOSITY_CHANGES = 1  # Emitted changes
VERBOSITY_CHECKS = 2  # Every item the walk considers
VERBOSITY_DEBUG = 3  # Estimator tiers, medians, scores

_LEVEL_MAP = {
    VERBOSITY_SILENT: logging.ERROR,
    VERBOSITY_CHANGES: CHANGES_LEVEL,
    VERBOSITY_CHECKS: CHECKS_LEVEL,
    VERBOSITY_DEBUG: logging.DEBUG,
}


class RoadmapLogger(logging.Logger):
    """Logger with semantic verbosity methods.

    - changes(): verbosity 1 - reorders and date changes being proposed
    - checks(): verbosity 2 - why each item was shifted, kept or skipped
    - debug(): verbosity 3 - full algorithm detail

    ``order_change`` and ``date_change`` give every component the same
    one-line format for the changes it proposes or writes.
    """

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log changes (verbosity level 1)."""
        if self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log checks (verbosity level 2)."""
        if self.isEnabledFor(CHECKS_LEVEL):
            self._log(CHECKS_LEVEL, msg, args, **kwargs)

    def order_change(self, label: str, previous: int | None, new: int) -> None:
        """Log a position move, e.g. ``#12: order 3 -> 1``."""
        before = "-" if previous is None else str(previous)
        self.changes(f"  {label}: order {before} -> {new}")

    def date_change(
        self, label: str, start: date, finish: date, reason: str | None = None
    ) -> None:
        """Log a new start/finish window, with the reason when known."""
        suffix = f" ({reason})" if reason else ""
        self.changes(f"  {label}: {start} -> {finish}{suffix}")


class _VerbosityFormatter(logging.Formatter):
    """Plain messages for progress output; warnings and errors are tagged."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.WARNING:
            return f"{record.levelname.lower()}: {message}"
        return message


def get_logger() -> RoadmapLogger:
    """Return the shared ``roadmap_scheduler`` logger."""
    logging.setLoggerClass(RoadmapLogger)
    logger = logging.getLogger("roadmap_scheduler")
    assert isinstance(logger, RoadmapLogger)
    return logger


def level_for_verbosity(verbosity: int) -> int:
    """Logging level for a verbosity count; out-of-range values are clamped."""
    clamped = min(max(verbosity, VERBOSITY_SILENT), VERBOSITY_DEBUG)
    return _LEVEL_MAP[clamped]


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Configure the logger for a verbosity level.

    Safe to call repeatedly; existing handlers are replaced.

    Args:
        verbosity: 0=errors only, 1=changes, 2=checks, 3=debug
        stream: Output stream (defaults to sys.stderr)
    """
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(level_for_verbosity(verbosity))

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(_VerbosityFormatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Drop handlers and return to errors-only (used between tests)."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.ERROR)
