"""Logging configuration for ganttr with verbosity levels."""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

# Between INFO (20) and WARNING (30): date shifts and other state changes
CHANGES_LEVEL = 25

logging.addLevelName(CHANGES_LEVEL, "CHANGES")

VERBOSITY_SILENT = 0  # Only errors
VERBOSITY_CHANGES = 1  # Show date shifts and rollup changes
VERBOSITY_INFO = 2  # Show pass summaries
VERBOSITY_DEBUG = 3  # Full debug output


class GanttrLogger(logging.Logger):
    """Logger with a ``changes()`` method for state-changing events."""

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, msg, args, **kwargs)


def get_logger() -> GanttrLogger:
    """Return the ganttr logger singleton."""
    logging.setLoggerClass(GanttrLogger)
    logger = logging.getLogger("ganttr")
    logging.setLoggerClass(logging.Logger)
    assert isinstance(logger, GanttrLogger)
    return logger


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Configure the ganttr logger.

    Can be called repeatedly; each call replaces the previous handler.

    Args:
        verbosity: 0=errors only, 1=changes, 2=info, 3=debug
        stream: Output stream (defaults to sys.stderr)
    """
    logger = get_logger()
    logger.handlers.clear()

    level_map = {
        VERBOSITY_SILENT: logging.ERROR,
        VERBOSITY_CHANGES: CHANGES_LEVEL,
        VERBOSITY_INFO: logging.INFO,
        VERBOSITY_DEBUG: logging.DEBUG,
    }
    logger.setLevel(level_map.get(min(verbosity, VERBOSITY_DEBUG), logging.ERROR))

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Drop handlers and return to errors-only. Used between tests."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.ERROR)
    logger.propagate = True
