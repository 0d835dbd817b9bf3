"""Logging setup for the ``trellocards`` package logger."""

from __future__ import annotations

import logging
import sys

from trellocards.trello_client import redact_credentials

PACKAGE_LOGGER = "trellocards"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s [%(threadName)s] - %(message)s"


class RedactingFormatter(logging.Formatter):
    """Formatter that masks ``key=``/``token=`` values in the final record text.

    Applied after formatting, so tracebacks and messages raised by requests or
    urllib3 are covered as well as our own log calls.
    """

    def format(self, record: logging.LogRecord) -> str:
        return redact_credentials(super().format(record))


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: str | int = "INFO", log_file: str | None = None) -> logging.Logger:
    """Configure the package logger and return it.

    Calling it again (e.g. from a second CLI invocation in the same process)
    replaces the handlers instead of stacking them.

    Args:
        level: Level name ("DEBUG", "info", "WARN", ...) or number; unknown names mean INFO
        log_file: Optional path; the file gets timestamps and thread names so
                  concurrent refreshes can be told apart

    Example:
        >>> setup_logging("DEBUG")  # Pattern matches and request URLs (redacted)
        >>> setup_logging("INFO", "trellocards.log")
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(_resolve_level(level))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(RedactingFormatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(RedactingFormatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    # The CLI owns output for this package; keep records off the root logger
    logger.propagate = False
    return logger
