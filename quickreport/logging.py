"""Logging setup shared by the CLI, the summarization workers and the report server."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "quickreport"
_CONSOLE_FORMAT = "[quickreport] %(levelname)s %(message)s"
# Summaries finish out of order; the worker name shows which thread logged what.
_VERBOSE_CONSOLE_FORMAT = "[quickreport] %(levelname)s [%(threadName)s] %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``quickreport.<name>``, or the package logger when no name is given."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def server_log_level(verbose: bool) -> str:
    """uvicorn's log level: access logs only when troubleshooting."""
    return "info" if verbose else "warning"


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install console and optional file handlers on the ``quickreport`` logger.

    Calling this again replaces the previous handlers.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_VERBOSE_CONSOLE_FORMAT if verbose else _CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(logging.DEBUG)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(sink)
        # The file keeps debug output even when the console is at INFO.
        logger.setLevel(logging.DEBUG)

    return logger


__all__ = ["configure_logging", "get_logger", "server_log_level"]
