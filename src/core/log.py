"""Logging configuration.

Diagnostics go to stderr through a rich handler so they never mix with the
progress line on stdout. Only the `chromium_dl` logger is touched; the root
logger is left alone.
"""

from __future__ import annotations

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "chromium_dl"


def configure_logging(level: str | int = logging.WARNING) -> logging.Logger:
    """Attach a stderr handler to the application logger (once) and set its level."""

    app_logger = logging.getLogger(LOGGER_NAME)
    if not app_logger.handlers:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        app_logger.addHandler(handler)
        app_logger.propagate = False
    app_logger.setLevel(level)
    return app_logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def log_with_data(logger: logging.Logger, level: int, msg: str, data: dict[str, Any] | None = None) -> None:
    """Log `msg` with an optional structured payload appended for humans."""

    if data:
        details = " ".join(f"{key}={value}" for key, value in data.items())
        logger.log(level, "%s (%s)", msg, details, extra={"data": data})
    else:
        logger.log(level, msg)
