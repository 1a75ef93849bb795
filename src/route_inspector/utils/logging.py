"""Rich-backed logging for the route inspector."""

from __future__ import annotations

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

Logger = logging.Logger

_LOGGER_NAME = "route_inspector"
_logger: logging.Logger | None = None


def _configure_logger(level: int) -> logging.Logger:
    """Attach a single Rich handler to the package logger."""

    logger = logging.getLogger(_LOGGER_NAME)
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_time=True,
            show_level=True,
            show_path=False,
            log_time_format="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def get_logger(level: int = logging.INFO) -> logging.Logger:
    """Return the application logger, configuring it on first use."""

    global _logger
    if _logger is None:
        _logger = _configure_logger(level)
    return _logger


def log_event(logger: Logger, event: str, **extra: Any) -> None:
    """Emit an info-level event with its context rendered inline.

    Rich only prints the message, so the structured ``extra`` keys are appended as ``key=value`` pairs as well as
    being attached to the record for other handlers.
    """

    if extra:
        details = " ".join(f"{key}={value}" for key, value in extra.items())
        logger.info("%s %s", event, details, extra=extra)
    else:
        logger.info("%s", event)


__all__ = ["get_logger", "log_event", "Logger"]
