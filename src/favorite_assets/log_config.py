"""Logging setup for the favorites CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from favorite_assets.config.models import LoggingSettings

PACKAGE_LOGGER = "favorite_assets"


def configure_logging(
    settings: LoggingSettings, *, console: Console | None = None
) -> logging.Logger:
    """Route package log records to stderr through Rich.

    Calling this again replaces the handler installed by a previous call.

    Args:
        settings: Logging configuration.
        console: Optional console to render into; defaults to stderr.

    Returns:
        logging.Logger: The configured package logger.
    """

    level = getattr(logging, settings.level.upper(), logging.WARNING)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, "_favorites_handler", False):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
    )
    handler._favorites_handler = True  # type: ignore[attr-defined]
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


__all__ = ["configure_logging", "PACKAGE_LOGGER"]
