"""Logging utilities for the MCPWebKit server."""

from __future__ import annotations

import logging
from typing import Any, Literal

from rich.console import Console
from rich.logging import RichHandler

_PACKAGE_LOGGER_NAME = "mcpwebkit"
_FORMAT = "[MCPWebKit] %(message)s"
_CONFIGURED = False


def _qualify(name: str | None) -> str:
    if not name:
        return _PACKAGE_LOGGER_NAME
    if name.startswith(_PACKAGE_LOGGER_NAME):
        return name
    return f"{_PACKAGE_LOGGER_NAME}.{name}"


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] | int = "INFO",
    **rich_kwargs: Any,
) -> logging.Logger:
    """Route the package logger to a rich handler on stderr.

    Safe to call repeatedly; the previous handler is replaced.
    """

    global _CONFIGURED

    logger = logging.getLogger(_PACKAGE_LOGGER_NAME)
    handler = RichHandler(console=Console(stderr=True), **rich_kwargs)
    handler.setFormatter(logging.Formatter(_FORMAT))

    for existing in list(logger.handlers):
        if isinstance(existing, RichHandler):
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    _CONFIGURED = True
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger scoped to the package namespace."""

    return logging.getLogger(_qualify(name))
