"""Logging setup for cph.

Every module logs through ``logging.getLogger(__name__)``; this module only
registers the extra ``TRACE`` level and attaches a Rich handler writing to
stderr, so table output on stdout stays clean.

Examples:
    >>> from cph.logging import init_logging
    >>> logger = init_logging("DEBUG")
    >>> logger.name
    'cph'
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["LOGGER_NAME", "TRACE_LEVEL", "init_logging"]

LOGGER_NAME = "cph"

# Request/response metadata of remote calls, below DEBUG
TRACE_LEVEL = 5
logging.addLevelName(TRACE_LEVEL, "TRACE")


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    name = level.upper()
    if name == "TRACE":
        return TRACE_LEVEL
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def init_logging(level: str | int = "WARNING") -> logging.Logger:
    """Configure the ``cph`` logger with a Rich stderr handler.

    Calling it again replaces the previously installed handler.

    Args:
        level: Level name (``TRACE``, ``DEBUG``, ...) or numeric level.

    Returns:
        The configured ``cph`` logger.

    Raises:
        ValueError: If the level name is unknown.
    """
    numeric = _resolve_level(level)
    logger = logging.getLogger(LOGGER_NAME)

    for handler in logger.handlers[:]:
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=numeric <= logging.DEBUG,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setLevel(numeric)
    logger.addHandler(handler)
    logger.setLevel(numeric)
    logger.propagate = False
    return logger
