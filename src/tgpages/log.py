"""Logging helpers: library verbosity and optional console setup.

``apply_log_level()`` maps the five library levels (NONE..LEVEL_4) onto the
``tgpages`` logger. ``setup_logging()`` is an opt-in helper that gives the
library logger its own colored console handler without touching the
host's root logging setup.
"""

import logging
from typing import TextIO

import colorlog

from .config import LogLevel, parse_log_level

LIBRARY_LOGGER = "tgpages"

# Marks the handler setup_logging() installed, so a second call replaces it
_OWNED = "_tgpages_console"

_LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


class _ShortNameFilter(logging.Filter):
    """Strip 'tgpages.' and 'controllers.' prefixes, cap at 16 chars."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith("tgpages.controllers."):
            name = name[len("tgpages.controllers.") :]
        elif name.startswith("tgpages."):
            name = name[len("tgpages.") :]
        record.short_name = name[:16]  # type: ignore[attr-defined]
        return True


def apply_log_level(level: str | int | LogLevel) -> None:
    """Set the tgpages logger to one of the five library verbosity levels."""
    lib_level = parse_log_level(level)
    lib_logger = logging.getLogger(LIBRARY_LOGGER)
    lib_logger.setLevel(lib_level.logging_level)
    lib_logger.disabled = lib_level is LogLevel.NONE


def setup_logging(
    level: str | int | LogLevel = LogLevel.LEVEL_3,
    *,
    stream: TextIO | None = None,
    handler: logging.Handler | None = None,
) -> logging.Handler:
    """Give the tgpages logger its own console handler.

    Only the library's logger is touched: the host's root configuration is
    left alone and tgpages records stop propagating to it. Calling again
    replaces the handler installed by the previous call. Pass ``handler`` to
    route records elsewhere; it still gets the short-name filter.
    """
    if handler is None:
        handler = colorlog.StreamHandler(stream)
        handler.setFormatter(
            colorlog.ColoredFormatter(
                "%(log_color)s%(asctime)s %(levelname)-8s "
                "%(short_name)-16s %(message)s",
                datefmt="%H:%M:%S",
                log_colors=_LOG_COLORS,
            )
        )
    handler.addFilter(_ShortNameFilter())

    lib_logger = logging.getLogger(LIBRARY_LOGGER)
    for old in [h for h in lib_logger.handlers if getattr(h, _OWNED, False)]:
        lib_logger.removeHandler(old)
    setattr(handler, _OWNED, True)
    lib_logger.addHandler(handler)
    lib_logger.propagate = False

    apply_log_level(level)
    return handler
