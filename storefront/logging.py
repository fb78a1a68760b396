"""
Logging setup for the storefront cart client.

Usage:
    from storefront.logging import get_logger
    logger = get_logger(__name__)

    logger.info("Cart refreshed")
    logger.warning("Guest cart unreadable", exc_info=True)

LOG_LEVEL picks the level; STOREFRONT_PACKAGED=1 switches to the compact
format used by packaged kiosk builds, whose log collector adds timestamps.
"""

import logging
import os
import sys
from functools import cache

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s - %(name)s - %(message)s"

# Per-request chatter from the HTTP stack
_QUIET_LOGGERS = ("httpx", "httpcore")


def _level_from_env() -> int:
    name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _setup_logging() -> None:
    """Attach a stdout handler to the root logger unless the host app already did."""
    root = logging.getLogger()
    if root.handlers:
        return

    level = _level_from_env()
    packaged = os.environ.get("STOREFRONT_PACKAGED") == "1"

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT_SIMPLE if packaged else LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


_setup_logging()


@cache
def get_logger(name: str) -> logging.Logger:
    """Logger for a storefront module (pass __name__)."""
    return logging.getLogger(name)


_LOG_ESCAPES = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t", "\x00": None})


def sanitize_id_for_logging(id_value: object | None) -> str:
    """
    Shorten a user or line id for a log line.

    Control characters are escaped so an id cannot forge extra log lines,
    and only the first 8 characters are kept.

    Returns:
        Sanitized id, or "N/A" when there is none
    """
    if id_value is None or id_value == "":
        return "N/A"
    return str(id_value).translate(_LOG_ESCAPES)[:8]


__all__ = [
    "LOG_FORMAT",
    "LOG_FORMAT_SIMPLE",
    "get_logger",
    "sanitize_id_for_logging",
]
