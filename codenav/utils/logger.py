"""
Logging utility for codenav.

The server's stdout is a protocol channel and the CLI's stdout carries
command output, so the only sink installed here writes to stderr.

Set CODENAV_DEBUG=true to enable debug logging of wire traffic.
"""

import os
import sys

from loguru import logger as loguru_logger

LOG_FORMAT = "<level>{level: <8}</level> <cyan>{name}</cyan>: {message}"


def is_debug_enabled() -> bool:
    """Check if debug mode is enabled."""
    return os.environ.get("CODENAV_DEBUG", "").lower() == "true"


def configure_logging(debug: bool = False) -> None:
    """Replace loguru's default sink with a single stderr sink.

    Args:
        debug: Log at DEBUG instead of WARNING. CODENAV_DEBUG=true
            has the same effect.
    """
    level = "DEBUG" if debug or is_debug_enabled() else "WARNING"
    loguru_logger.remove()
    loguru_logger.add(sys.stderr, level=level, format=LOG_FORMAT)


# Export loguru logger for direct use
logger = loguru_logger
