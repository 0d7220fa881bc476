"""Logging helpers shared by every icore module."""

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVEL_ENV = "ICORE_LOG_LEVEL"

_configured = False


def _configure_root() -> None:
    global _configured
    if _configured:
        return
    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger("icore")
    root.addHandler(handler)
    root.setLevel(level)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the icore namespace.

    The namespace handler is attached once, the first time any module asks
    for a logger. Output goes to stderr so CLI JSON on stdout stays clean.

    Args:
        name: Usually the calling module's __name__

    Returns:
        Configured logging.Logger
    """
    _configure_root()
    return logging.getLogger(name)
