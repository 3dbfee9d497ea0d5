"""Logging helpers shared by every salesgrid module."""

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a module logger under the salesgrid hierarchy."""
    return logging.getLogger(name)


def configure_logging(level: int = logging.INFO, fmt: Optional[str] = None) -> None:
    """
    Configure the root logger with a single stream handler.

    Args:
        level: Logging level for the root logger
        fmt: Optional format string (defaults to LOG_FORMAT)
    """
    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt or LOG_FORMAT))

    # Replace existing handlers to avoid duplicate lines on repeated setup
    root.handlers.clear()
    root.addHandler(handler)
