"""Logging setup for gomoq.

Library modules only create loggers:

    from .log import get_logger
    logger = get_logger(__name__)

Handlers are installed by `configure_logging()`, which only the CLI calls.
"""

from __future__ import annotations

import logging
import sys

DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: int = logging.WARNING, fmt: str = DEFAULT_FORMAT, stream=None) -> None:
    """Configure the `gomoq` logger. Safe to call more than once."""
    root = logging.getLogger("gomoq")
    if not root.handlers:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
