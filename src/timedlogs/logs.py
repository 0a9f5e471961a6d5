"""Logging setup: records go to stderr through rich, stdout stays for the status line."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "timedlogs"


def configure_logging(debug: bool = False) -> logging.Logger:
    """Attach a single RichHandler to the package logger (idempotent)."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    for handler in logger.handlers:
        if isinstance(handler, RichHandler):
            return logger
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger
