"""
Logging setup: rich console output for the `page_factory` logger tree.
Library modules only call logging.getLogger(__name__); applications (and the
CLI) call setup_logging() once.
"""
# @file purpose: Configure package logging with rich.

from __future__ import annotations

import logging

from rich.logging import RichHandler

PACKAGE_LOGGER = "page_factory"


def setup_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a RichHandler to the package logger (idempotent)."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.propagate = False
    return logger
