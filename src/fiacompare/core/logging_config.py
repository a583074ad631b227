"""Logging setup for scripts that drive fiacompare."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "INFO", console: Console | None = None) -> None:
    """
    Route fiacompare log records through a Rich handler.

    Library modules only create loggers; handlers are installed here so that
    importing fiacompare never changes the host application's logging.

    Parameters
    ----------
    level : str
        Logging level name for the ``fiacompare`` logger.
    console : Console, optional
        Console the handler writes to. Defaults to stderr.
    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    logger = logging.getLogger("fiacompare")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False
