"""Logging setup for the CLI."""

import logging

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_LOG_LEVEL = "WARNING"


def setup_logging(
    level: str | None = None,
    verbose: bool = False,
    console: Console | None = None,
) -> None:
    """Route standard logging through rich.

    ``verbose`` forces DEBUG so per-probe failures become visible.
    """
    effective = "DEBUG" if verbose else (level or DEFAULT_LOG_LEVEL).upper()
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
        markup=False,
    )
    logging.basicConfig(
        level=getattr(logging, effective, logging.WARNING),
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    # httpx logs every request at INFO; keep it out of scan output.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
