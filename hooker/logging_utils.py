"""Logging configuration helpers."""

from __future__ import annotations

import logging


def configure_logging(level: str = "INFO", *, trace_dispatch: bool = False) -> None:
    """Configure root logging; ``trace_dispatch`` turns on debug output for the ``hooker`` loggers only."""
    normalized = level.upper()
    logging.basicConfig(
        level=getattr(logging, normalized, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    if trace_dispatch:
        logging.getLogger("hooker").setLevel(logging.DEBUG)
