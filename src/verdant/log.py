"""Logging setup shared by the CLI and the HTTP app."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

_CONFIGURED = False


def configure_logging(level: str = "INFO") -> None:
    """Route the root logger through rich. Safe to call more than once."""
    global _CONFIGURED

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if _CONFIGURED:
        return

    handler = RichHandler(rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s", datefmt="[%X]"))
    root.addHandler(handler)

    # Per-request lines from these are noise at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    _CONFIGURED = True
