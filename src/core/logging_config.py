"""Logging configuration.

Modules log through `logging.getLogger(__name__)`; this module only wires the
root handler once, rendering records through rich on stderr so they do not
interleave with the CLI panels on stdout.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_HANDLER_NAME = "faceoff-rich"


def configure_logging(level: str | int = "WARNING", *, console: Console | None = None) -> logging.Logger:
    """Install (or update) the rich handler on the root logger."""

    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            resolved = logging.WARNING
    else:
        resolved = level

    root = logging.getLogger()
    root.setLevel(resolved)

    for handler in root.handlers:
        if handler.get_name() == _HANDLER_NAME:
            handler.setLevel(resolved)
            return root

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s", datefmt="[%X]"))
    root.addHandler(handler)

    # Los SDKs HTTP son muy verbosos en DEBUG.
    for noisy in ("httpx", "httpcore", "openai"):
        logging.getLogger(noisy).setLevel(max(resolved, logging.WARNING))
    return root
