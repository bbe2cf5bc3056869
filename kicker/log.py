"""Logging setup for the command line entry point."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str = "INFO", console: Console | None = None) -> None:
    """Configure the root logger with a rich handler on stderr.

    Existing handlers are removed first so repeated calls (tests, nested
    CLI invocations) do not duplicate output.

    Args:
        level: Logging level name.
        console: Console to log to; defaults to a stderr console.
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


__all__ = ["setup_logging"]
