"""
FILE: wetodo/observability.py
PURPOSE: Logging setup for the CLI and REPL
EXPORTS:
  - setup_logging(level) -> None
DEPENDENCIES:
  - logging (stdlib)
  - rich.logging (RichHandler, renders records on stderr)
NOTES:
  - Library modules only create loggers (logging.getLogger(__name__))
  - setup_logging is called once by the CLI root callback
  - Safe to call again: the previous handler is replaced, not stacked
"""

import logging

from rich.console import Console
from rich.logging import RichHandler


_handler = None


def setup_logging(level: str = "WARNING") -> None:
    """Route wetodo log records to stderr through Rich."""
    global _handler

    logger = logging.getLogger("wetodo")
    if _handler is not None:
        logger.removeHandler(_handler)

    _handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        show_time=False,
        markup=False,
    )
    _handler.setFormatter(logging.Formatter("%(message)s"))

    logger.addHandler(_handler)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
