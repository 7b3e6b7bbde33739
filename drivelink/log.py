"""Logging setup.

Library modules log through ``logging.getLogger(__name__)``; the CLI routes
those records to stderr through Rich.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "drivelink"


def setup_logging(debug: bool = False, console: Optional[Console] = None) -> logging.Logger:
    """Configure the package logger.

    Args:
        debug: Log at DEBUG instead of INFO
        console: Console to log to; defaults to a stderr console

    Returns:
        The package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = False

    # Calling twice (e.g. repeated CliRunner invocations) replaces the handler
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=debug,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)

    return logger
