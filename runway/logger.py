# Runway Logging
# Routes the runway loggers through a Rich handler

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "runway"

# -q twice, -q, default, -v
_LEVELS = [logging.ERROR, logging.WARNING, logging.INFO, logging.DEBUG]


def level_for(verbosity: int) -> int:
    """
    Map a verbosity count to a log level.

    Args:
        verbosity: Number of -v flags minus number of -q flags.

    Returns:
        Logging level, INFO at zero.
    """
    index = max(0, min(len(_LEVELS) - 1, verbosity + 2))
    return _LEVELS[index]


def setup_logging(verbosity: int = 0, console: Optional[Console] = None) -> logging.Logger:
    """
    Configure the ``runway`` logger.

    Calling it again replaces the handler installed by the previous call.

    Args:
        verbosity: Number of -v flags minus number of -q flags.
        console: Rich console to log to (default: stderr).

    Returns:
        The configured logger.
    """
    level = level_for(verbosity)
    logger = logging.getLogger(LOGGER_NAME)

    for handler in list(logger.handlers):
        if getattr(handler, "_runway", False):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=level <= logging.DEBUG,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    handler._runway = True  # type: ignore[attr-defined]

    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)
    return logger
