"""Logging setup for the command-line interface.

Standard logging hierarchy: DEBUG < INFO < WARNING < ERROR.
Records go to stderr through rich so they never interleave with replies.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

LOG_TIMESTAMP_FORMAT = "%H:%M:%S"


def configure_logging(level: str = "warning") -> None:
    """Route `deepchat` loggers through a RichHandler on stderr.

    Args:
        level: One of debug, info, warning, error (case-insensitive)

    Raises:
        ValueError: If the level name is unknown
    """
    try:
        numeric = LOG_LEVELS[level.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown log level: {level}. Choose from: {', '.join(LOG_LEVELS)}"
        ) from None

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        log_time_format=LOG_TIMESTAMP_FORMAT,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    logger = logging.getLogger("deepchat")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(numeric)
    logger.propagate = False

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(numeric, logging.WARNING))
