"""Logging setup shared by the API server and the update_prices script."""

import logging
from typing import Optional

from config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s  %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"

# Emit a line per SQL statement or quote request below WARNING.
QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "httpx", "httpcore")

# Request lines from these are kept when running at DEBUG.
QUOTE_REQUEST_LOGGERS = ("httpx",)


def setup_logging(level: Optional[str] = None) -> int:
    """Configure the root logger and quiet chatty libraries.

    Args:
        level: Level name overriding settings.LOG_LEVEL (the script's
               ``--verbose`` passes "DEBUG").

    Returns:
        The numeric level applied to the root logger.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    root_level = logging.getLevelName(level_name)
    if not isinstance(root_level, int):
        raise ValueError(f"Unknown log level {level!r}")

    logging.basicConfig(
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        level=root_level,
        force=True,
    )

    for name in QUIET_LOGGERS:
        if root_level <= logging.DEBUG and name in QUOTE_REQUEST_LOGGERS:
            logging.getLogger(name).setLevel(logging.NOTSET)
        else:
            logging.getLogger(name).setLevel(logging.WARNING)

    return root_level
