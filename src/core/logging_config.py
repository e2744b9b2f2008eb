"""Logging setup for the API process."""

import logging
import sys
from typing import Iterable

from config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that are too chatty at INFO
NOISY_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "uvicorn.access",
)


def _set_level(names: Iterable[str], level: int) -> None:
    for name in names:
        logging.getLogger(name).setLevel(level)


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure the root logger.

    Replaces any existing root handlers so repeated calls do not duplicate
    output.

    Args:
        level: Log level name, e.g. "INFO" or "DEBUG".
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(numeric_level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    _set_level(NOISY_LOGGERS, logging.WARNING)
