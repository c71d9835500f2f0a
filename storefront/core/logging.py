"""Logging setup for the storefront service."""

import logging
import sys
from typing import Optional

from storefront.core.config import settings

LOGGER_NAME = "storefront"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach a stdout handler to the package logger.

    Safe to call more than once; handlers are only added the first time.
    """
    logger = logging.getLogger(LOGGER_NAME)
    level_name = (level or settings.LOG_LEVEL).upper()
    logger.setLevel(level_name)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level_name)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    return logger
