"""
Logging configuration.

Modules log through `logging.getLogger(__name__)`; handlers are attached
once, here, by whichever entry point is running.
"""

import logging
from typing import Optional

from . import config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure the `sketchflow` logger to write to stderr.

    Args:
        level: Level name (DEBUG, INFO, ...); defaults to SKETCHFLOW_LOG_LEVEL

    Returns:
        The package logger
    """
    if level is None:
        level = config.LOG_LEVEL

    log_level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger("sketchflow")
    logger.setLevel(log_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)

    logger.propagate = False
    return logger
