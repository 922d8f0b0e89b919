"""Loguru setup for todobar.

Diagnostics go to stderr; TODOBAR_LOG_FILE adds a DEBUG file sink, which is
the practical way to watch the app while curses owns the screen.
"""

import os
import sys
from typing import Optional

from loguru import logger

from .models import DEFAULT_LOG_LEVEL, LOG_FILE_ENV, LOG_LEVEL_ENV


def configure_logging(level: Optional[str] = None, logfile: Optional[str] = None):
    """Replace loguru's default sink with the todobar sinks."""
    level = (level or os.environ.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper()
    logfile = logfile or os.environ.get(LOG_FILE_ENV)

    logger.remove()
    logger.add(sys.stderr, level=level, format="todobar: {level}: {message}")
    if logfile:
        logger.add(
            logfile,
            level="DEBUG",
            rotation="1 MB",
            retention=3,
            enqueue=True,
        )
    return logger
