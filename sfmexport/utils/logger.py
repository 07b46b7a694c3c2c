"""Utilities for logging.

All modules share one process-wide logger. Records are stamped in UTC and tagged with the emitting file name:
    "2025-10-28 00:00:45 [io.py] INFO: message"
"""

import logging
import sys
from datetime import datetime, timezone
from logging import Logger

LOGGER_NAME = "main-logger"
LOG_FORMAT = "%(asctime)s [%(filename)s] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class UTCFormatter(logging.Formatter):
    """Formatter that renders timestamps in UTC rather than local time."""

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        if datefmt:
            return dt.strftime(datefmt)
        return dt.strftime(DATE_FORMAT)


def get_logger() -> Logger:
    """
    Get the main logger.

    The stdout handler is attached only on the first call, so repeated calls (one per importing module) do not
    duplicate output.

    Returns:
        Logger: Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(UTCFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    return logger
