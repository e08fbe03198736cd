"""
Logging configuration.

Every module logs through ``logging.getLogger(__name__)``; this module attaches
a single stream handler to the application loggers at startup.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-17
"""

import logging
import os

APP_LOGGERS = ("main", "database", "server", "logic", "scripts")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = None) -> logging.Logger:
    """Configure the application loggers.

    Args:
        level: Log level name. Defaults to the LOG_LEVEL environment variable,
            then INFO.

    Returns:
        The ``logic`` logger, ready for use.
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    for name in APP_LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(level)

        # uvicorn --reload re-imports main; only attach once
        if not logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(formatter)
            handler.setLevel(level)
            logger.addHandler(handler)

    return logging.getLogger("logic")
