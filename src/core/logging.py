"""
CrimeWatch Triage - Logging Configuration
Centralized logging setup for the application.
"""

import logging
import sys
from typing import Optional
from functools import lru_cache

from src.core.config import settings

# Parent of every module logger (`logging.getLogger(__name__)` under src/)
APP_LOGGER = "src"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"

# Third-party loggers that only report at WARNING and above
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def setup_logging(
    level: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Configure console logging for the application.

    Args:
        level: Log level name; DEBUG when settings.debug is on, else settings.log_level
        format_string: Custom format string for log messages

    Returns:
        The application package logger
    """
    log_level = getattr(logging, (level or ("DEBUG" if settings.debug else settings.log_level)).upper())

    logging.basicConfig(
        level=log_level,
        format=format_string or LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    app_logger = logging.getLogger(APP_LOGGER)
    app_logger.setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return app_logger


@lru_cache()
def get_logger(name: str = APP_LOGGER) -> logging.Logger:
    """Get a logger under the application package."""
    return logging.getLogger(name)
