"""
Logging utilities.

WHAT: Root logger setup for the negotiation service
WHY: Console output for operators, a detailed file log for debugging deals
HOW: Standard logging with a console and a file handler; noisy libraries
     are capped at WARNING unless DEBUG is on
"""

import logging
import sys
from pathlib import Path

from ..core.config import settings

CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(pathname)s:%(lineno)d - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Libraries that log every statement or multipart chunk at INFO/DEBUG
QUIET_LOGGERS = ("sqlalchemy.engine", "multipart", "python_multipart")


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DATE_FORMAT))
    return handler


def setup_logging():
    """
    Configure application logging.

    Safe to call more than once: existing root handlers are replaced.
    """
    log_file = Path(settings.LOG_FILE)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    root_logger.handlers.clear()

    root_logger.addHandler(_handler(logging.StreamHandler(sys.stdout), logging.INFO, CONSOLE_FORMAT))
    root_logger.addHandler(_handler(logging.FileHandler(log_file), logging.DEBUG, FILE_FORMAT))

    library_level = logging.DEBUG if settings.DEBUG else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    root_logger.info(f"Logging initialized (level={settings.LOG_LEVEL}, file={log_file})")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
