"""Logging configuration for gamestats."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from gamestats.config.paths import get_data_dir

# Module-level logger
_logger: Optional[logging.Logger] = None

# Constants
LOGGER_NAME = "gamestats"
LOG_FILENAME = "gamestats.log"
MAX_BYTES = 5 * 1024 * 1024  # 5MB
BACKUP_COUNT = 3
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_log_path() -> Path:
    """Get the path to the log file."""
    return get_data_dir() / LOG_FILENAME


def setup_logging(console: bool = True, level: int = logging.INFO) -> logging.Logger:
    """
    Configure and return the application logger.

    Args:
        console: If True, also log to stderr (stdout stays clean for JSON output)
        level: Log level for the logger and its handlers

    Returns:
        Configured logger instance
    """
    global _logger

    if _logger is not None:
        return _logger

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Prevent duplicate handlers if called multiple times
    if logger.handlers:
        _logger = logger
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # File handler with rotation
    try:
        log_path = get_log_path()
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError as e:
        # If we can't create log file, continue without file logging
        print(f"Warning: Could not create log file: {e}")

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """
    Get the application logger.

    If logging hasn't been set up yet, sets up with defaults.
    """
    global _logger
    if _logger is None:
        return setup_logging()
    return _logger
