"""Logging configuration for the apportionment engine and its CLI.

Provides dual output (console + file) with configurable level via LOG_LEVEL env var.
Default: INFO. Set LOG_LEVEL=DEBUG to see every intermediate value of a calculation.
"""

import logging
import os
import sys
from pathlib import Path
from typing import TextIO

# Map string level names to logging constants
LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level() -> int:
    """Get logging level from LOG_LEVEL environment variable.

    Returns:
        Logging level constant (default: INFO)
    """
    level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    return LOG_LEVEL_MAP.get(level_str, logging.INFO)


def setup_logging(log_file: str = "logs/condosplit.log", stream: TextIO | None = None) -> logging.Logger:
    """
    Configure the condosplit logger hierarchy.

    Args:
        log_file: Path to log file (default: logs/condosplit.log)
        stream: Console stream (default: sys.stdout)

    Returns:
        The "condosplit" package logger

    Behavior:
        - Sets up package loggers to output to both the console stream and file
        - ISO format timestamps for consistency
        - Existing handlers are replaced so repeated calls do not duplicate output
    """
    # Create logs directory if it doesn't exist
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # ISO format: [YYYY-MM-DD HH:MM:SS]
    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    log_level = get_log_level()

    logger = logging.getLogger("condosplit")
    logger.setLevel(log_level)

    # Remove any existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    # Handler 1: console (stdout unless a stream is given)
    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Handler 2: file
    file_handler = logging.FileHandler(log_path)
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger
