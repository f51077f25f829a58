"""
Logging Utilities

This module sets up logging for the project and includes helpers to
re-level the package loggers from configuration and to time pipeline stages.
"""

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER_PREFIX = "scanner_registration"

CONSOLE_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
FILE_FORMAT = '%(asctime)s | %(levelname)s | %(processName)s[%(process)d] | %(name)s | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown logging level: {level}")
        return resolved
    return int(level)


def setup_logger(name: str,
                 level: Union[int, str] = logging.INFO,
                 log_file: Optional[str] = None) -> logging.Logger:
    """
    Set up a logger with consistent formatting.

    Args:
        name: Logger name (usually __name__)
        level: Logging level, either a logging constant or a name such as "DEBUG"
        log_file: Optional log file path. If provided, logs will be written to this file

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid adding multiple handlers
    if logger.handlers:
        return logger

    numeric_level = _coerce_level(level)
    logger.setLevel(numeric_level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        _attach_file_handler(logger, log_file, numeric_level)

    return logger


def _attach_file_handler(logger: logging.Logger, log_file: str, level: int) -> None:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == log_path.resolve():
            return

    file_handler = logging.FileHandler(log_path)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(file_handler)


def set_log_level(level: Union[int, str], log_file: Optional[str] = None) -> int:
    """
    Apply a logging level (and optional log file) to every package logger.

    Module loggers are created at import time with the default level, so the
    workflow calls this after loading its configuration.

    Returns:
        The numeric level that was applied
    """
    numeric_level = _coerce_level(level)
    for name, logger in list(logging.Logger.manager.loggerDict.items()):
        if not isinstance(logger, logging.Logger):
            continue
        if not (name == PACKAGE_LOGGER_PREFIX or name.startswith(PACKAGE_LOGGER_PREFIX + ".")):
            continue
        logger.setLevel(numeric_level)
        for handler in logger.handlers:
            handler.setLevel(numeric_level)
        if log_file and logger.handlers:
            _attach_file_handler(logger, log_file, numeric_level)
    return numeric_level


@contextmanager
def log_duration(logger: logging.Logger, label: str, level: int = logging.INFO):
    """Log how long the wrapped block took."""
    start = time.time()
    try:
        yield
    finally:
        logger.log(level, f"{label} finished in {time.time() - start:.3f}s")
