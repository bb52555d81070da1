"""
Logging setup shared by every stage of the analysis.

Console output is color-coded with colorlog; a plain-text file handler is
added when a log directory or file is given.
"""

import logging
import os
import sys
from typing import Optional, Union

import colorlog


def create_logger(
    name: Optional[str] = None,
    log_level: Union[int, str] = logging.INFO,
    log_dir: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Create a color-coded logger with optional file logging.

    :param name: Name of the logger (typically __name__)
    :param log_level: Logging level (default: logging.INFO)
    :param log_dir: Directory to store log files (optional)
    :param log_file: Specific log file name (optional)
    :return: Configured logger instance
    """
    logger = colorlog.getLogger(name or "pop_covid")
    logger.setLevel(log_level)
    logger.propagate = False

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = colorlog.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        colorlog.ColoredFormatter(
            "%(log_color)s[%(levelname)s]%(reset)s "
            "%(blue)s[%(name)s]%(reset)s "
            "%(message)s",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )
    )
    logger.addHandler(console_handler)

    if log_dir or log_file:
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        if not log_file:
            log_file = f"{name or 'pop_covid'}.log"
        if log_dir:
            log_file = os.path.join(log_dir, log_file)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


def log_exception(logger: logging.Logger, e: BaseException, context: Optional[str] = None) -> None:
    """Log an unexpected exception with its type and optional context."""
    logger.critical(f"Error Type: {type(e).__name__}")
    logger.critical(f"Error Details: {e}")
    if context:
        logger.critical(f"Context: {context}")
