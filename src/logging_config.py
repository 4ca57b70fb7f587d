"""
Logging configuration.

Sets up the logger for the ``src`` namespace; library modules obtain child
loggers with ``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging
import sys

LOGGER_NAMESPACE = "src"


def setup_logging(level: int = logging.INFO, log_file: str | None = None) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO).
        log_file: Optional path to also write logs to.

    Returns:
        The configured namespace logger.
    """
    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.setLevel(level)
    logger.propagate = False

    # Avoid duplicate handlers when called more than once in a process
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
    return logger
