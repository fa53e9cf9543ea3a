"""Logging configuration for KeyLeaks."""

import logging
import sys
from typing import Optional


def get_logger(name: str = "keyleaks", level: Optional[str] = None) -> logging.Logger:
    """
    Get a configured logger instance.

    Output goes to stderr so machine-readable results on stdout stay clean.
    Calling again with a level adjusts an already configured logger.

    Args:
        name: Logger name (usually the package name or __name__)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    log_level = getattr(logging, level.upper() if level else "WARNING")

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)

        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)

        logger.addHandler(handler)

    logger.setLevel(log_level)
    for handler in logger.handlers:
        handler.setLevel(log_level)

    return logger
