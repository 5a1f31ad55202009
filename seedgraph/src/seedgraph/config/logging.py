"""Logging configuration for seedgraph."""

import logging
import sys
from pathlib import Path
from typing import List, Optional
from .settings import get_settings

LOGGER_NAME = "seedgraph"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
) -> None:
    """
    Configure the ``seedgraph`` logger hierarchy.

    Records go to stdout and, when a log file is configured, to that file.
    The hierarchy does not propagate to the root logger, and calling this
    again replaces the previous handlers.

    Args:
        level: Logging level name; the configured ``log_level`` when omitted
        log_file: Optional file to log to; the configured ``log_file`` when omitted
        format_string: Optional custom format string
    """
    settings = get_settings()
    numeric_level = getattr(logging, (level or settings.log_level).upper())
    log_file = log_file or settings.log_file
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    seed_logger = logging.getLogger(LOGGER_NAME)
    seed_logger.setLevel(numeric_level)
    seed_logger.handlers.clear()
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        seed_logger.addHandler(handler)
    seed_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """
    Logger inside the ``seedgraph`` hierarchy, configuring it on first use.

    Args:
        name: Logger name (typically __name__)
    """
    if not logging.getLogger(LOGGER_NAME).handlers:
        setup_logging()

    if name == LOGGER_NAME or name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
