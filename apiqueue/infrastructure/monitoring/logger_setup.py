"""Logging configuration for the apiqueue CLI.

Queue internals log through module loggers only; this module decides where
those records go. Level, format and optional log file come from the
``logging.*`` settings, and a level given on the command line wins.
"""

import logging
import sys
from typing import Optional

from apiqueue.infrastructure.config.settings import get_config

DEFAULT_LOG_LEVEL = logging.WARNING
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def level_from_name(name: Optional[str]) -> int:
    """Maps a level name such as 'debug' to its logging constant, defaulting to WARNING."""
    if name is None:
        return DEFAULT_LOG_LEVEL
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else DEFAULT_LOG_LEVEL


def setup_logging(
    log_level: int = DEFAULT_LOG_LEVEL,
    log_format: str = DEFAULT_LOG_FORMAT,
    log_file: Optional[str] = None,
) -> None:
    """Replaces the root logger's handlers with a stderr handler and an optional file handler.

    Records go to stderr so they never mix with command output on stdout.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(log_format)
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file, encoding='utf-8'))
        except OSError as e:
            logging.getLogger(__name__).error("Cannot write queue log to %s: %s", log_file, e)

    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logging.getLogger(__name__).debug(
        "Queue logging at %s%s",
        logging.getLevelName(log_level),
        f", mirrored to {log_file}" if len(handlers) > 1 else "",
    )


def configure_logging(log_level: Optional[str] = None) -> int:
    """Sets up logging from the loaded settings.

    Args:
        log_level: Level name from the command line; overrides ``logging.level``.

    Returns:
        The effective logging level.
    """
    level = level_from_name(log_level or get_config('logging.level'))
    setup_logging(
        log_level=level,
        log_format=get_config('logging.format', DEFAULT_LOG_FORMAT),
        log_file=get_config('logging.file'),
    )
    return level
