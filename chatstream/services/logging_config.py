"""Logging setup for the stream client and its watcher.

Everything logs under the "ChatStream" logger. A rotating file keeps the
full debug trail of connection attempts; the console shows INFO unless the
watcher runs verbose or CHATSTREAM_LOG_LEVEL says otherwise.
"""

import logging
import logging.handlers
import os
from typing import Optional

from .. import config

ROOT_LOGGER_NAME = "ChatStream"
LOG_LEVEL_ENV = "CHATSTREAM_LOG_LEVEL"

FILE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s.%(funcName)s:%(lineno)d | %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'


def _console_level(verbose: bool) -> int:
    if verbose:
        return logging.DEBUG
    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    level = logging.getLevelName(level_name)
    return level if isinstance(level, int) else logging.INFO


def _file_handler(log_dir: str) -> logging.Handler:
    os.makedirs(log_dir, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, config.LOG_FILE_NAME),
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUP_COUNT,
        encoding='utf-8'
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    return handler


def _console_handler(verbose: bool) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(_console_level(verbose))
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def setup_logging(log_dir: Optional[str] = None, verbose: bool = False) -> logging.Logger:
    """
    Attach file and console handlers to the ChatStream logger.

    Calling it again is a no-op while handlers are attached.

    Args:
        log_dir: Directory for the rotating log file (created if missing).
            Defaults to the current directory.
        verbose: Show debug output on the console.

    Returns:
        The ChatStream logger.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if logger.handlers:
        return logger

    log_dir = log_dir or os.getcwd()
    logger.setLevel(logging.DEBUG)
    logger.addHandler(_file_handler(log_dir))
    logger.addHandler(_console_handler(verbose))

    logger.debug(f"Logging to {os.path.join(log_dir, config.LOG_FILE_NAME)}")
    return logger


def reset_logging() -> None:
    """Close and detach every ChatStream handler."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger for one component, e.g. get_logger("stream") -> ChatStream.stream."""
    if name:
        return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
    return logging.getLogger(ROOT_LOGGER_NAME)
