# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# logging_config.py
# -----------------------------------------------------------------------------
# Purpose:
#   Opt-in log output for the drivethru logger. The package is silent until
#   one of these helpers attaches a handler.
#
# Environment:
#   DT_LOGGING   level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
#   DT_LOG_FILE  write to this rotating file instead of stderr
#
# Usage:
#   import drivethru
#   drivethru.enable_console_logging("DEBUG")
#   drivethru.configure_from_env()
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging, os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Union

LOGGER_NAME = "drivethru"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

Level = Union[str, int]

def _get_level(level: Level) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)

def _get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)

def _attach(handler: logging.Handler, level: Level, format: str) -> logging.Handler:
    lvl = _get_level(level)
    handler.setLevel(lvl)
    handler.setFormatter(logging.Formatter(format))
    logger = _get_logger()
    logger.setLevel(lvl)
    logger.addHandler(handler)
    return handler

def enable_console_logging(level: Level = "INFO", format: str = DEFAULT_FORMAT) -> logging.Handler:
    """Log to stderr; returns the handler."""
    return _attach(logging.StreamHandler(), level, format)

def enable_file_logging(path, level: Level = "INFO", max_bytes: int = 10_000_000,
                        backup_count: int = 5, format: str = DEFAULT_FORMAT) -> logging.Handler:
    """Log to a size-rotated file, creating its directory if needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
    return _attach(handler, level, format)

def set_level(level: Level):
    """Change the level of the drivethru logger and of every attached handler."""
    lvl = _get_level(level)
    logger = _get_logger()
    logger.setLevel(lvl)
    for handler in logger.handlers:
        handler.setLevel(lvl)

def disable_logging():
    """Detach and close every real handler; the NullHandler stays."""
    logger = _get_logger()
    for handler in logger.handlers[:]:
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(logging.NOTSET)

def configure_from_env():
    """Apply DT_LOGGING / DT_LOG_FILE; does nothing when DT_LOGGING is unset."""
    level = os.environ.get("DT_LOGGING")
    if not level:
        return
    disable_logging()
    log_file = os.environ.get("DT_LOG_FILE")
    if log_file:
        enable_file_logging(log_file, level=level)
    else:
        enable_console_logging(level=level)
