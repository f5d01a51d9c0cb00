"""Logging setup for the unlit baker.

stdout carries the JSON result, so every handler installed here writes to
stderr or to the optional log file.
"""

import logging
import logging.handlers
import os
import sys

LOGGER_NAME = "unlit_baker"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# 10 MB max per log file, keep 3 rotated backups
_LOG_MAX_BYTES = 10 * 1024 * 1024
_LOG_BACKUP_COUNT = 3


def _resolve_level(level: str) -> int:
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        logging.getLogger(LOGGER_NAME).warning(
            "Invalid log level '%s', defaulting to INFO", level,
        )
        return logging.INFO
    return numeric_level


def _file_handler(log_file: str) -> logging.Handler:
    os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=_LOG_MAX_BYTES, backupCount=_LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def setup_logging(level: str = "INFO", log_file: str = None, force: bool = False):
    """Route baker diagnostics to stderr and, optionally, a rotating file.

    When the host application already configured the root logger (and
    `force` is False), only the ``unlit_baker`` hierarchy is touched.
    """
    numeric_level = _resolve_level(level)
    root = logging.getLogger()

    if force or not root.handlers:
        handlers = [logging.StreamHandler(sys.stderr)]
        if log_file:
            handlers.append(_file_handler(log_file))
        logging.basicConfig(
            level=numeric_level, format=LOG_FORMAT, handlers=handlers, force=force,
        )
        return

    baker_logger = logging.getLogger(LOGGER_NAME)
    baker_logger.setLevel(numeric_level)
    if not log_file:
        return
    target = os.path.abspath(log_file)
    for handler in baker_logger.handlers:
        if getattr(handler, "baseFilename", None) == target:
            return
    baker_logger.addHandler(_file_handler(log_file))
    baker_logger.info("Logging to %s", target)
