"""Logging for autoformat.

Two sinks share the root logger:

* ``logs/autoformat.log``: one JSON object per record, rotated at 10MB with 5
  backups. Fields passed to :func:`log_with_context` (``event_type``,
  ``template``, ``status_code`` ...) become top-level keys, so template
  failures and rejected request bodies can be filtered by ``event_type``.
* stdout: plain text at the configured level, for running under uvicorn.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from pythonjsonlogger import jsonlogger

DEFAULT_LOG_DIR = Path(__file__).parent.parent / "logs"
LOG_FILE_NAME = "autoformat.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

JSON_FIELDS = "%(asctime)s %(name)s %(levelname)s %(message)s %(filename)s %(lineno)d"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# MARKDOWN logs every extension load at DEBUG; uvicorn.access duplicates the request middleware
NOISY_LOGGERS = ("MARKDOWN", "uvicorn.access", "httpx")


def _json_file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.setFormatter(jsonlogger.JsonFormatter(JSON_FIELDS, timestamp=True))
    handler.setLevel(logging.DEBUG)
    return handler


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.setLevel(level)
    return handler


def setup_logging(log_level: str = "INFO", log_dir: Path | None = None) -> logging.Logger:
    """Install the JSON file sink and the console sink on the root logger.

    Called once from ``autoformat.main`` before the app is created. Existing
    root handlers are replaced, so calling it again reconfigures cleanly.

    Args:
        log_level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            the file sink always records DEBUG and up
        log_dir: Where ``autoformat.log`` goes, defaults to ``<repo>/logs``

    Returns:
        The root logger
    """
    level = getattr(logging, log_level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(_json_file_handler(log_dir or DEFAULT_LOG_DIR))
    root_logger.addHandler(_console_handler(level))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **extra_fields: Any,
) -> None:
    """Emit ``message`` with structured fields attached.

    Every call site in autoformat passes an ``event_type`` (for example
    ``template_render_error`` or ``input_rejected``). Field names must not
    collide with LogRecord attributes such as ``message`` or ``filename``.

    Args:
        logger: Module logger from :func:`get_logger`
        level: Method name on the logger (debug, info, warning, error, critical)
        message: Human-readable message
        **extra_fields: Keys written alongside the message in the JSON sink
    """
    getattr(logger, level.lower())(message, extra=extra_fields)
