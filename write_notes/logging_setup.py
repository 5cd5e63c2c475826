from __future__ import annotations

import asyncio
import logging
import sys
import uuid
from logging.handlers import RotatingFileHandler
from pathlib import Path

from write_notes.settings import APP_NAME, LOG_PATH

SESSION_ID = uuid.uuid4().hex[:8]

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s | sid=%(session)s"
LOG_MAX_BYTES = 2 * 1024 * 1024
LOG_BACKUPS = 5


class EnsureSessionFilter(logging.Filter):
    """Records logged outside SessionAdapter still carry a session id."""
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "session"):
            record.session = SESSION_ID
        return True


class SessionAdapter(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        kwargs.setdefault("extra", {}).setdefault("session", SESSION_ID)
        return msg, kwargs


def _attach(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(EnsureSessionFilter())
    logger.addHandler(handler)


def setup_logging(log_path: Path = LOG_PATH, *, console: bool = True) -> SessionAdapter:
    """
    Send the app logger to a rotating file (DEBUG) and, optionally, stdout (INFO).
    Safe to call twice: handlers are only added once.
    """
    logger = logging.getLogger(APP_NAME)
    if logger.handlers:
        return SessionAdapter(logger, {})

    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    log_path = Path(log_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    _attach(
        logger,
        RotatingFileHandler(log_path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"),
        logging.DEBUG,
    )
    if console:
        _attach(logger, logging.StreamHandler(sys.stdout or sys.stderr), logging.INFO)

    logger.info("Logging initialized. log_file=%s", log_path)
    return SessionAdapter(logger, {})


def install_global_exception_hooks(log: logging.LoggerAdapter) -> None:
    """Uncaught exceptions go to the log before the default hook prints them."""
    def _excepthook(exc_type, exc, tb):
        log.critical("Uncaught exception", exc_info=(exc_type, exc, tb))
        sys.__excepthook__(exc_type, exc, tb)

    sys.excepthook = _excepthook


def install_loop_exception_handler(log: logging.LoggerAdapter, loop: asyncio.AbstractEventLoop | None = None) -> None:
    """Errors from tasks nobody awaits (autosave, callbacks) are logged instead of printed."""
    loop = loop or asyncio.get_running_loop()

    def _handler(loop, context):
        exc = context.get("exception")
        message = context.get("message", "Unhandled error in event loop")
        if exc is not None:
            log.error("Event loop: %s", message, exc_info=(type(exc), exc, exc.__traceback__))
        else:
            log.error("Event loop: %s", message)

    loop.set_exception_handler(_handler)
