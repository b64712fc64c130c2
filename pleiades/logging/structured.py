"""Structured logging for PLEIADES client calls.

The client is a library: it logs to the ``pleiades.client`` logger and
emits nothing until the application attaches handlers, either its own or
through setup_logging(). Entries describe the call (method, URL, status,
latency), never credentials or tokens.
"""

import json
import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone

from pleiades.config.settings import Settings, get_settings

LOGGER_NAME = "pleiades.client"

# Id of the client call in progress, "" outside a call
call_id_var: ContextVar[str] = ContextVar("pleiades_call_id", default="")

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


class JSONFormatter(logging.Formatter):
    """One JSON object per line. Fields passed as ``extra={"call": {...}}`` nest under "call"."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        call_id = call_id_var.get()
        if call_id:
            entry["call_id"] = call_id
        call = getattr(record, "call", None)
        if call:
            entry["call"] = call
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(settings: Settings | None = None) -> logging.Logger:
    """Write client log entries as JSON to PLEIADES_LOG_FILE, or stderr when unset."""
    settings = settings or get_settings()

    logger = get_logger()
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    if settings.log_file:
        handler = logging.FileHandler(settings.log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


@contextmanager
def call_scope() -> Iterator[str]:
    """Tag the log entries of one client call with a fresh id.

    The caller's previous value is restored on exit, so log lines of the
    host application never inherit the id.
    """
    token = call_id_var.set(uuid.uuid4().hex[:12])
    try:
        yield call_id_var.get()
    finally:
        call_id_var.reset(token)
