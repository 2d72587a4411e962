"""Logging setup with a per-request correlation id.

Every record emitted while a quote request is being handled carries the
request id bound through :func:`set_request_id`, so one submission can be
followed from validation through SMTP delivery::

    set_request_id("1a2b3c4d")
    logger.info("Connecting to SMTP server")  # -> [1a2b3c4d] Connecting ...
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

NO_REQUEST_ID = "-"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"

_request_id: ContextVar[str] = ContextVar("request_id", default=NO_REQUEST_ID)


def set_request_id(request_id: str) -> None:
    """Bind the request id to the current context."""
    _request_id.set(request_id)


def get_request_id() -> str:
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Injects ``request_id`` into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Install console (and optional daily file) handlers on the root logger.

    Calling it again replaces the handlers it installed earlier instead of
    stacking duplicates.
    """

    root = logging.getLogger()
    root.setLevel(level.upper())

    for handler in list(root.handlers):
        if getattr(handler, "_quote_service", False):
            root.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            TimedRotatingFileHandler(log_file, when="midnight", backupCount=14, encoding="utf-8")
        )

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(RequestIdFilter())
        handler._quote_service = True  # type: ignore[attr-defined]
        root.addHandler(handler)


__all__ = [
    "configure_logging",
    "get_request_id",
    "set_request_id",
    "RequestIdFilter",
    "NO_REQUEST_ID",
]
