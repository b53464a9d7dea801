"""Application logging configuration."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any
from uuid import uuid4

from flask import g, has_request_context, request

_CONTEXT_FIELDS = ("request_id", "path", "method", "user_id")


class RequestContextFilter(logging.Filter):
    """Stamp each record with the active request's id, route and caller."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_id = getattr(g, "request_id", "n/a")
            record.path = request.path
            record.method = request.method
            record.user_id = getattr(g, "log_user_id", None)
        else:
            record.request_id = "-"
            record.path = "-"
            record.method = "-"
            record.user_id = None
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base: dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
        }
        for field in _CONTEXT_FIELDS:
            base[field] = getattr(record, field, "-")
        extra = getattr(record, "event", None)
        if isinstance(extra, dict):
            base["event"] = extra
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False, default=str)


# Third-party loggers that log every HTTP call at INFO.
_QUIET_LOGGERS = ("stripe", "urllib3")


def configure_logging(app) -> None:
    """Send every record to stdout as one JSON object per line."""

    level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    handler.addFilter(RequestContextFilter())
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root.level))
    app.logger.handlers.clear()
    app.logger.propagate = True


def assign_request_id() -> str:
    req_id = request.headers.get("X-Request-ID") if has_request_context() else None
    if not req_id:
        req_id = uuid4().hex
    g.request_id = req_id
    return req_id


def bind_user(user_id: int | None) -> None:
    """Attach the authenticated user id to log records for this request."""

    if has_request_context():
        g.log_user_id = user_id
