"""JSON logging for the accounts API.

Every record carries the request correlation id and, once the auth gate has
run, the id of the authenticated user. Credential-bearing extras (passwords,
tokens) are masked before a record is rendered.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# Attributes passed through ``extra=`` that end up in the JSON payload
EXTRA_KEYS = ("endpoint", "elapsed_ms", "user_id", "reason", "method", "path", "status")

REDACTED = "***"
SENSITIVE_MARKERS = ("password", "token", "secret", "authorization", "cookie")


def is_sensitive(key: str) -> bool:
    """Return ``True`` when a field name looks like it holds a credential."""
    lowered = key.lower()
    return any(marker in lowered for marker in SENSITIVE_MARKERS)


class JSONFormatter(logging.Formatter):
    """One JSON object per record; sensitive extras are masked."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key in EXTRA_KEYS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        fields = getattr(record, "fields", None)
        if isinstance(fields, dict):
            payload["fields"] = {
                k: (REDACTED if is_sensitive(k) else v) for k, v in fields.items()
            }
        return json.dumps(payload, default=str)


class RequestContextFilter(logging.Filter):
    """Stamp ``request_id`` and the authenticated ``user_id`` on each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not has_request_context():
            record.request_id = getattr(record, "request_id", None)
            return True
        record.request_id = ensure_request_id()
        if not hasattr(record, "user_id"):
            user = g.get("current_user")
            record.user_id = getattr(user, "id", None)
        return True


def ensure_request_id() -> str:
    """Return the request's correlation id, adopting an inbound header if present."""

    if not has_request_context():
        return str(uuid4())
    if "request_id" not in g:
        inbound = next(
            (request.headers[h] for h in CORRELATION_HEADERS if request.headers.get(h)),
            None,
        )
        g.request_id = inbound or str(uuid4())
    return str(g.request_id)


def configure_logging(level: str | int = "INFO") -> None:
    """Route the root logger to stdout as JSON at ``level``."""

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestContextFilter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else logging.INFO
    root.setLevel(level)


def init_app(app: Flask) -> None:
    """Seed the correlation id, echo it back and emit one access line per request."""

    app.logger.addFilter(RequestContextFilter())
    access_log = logging.getLogger("accounts.access")

    @app.before_request
    def _start_request() -> None:
        ensure_request_id()
        g.request_started = time.perf_counter()

    @app.after_request
    def _finish_request(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        started = g.get("request_started")
        access_log.info(
            "request.completed",
            extra={
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "elapsed_ms": round((time.perf_counter() - started) * 1000, 2) if started else None,
            },
        )
        return response


__all__ = [
    "JSONFormatter",
    "RequestContextFilter",
    "configure_logging",
    "ensure_request_id",
    "init_app",
    "is_sensitive",
]
