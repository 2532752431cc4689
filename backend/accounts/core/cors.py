"""CORS policy for the cookie-authenticated accounts API."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Flask
from flask_cors import CORS

from accounts.core.logger import REQUEST_ID_HEADER


def parse_origins(raw: str | Iterable[str] | None) -> list[str]:
    """Normalize ``CORS_ORIGINS`` (comma-separated string or list) to a list.

    An empty result, or ``["*"]``, means "any origin".
    """
    if raw is None:
        return []
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    return [o.strip().rstrip("/") for o in items if o and o.strip()]


def init_app(app: Flask) -> None:
    """Attach Flask-Cors to ``/api/*``.

    Browsers only send the ``accessToken``/``refreshToken`` cookies
    cross-origin when credentials are allowed, and never for a ``*`` origin.
    An explicit origin list therefore enables credentials; a wildcard leaves
    clients with bearer-header authentication only.
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    wildcard = not origins or origins == ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if wildcard else origins}},
        supports_credentials=not wildcard,
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
        methods=["GET", "POST", "PATCH", "OPTIONS"],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
