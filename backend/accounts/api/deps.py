"""Shared API helpers: auth gate, upload staging, service wiring and timing."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar, cast
from uuid import uuid4

from flask import Response, current_app, g, jsonify, request
from werkzeug.utils import secure_filename

from accounts.core.extensions import get_object_store, get_password_hasher, get_token_provider
from accounts.services._shared.base import ServiceContext
from accounts.services._shared.ports import LocalFile
from accounts.services.auth import AuthService
from accounts.services.identity import IdentityService, UserPublicOut
from accounts.services.registration import UserRegistrationService

F = TypeVar("F", bound=Callable[..., Any])


# ------------------------------ Service wiring ------------------------------


def service_context() -> ServiceContext:
    """Build the request-scoped context handed to services."""
    user = getattr(g, "current_user", None)
    return ServiceContext(
        actor_id=user.id if user is not None else None,
        request_id=getattr(g, "request_id", None),
    )


def auth_service() -> AuthService:
    return AuthService(
        token_provider=get_token_provider(),
        password_hasher=get_password_hasher(),
        ctx=service_context(),
    )


def registration_service() -> UserRegistrationService:
    return UserRegistrationService(
        password_hasher=get_password_hasher(),
        object_store=get_object_store(),
        ctx=service_context(),
    )


def identity_service() -> IdentityService:
    return IdentityService(
        password_hasher=get_password_hasher(),
        object_store=get_object_store(),
        revoke_sessions_on_password_change=bool(
            current_app.config.get("REVOKE_SESSIONS_ON_PASSWORD_CHANGE", True)
        ),
        ctx=service_context(),
    )


# ------------------------------ Authentication ------------------------------


def access_token_from_request() -> str | None:
    """Return the bearer token from ``Authorization``, else the access cookie."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    cookie_name = current_app.config.get("JWT_ACCESS_COOKIE_NAME", "accessToken")
    return request.cookies.get(cookie_name) or None


def require_auth(func: F) -> F:
    """Resolve the access token to a user and expose it as ``g.current_user``.

    Raises the service's ``UnauthorizedError`` (rendered as 401) when the
    token is missing, invalid or expired, or its user no longer exists.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        g.current_user = auth_service().authenticate(access_token_from_request())
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_user() -> UserPublicOut:
    """Return the user resolved by :func:`require_auth`."""
    return cast(UserPublicOut, g.current_user)


# ------------------------------ Upload staging ------------------------------


@contextmanager
def staged_uploads(*field_names: str) -> Iterator[dict[str, LocalFile | None]]:
    """Save the named multipart files to ``UPLOAD_TEMP_DIR`` for the block's duration.

    Fields without a file map to ``None``. Staged files are deleted on every
    exit path, successful or not.
    """
    temp_dir = Path(current_app.config.get("UPLOAD_TEMP_DIR", "./public/temp"))
    staged: dict[str, LocalFile | None] = {}
    try:
        for name in field_names:
            storage = request.files.get(name)
            if storage is None or not storage.filename:
                staged[name] = None
                continue
            temp_dir.mkdir(parents=True, exist_ok=True)
            filename = secure_filename(storage.filename) or "upload"
            path = temp_dir / f"{uuid4().hex}-{filename}"
            storage.save(path)
            staged[name] = LocalFile(path=path, filename=filename, content_type=storage.mimetype)
        yield staged
    finally:
        for local in staged.values():
            if local is not None:
                local.path.unlink(missing_ok=True)


# ------------------------------ Responses ------------------------------


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
