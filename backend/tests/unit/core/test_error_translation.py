"""Service errors map onto HTTP problem types."""

from __future__ import annotations

import pytest
from accounts.core import errors as api_errors
from accounts.services._shared.base import BaseService
from accounts.services._shared.errors import (
    BadRequestError,
    ConflictError,
    InternalError,
    NotFoundError,
    ServiceError,
    UnauthorizedError,
    UploadFailedError,
)


@pytest.mark.parametrize(
    ("exc", "status", "code"),
    [
        (BadRequestError("x"), 400, "bad_request"),
        (UnauthorizedError("x"), 401, "unauthorized"),
        (NotFoundError("User", 1), 404, "not_found"),
        (ConflictError("User", "taken"), 409, "conflict"),
        (UploadFailedError("x"), 502, "upload_failed"),
        (InternalError("x"), 500, "internal_server_error"),
        (ServiceError("x"), 400, "bad_request"),
    ],
)
def test_translate_exceptions(exc, status, code):
    translated = BaseService.translate_exceptions(exc)

    assert isinstance(translated, api_errors.APIError)
    assert translated.status_code == status
    assert translated.code == code


def test_non_service_errors_pass_through():
    err = KeyError("x")

    assert BaseService.translate_exceptions(err) is err


def test_error_messages():
    assert str(NotFoundError("User", 3)) == "User not found: 3"
    assert str(ConflictError("User", "email already in use")) == "Conflict on User: email already in use"
