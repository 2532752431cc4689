"""RFC 7807 problem responses for every failure the API can surface.

Service-layer errors, werkzeug HTTP errors, marshmallow validation errors
and database errors all leave the API as ``application/problem+json`` with
a stable ``code`` and the request's correlation id.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, has_request_context, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from accounts.core.logger import ensure_request_id

log = logging.getLogger(__name__)

STATUS_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    413: "payload_too_large",
    415: "unsupported_media_type",
    422: "unprocessable_entity",
    429: "too_many_requests",
    500: "internal_server_error",
    502: "bad_gateway",
    503: "service_unavailable",
}


def problem(
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build a Problem Details body.

    :param status: HTTP status code.
    :param code: Stable machine-readable error code.
    :param message: Client-safe summary, sent as ``detail``.
    :param details: Optional structured extras.
    :returns: Problem+JSON dictionary.
    :rtype: dict
    """
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(int(status)).phrase,
        "status": int(status),
        "detail": message,
        "instance": request.path if has_request_context() else None,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details
    return body


def _respond(body: dict[str, Any], *, exc_info: bool = False) -> tuple[Response, int]:
    status = int(body["status"])
    level = logging.ERROR if status >= 500 else logging.WARNING
    log.log(
        level,
        "api.error code=%s status=%s detail=%s",
        body["code"],
        status,
        body["detail"],
        exc_info=exc_info,
    )
    resp = jsonify(body)
    resp.mimetype = "application/problem+json"
    return resp, status


class APIError(Exception):
    """
    An error that renders itself as a problem response.

    Parameters
    ----------
    message : str
        Client-safe description.
    status_code : int, optional
        HTTP status. Subclasses fix it; defaults to ``400``.
    code : str, optional
        Stable error code. Defaults to the code of ``status_code``.
    details : dict[str, Any] | None, optional
        Structured payload included as ``details``.
    """

    status_code: int = HTTPStatus.BAD_REQUEST
    code: str | None = None

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code or type(self).status_code)
        self.code = code or type(self).code or STATUS_CODES.get(self.status_code, "error")
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        return problem(self.status_code, self.code, self.message, self.details or None)


class BadRequest(APIError):
    """400: missing or blank input, wrong old password, nothing to update."""

    status_code = HTTPStatus.BAD_REQUEST

    def __init__(self, message: str = "Bad request") -> None:
        super().__init__(message)


class Unauthorized(APIError):
    """401: bad credentials, or a missing, invalid, expired or replayed token."""

    status_code = HTTPStatus.UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class NotFound(APIError):
    """404: the account does not exist."""

    status_code = HTTPStatus.NOT_FOUND

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message)


class Conflict(APIError):
    """409: username or email already taken."""

    status_code = HTTPStatus.CONFLICT

    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message)


class UploadFailed(APIError):
    """502: the media host did not accept an upload."""

    status_code = HTTPStatus.BAD_GATEWAY
    code = "upload_failed"

    def __init__(self, message: str = "Upload failed") -> None:
        super().__init__(message)


class InternalError(APIError):
    """500: a consistency failure detected by the services."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Internal error") -> None:
        super().__init__(message)


def init_app(app: Flask) -> None:
    """
    Register the problem handlers on ``app``.

    Service errors are mapped through
    :meth:`accounts.services._shared.base.BaseService.translate_exceptions`.
    Database and unexpected errors never leak driver messages to clients.
    """
    from accounts.services._shared.base import BaseService
    from accounts.services._shared.errors import ServiceError

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        return _respond(err.to_problem(), exc_info=err.status_code >= 500)

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        return handle_api_error(BaseService.translate_exceptions(err))

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = STATUS_CODES.get(status, "error")
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        else:
            message = (err.description or code.replace("_", " ").capitalize()).strip()
        return _respond(problem(status, code, message))

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        if isinstance(err.data, dict):
            # Input values pass through the formatter's credential masking
            log.info("api.validation_failed", extra={"fields": err.data})
        body = problem(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            "validation_error",
            "Validation failed",
            {"errors": err.messages},
        )
        return _respond(body)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        return _respond(
            problem(HTTPStatus.CONFLICT, "conflict", "Resource conflict"), exc_info=True
        )

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        body = problem(
            HTTPStatus.SERVICE_UNAVAILABLE,
            "service_unavailable",
            "Service temporarily unavailable",
        )
        return _respond(body, exc_info=True)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        body = problem(
            HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error"
        )
        return _respond(body, exc_info=True)
