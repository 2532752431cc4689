# accounts/services/_shared/base.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from accounts.core import errors as api_errors
from accounts.services._shared.errors import (
    BadRequestError,
    ConflictError,
    InternalError,
    NotFoundError,
    ServiceError,
    UnauthorizedError,
    UploadFailedError,
)
from accounts.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data.

    :param actor_id: Authenticated user identifier.
    :param request_id: Correlation id for logging/tracing.
    """

    actor_id: int | None = None
    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Centralize error translation.
    * Keep services orchestration-only, no web/ORM leakage.

    Notes
    -----
    Services never touch the global session directly; they always go through
    a Unit of Work.
    """

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        """
        Initialize the base service.

        :param ctx: Optional request-scoped context.
        :type ctx: ServiceContext | None
        """
        self.ctx = ctx or ServiceContext()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(self, *, enforce_db_readonly: bool = True) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :type enforce_db_readonly: bool
        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(enforce_db_readonly=enforce_db_readonly)

    # -------------------------- Logging -------------------------------------

    def log_extra(self, **fields: Any) -> dict[str, Any]:
        """
        Build a logging ``extra`` mapping stamped with the service context.

        ``user_id`` defaults to the acting user, and the context's
        ``request_id`` is carried for work logged outside a Flask request.

        :returns: Mapping for the ``extra=`` argument of logger calls.
        :rtype: dict[str, Any]
        """
        fields.setdefault("user_id", self.ctx.actor_id)
        if self.ctx.request_id is not None:
            fields.setdefault("request_id", self.ctx.request_id)
        return fields

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, BadRequestError):
            return api_errors.BadRequest(str(exc))

        if isinstance(exc, UnauthorizedError):
            return api_errors.Unauthorized(str(exc))

        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            return api_errors.Conflict(str(exc))

        if isinstance(exc, UploadFailedError):
            return api_errors.UploadFailed(str(exc))

        if isinstance(exc, InternalError):
            return api_errors.InternalError(str(exc))

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.BadRequest(str(exc))

        return exc
