"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never depend on Flask or
HTTP. They are the stable contract between repositories, services and the
transport layer; the translation to RFC 7807 responses happens in
``accounts/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the driver message names the constraint.

    Notes
    -----
    PostgreSQL reports the constraint name; SQLite reports the offending
    columns (``UNIQUE constraint failed: users.email``), so the column part of
    a ``uq_<table>_<column>`` name is matched as a fallback.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    name = constraint_name.lower()
    if name in message:
        return True
    parts = name.split("_", 2)
    if len(parts) == 3 and parts[0] == "uq":
        return f"{parts[1]}.{parts[2]}" in message
    return False


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer translates them to ``APIError`` subclasses.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class BadRequestError(ServiceError):
    """Raised for missing or unusable input (empty field, wrong old password)."""

    def __init__(self, message: str = "Bad request") -> None:
        super().__init__(message)


class UnauthorizedError(ServiceError):
    """Raised when credentials or tokens cannot be accepted."""

    def __init__(self, message: str = "Unauthorized request") -> None:
        super().__init__(message)


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class UploadFailedError(ServiceError):
    """Raised when a required media upload produced no URL."""

    def __init__(self, message: str = "Upload failed") -> None:
        super().__init__(message)


class InternalError(ServiceError):
    """Raised on internal consistency failures (e.g. a row vanished after insert)."""

    def __init__(self, message: str = "Something went wrong") -> None:
        super().__init__(message)
