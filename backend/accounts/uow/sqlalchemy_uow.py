"""
SQLAlchemy units of work over the Flask-scoped session.

``SQLAlchemyUnitOfWork`` wraps a use case that writes (registration, login,
rotation, profile changes). ``SQLAlchemyReadOnlyUnitOfWork`` wraps lookups
(conflict pre-checks, re-reads, the auth gate) and refuses any write.
"""

from __future__ import annotations

import logging
from contextlib import suppress
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from accounts.core.extensions import db
from accounts.repositories import UserRepository
from accounts.uow.base import UnitOfWork

log = logging.getLogger(__name__)

WRITE_VERBS = (
    "insert",
    "update",
    "delete",
    "merge",
    "replace",
    "create",
    "alter",
    "drop",
    "truncate",
)
READ_ONLY_DIALECTS = frozenset({"postgresql", "mysql", "mariadb"})


class ReadOnlyViolation(RuntimeError):
    """A write was attempted inside a read-only unit of work."""


def _block_pending_changes(session: Session, flush_context: Any, instances: Any) -> None:
    if session.new or session.dirty or session.deleted:
        raise ReadOnlyViolation("Read-only UnitOfWork: ORM flush blocked (pending changes).")


def _block_write_statements(
    conn: Connection, cursor: Any, statement: str, parameters: Any, context: Any, executemany: bool
) -> None:
    verb = statement.lstrip().split(None, 1)[0].lower() if statement and statement.strip() else ""
    if verb in WRITE_VERBS:
        raise ReadOnlyViolation(f"Read-only UnitOfWork: SQL statement blocked: {verb.upper()}")


class _Repositories:
    """Repositories bound to one session."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=session)


class SQLAlchemyUnitOfWork(_Repositories, UnitOfWork):
    """
    Read-write unit of work.

    A clean exit commits; an exception in the block, or from the commit
    itself, rolls back and propagates.
    """

    def __init__(self) -> None:
        super().__init__(db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(_Repositories, UnitOfWork):
    """
    Read-only unit of work.

    Parameters
    ----------
    enforce_db_readonly:
        Also issue ``SET TRANSACTION READ ONLY`` on dialects that support it
        (PostgreSQL, MySQL/MariaDB) when this scope owns the transaction.

    Notes
    -----
    Writes are refused on every dialect by two guards: a ``before_flush``
    hook on the session and a ``before_cursor_execute`` hook on the
    connection. Both raise :class:`ReadOnlyViolation`.

    When the session is already inside a transaction the unit of work
    attaches to it: guards are installed, nothing is rolled back on exit and
    the outer scope keeps ownership. Otherwise it owns a fresh transaction
    and always rolls it back, which expires loaded instances, so results
    must be mapped to DTOs inside the ``with`` block.
    """

    def __init__(self, *, enforce_db_readonly: bool = True) -> None:
        super().__init__(db.session)
        self.enforce_db_readonly = enforce_db_readonly
        self._owned: SessionTransaction | None = None
        self._conn: Connection | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._owned = self._begin_if_idle()
        self._conn = self.session.connection()
        event.listen(self.session, "before_flush", _block_pending_changes)
        event.listen(self._conn, "before_cursor_execute", _block_write_statements)
        if self._owned is not None and self.enforce_db_readonly:
            self._mark_transaction_read_only()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owned is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
                self._owned.__exit__(exc_type, exc, tb)
        finally:
            self._owned = None
            self._remove_guards()

    def commit(self) -> None:
        """:raises ReadOnlyViolation: always."""
        raise ReadOnlyViolation("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ------------------------------ internals ------------------------------

    def _begin_if_idle(self) -> SessionTransaction | None:
        try:
            txn = self.session.begin()
        except InvalidRequestError:
            # A transaction is already running; attach to it
            return None
        txn.__enter__()
        return txn

    def _mark_transaction_read_only(self) -> None:
        assert self._conn is not None
        if self._conn.dialect.name not in READ_ONLY_DIALECTS:
            return
        try:
            self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            log.warning("uow.read_only_flag_failed: %s; relying on guards", exc)

    def _remove_guards(self) -> None:
        with suppress(InvalidRequestError):
            event.remove(self.session, "before_flush", _block_pending_changes)
        if self._conn is not None:
            with suppress(InvalidRequestError):
                event.remove(self._conn, "before_cursor_execute", _block_write_statements)
        self._conn = None
