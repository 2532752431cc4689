"""Repository base for SQLAlchemy 2.x aggregates.

Repositories stage and read rows; they never commit or roll back. The unit
of work that created their session decides the transaction's outcome.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import select
from sqlalchemy.orm import Session

from accounts.core.extensions import db

E = TypeVar("E")


class BaseRepository(Generic[E]):
    """Persistence-only access to one mapped class.

    Subclasses set ``model`` and list the columns that :meth:`update` may
    assign in ``_updatable_fields``. Anything not listed there (password
    hashes, refresh tokens) needs a dedicated method on the subclass.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """
        :param session: Session shared across a unit of work. Defaults to
            the Flask-scoped ``db.session``.
        :type session: :class:`sqlalchemy.orm.Session` | None
        """
        self._session = session

    @property
    def session(self) -> Session:
        return self._session if self._session is not None else cast(Session, db.session)

    def _updatable_fields(self) -> set[str]:
        """Columns :meth:`update` may assign. Empty means nothing is assignable."""
        return set()

    # --------------------------------- Reads ---------------------------------

    def get(self, entity_id: Any) -> E | None:
        """Return the row with primary key ``entity_id``, or ``None``."""
        stmt = select(self.model).where(self.model.id == entity_id)  # type: ignore[attr-defined]
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def get_for_update(self, entity_id: Any) -> E | None:
        """Like :meth:`get`, holding a row lock where the backend supports ``FOR UPDATE``."""
        stmt = (
            select(self.model)
            .where(self.model.id == entity_id)  # type: ignore[attr-defined]
            .with_for_update()
        )
        return cast(E | None, self.session.execute(stmt).scalars().first())

    # -------------------------------- Writes ---------------------------------

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so its primary key is assigned.

        :raises sqlalchemy.exc.IntegrityError: When a unique constraint rejects the row.
        """
        self.session.add(instance)
        self.flush()
        return instance

    def update(self, instance: E, **fields: Any) -> E:
        """Assign whitelisted ``fields`` through the model's validators, then flush.

        :raises ValueError: On a non-assignable key, or when a model
            validator rejects a value.
        """
        for key, value in self._checked_updates(fields).items():
            setattr(instance, key, value)
        self.flush()
        return instance

    def flush(self) -> None:
        self.session.flush()

    def _checked_updates(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        rejected = sorted(set(fields) - self._updatable_fields())
        if rejected:
            raise ValueError(f"Non-updatable fields: {rejected}")
        return dict(fields)
