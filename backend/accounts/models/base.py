"""Column mixins shared by account models (typed 2.0)."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column


class PKMixin:
    """Integer surrogate key ``id``, emitted first in ``CREATE TABLE``."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, sort_order=-10)


class TimestampMixin:
    """Database-managed ``created_at`` / ``updated_at``, emitted last.

    Both are filled by ``now()`` on insert. ``updated_at`` is refreshed by
    every ORM-enabled update of the row, including the ``update(User)``
    statements that write the refresh token, so login, rotation and logout
    move it as well as profile changes.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), sort_order=10
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
        sort_order=10,
    )


class ReprMixin:
    """``__repr__`` built from ``id`` plus the attributes in ``__repr_attrs__``.

    Only list identifying columns there; credential columns must stay out
    of logs and tracebacks.
    """

    __repr_attrs__: ClassVar[tuple[str, ...]] = ()

    def __repr__(self) -> str:
        parts = [f"id={getattr(self, 'id', None)}"]
        parts += [f"{name}={getattr(self, name, None)!r}" for name in self.__repr_attrs__]
        return f"<{type(self).__name__} {' '.join(parts)}>"
