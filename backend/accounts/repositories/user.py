"""User repository: credential-store lookups and session-state writes."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import or_, select, update

from accounts.models.user import User
from accounts.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It never verifies passwords nor issues tokens; it only stores what the
    services hand over (hashes, refresh tokens, media URLs).
    """

    model = User

    def _updatable_fields(self):
        """Profile fields assignable through :meth:`update`.

        Credential and session columns have dedicated methods.
        """
        return {"email", "full_name", "avatar_url", "cover_image_url"}

    # ---------------------------- Lookup helpers ----------------------------

    def find_by_username_or_email(
        self, *, username: str | None = None, email: str | None = None
    ) -> User | None:
        """Return the first user matching ``username`` OR ``email``.

        Blank identifiers are ignored; ``None`` is returned when both are.

        :param username: Candidate username (normalized here).
        :type username: str | None
        :param email: Candidate email (normalized here).
        :type email: str | None
        :returns: Matching user or ``None``.
        :rtype: User | None
        """
        clauses: list[Any] = []
        if username and username.strip():
            clauses.append(User.username == username.lower().strip())
        if email and email.strip():
            clauses.append(User.email == email.lower().strip())
        if not clauses:
            return None
        stmt = select(User).where(or_(*clauses)).order_by(User.id.asc())
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def exists_by_email(self, email: str, *, exclude_id: int | None = None) -> bool:
        """Return ``True`` when a user with the provided email exists.

        :param email: Email address to normalise and search.
        :type email: str
        :param exclude_id: Ignore this user id (self-updates).
        :type exclude_id: int | None
        :rtype: bool
        """
        stmt = select(User.id).where(User.email == email.lower().strip())
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return bool(self.session.execute(stmt).first())

    # ---------------------------- Credential ops ----------------------------

    def update_password_hash(self, user: User, password_hash: str) -> None:
        """Store a new password hash and flush.

        :param user: Persistent user instance.
        :type user: User
        :param password_hash: Output of the password hasher.
        :type password_hash: str
        """
        user.password_hash = password_hash
        self.flush()

    # ---------------------------- Session ops ----------------------------

    def set_refresh_token(self, user_id: int, token: str | None) -> bool:
        """Overwrite (or clear with ``None``) the stored refresh token.

        :returns: ``True`` when the user row exists.
        :rtype: bool
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(refresh_token=token)
            .execution_options(synchronize_session="evaluate")
        )
        result = self.session.execute(stmt)
        return int(getattr(result, "rowcount", 0) or 0) == 1

    def swap_refresh_token(self, user_id: int, *, expected: str, new: str) -> bool:
        """Atomically replace the refresh token only if it still equals ``expected``.

        A single conditional ``UPDATE`` makes concurrent rotations of the same
        token mutually exclusive: only one of them matches the row.

        :param user_id: Owner of the token.
        :type user_id: int
        :param expected: Token presented by the client.
        :type expected: str
        :param new: Freshly issued replacement.
        :type new: str
        :returns: ``True`` if this call performed the rotation.
        :rtype: bool
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.refresh_token == expected)
            .values(refresh_token=new)
            .execution_options(synchronize_session="evaluate")
        )
        result = self.session.execute(stmt)
        return int(getattr(result, "rowcount", 0) or 0) == 1
