# accounts/services/auth/service.py
from __future__ import annotations

import logging
import secrets

from accounts.models import User
from accounts.repositories.user import UserRepository
from accounts.services._shared.base import BaseService, ServiceContext
from accounts.services._shared.errors import (
    BadRequestError,
    NotFoundError,
    UnauthorizedError,
)
from accounts.services._shared.ports import (
    AccessClaims,
    PasswordHasher,
    TokenError,
    TokenExpiredError,
    TokenKind,
    TokenProvider,
)
from accounts.services.auth.dto import (
    LoginIn,
    LoginOut,
    LogoutIn,
    RefreshIn,
    TokenPairOut,
)
from accounts.services.identity.dto import UserPublicOut

log = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Authentication lifecycle service (login / refresh / logout / gate).

    Each user holds at most one live refresh token, stored on the user row.
    Login overwrites it, rotation swaps it atomically, logout clears it. A
    refresh token that verifies but differs from the stored one has already
    been rotated or revoked and is rejected.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        password_hasher: PasswordHasher,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_provider: Adapter for issuing/verifying JWTs.
        :param password_hasher: Adapter for verifying password hashes.
        :param ctx: Optional request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.tokens = token_provider
        self.hasher = password_hasher

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Authenticate credentials and issue a fresh token pair.

        The new refresh token replaces whatever was stored, which ends any
        earlier session of the same user.

        :param dto: Login input.
        :returns: Public user view and the token pair.
        :raises BadRequestError: If neither username nor email is given.
        :raises NotFoundError: If no user matches.
        :raises UnauthorizedError: If the password does not verify.
        """
        username = (dto.username or "").strip()
        email = (dto.email or "").strip()
        if not username and not email:
            raise BadRequestError("username or email is required")

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.find_by_username_or_email(username=username, email=email)
            if user is None:
                raise NotFoundError("User", username or email)

            if not self.hasher.verify(dto.password or "", user.password_hash):
                log.warning(
                    "Login rejected",
                    extra=self.log_extra(user_id=user.id, reason="invalid_credentials"),
                )
                raise UnauthorizedError("Invalid user credentials")

            pair = self._issue_pair(user)
            repo.set_refresh_token(user.id, pair.refresh_token)
            out = LoginOut(user=UserPublicOut.from_model(user), tokens=pair)

        log.info("User logged in", extra=self.log_extra(user_id=out.user.id))
        return out

    # ------------------------------------------------------------------ #
    # Refresh with atomic rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        Security
        --------
        - Signature, expiry and ``type`` are checked by the token provider.
        - The presented token must equal the stored one (replay defense).
        - The swap is a conditional update guarded by the presented value, so
          two concurrent rotations of one token cannot both succeed.

        :raises UnauthorizedError: On any of the conditions above, or when the
            user no longer exists.
        """
        presented = dto.refresh_token
        if not presented:
            raise UnauthorizedError("Unauthorized request")

        user_id = self._verified_subject(presented, TokenKind.REFRESH, label="refresh token")

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get(user_id)
            if user is None:
                raise UnauthorizedError("Invalid refresh token")

            stored = user.refresh_token or ""
            if not secrets.compare_digest(stored.encode(), presented.encode()):
                log.warning(
                    "Refresh token rejected",
                    extra=self.log_extra(user_id=user_id, reason="expired_or_used"),
                )
                raise UnauthorizedError("Refresh token is expired or used")

            pair = self._issue_pair(user)
            if not repo.swap_refresh_token(user_id, expected=presented, new=pair.refresh_token):
                log.warning(
                    "Refresh token rejected",
                    extra=self.log_extra(user_id=user_id, reason="concurrent_rotation"),
                )
                raise UnauthorizedError("Refresh token is expired or used")

        log.info("Access token refreshed", extra=self.log_extra(user_id=user_id))
        return pair

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        Clear the stored refresh token. Idempotent.

        Outstanding access tokens stay valid until they expire.
        """
        with self.rw_uow() as uow:
            uow.users.set_refresh_token(dto.user_id, None)
        log.info("User logged out", extra=self.log_extra(user_id=dto.user_id))

    # ------------------------------------------------------------------ #
    # Authentication gate
    # ------------------------------------------------------------------ #

    def authenticate(self, access_token: str | None) -> UserPublicOut:
        """
        Resolve a bearer access token to the user it was issued for.

        :param access_token: Raw token from the header or cookie.
        :returns: Public view of the user.
        :raises UnauthorizedError: When the token is missing, invalid, expired,
            or its user no longer exists.
        """
        if not access_token:
            raise UnauthorizedError("Unauthorized request")

        user_id = self._verified_subject(access_token, TokenKind.ACCESS, label="access token")

        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise UnauthorizedError("Invalid access token")
            return UserPublicOut.from_model(user)

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _issue_pair(self, user: User) -> TokenPairOut:
        claims = AccessClaims(
            user_id=user.id,
            email=user.email,
            username=user.username,
            full_name=user.full_name,
        )
        return TokenPairOut(
            access_token=self.tokens.issue_access_token(claims),
            refresh_token=self.tokens.issue_refresh_token(user.id),
        )

    def _verified_subject(self, token: str, kind: TokenKind, *, label: str) -> int:
        """Verify ``token`` and return its subject as a user id.

        Provider errors are normalized to :class:`UnauthorizedError`.
        """
        try:
            payload = self.tokens.verify(token, kind)
        except TokenExpiredError as exc:
            raise UnauthorizedError(f"{label.capitalize()} has expired") from exc
        except TokenError as exc:
            raise UnauthorizedError(f"Invalid {label}") from exc
        return self._coerce_user_id(payload.get("sub"))

    @staticmethod
    def _coerce_user_id(subject: object) -> int:
        """Ensure the JWT subject can be treated as an integer user id."""
        if isinstance(subject, bool):
            raise UnauthorizedError("Invalid token subject")
        if isinstance(subject, int):
            return subject
        if isinstance(subject, str) and subject.isdigit():
            return int(subject)
        raise UnauthorizedError("Invalid token subject")
