# accounts/infra/jwt/pyjwt_token_provider.py
from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt

from accounts.core.config import parse_duration
from accounts.services._shared.ports import (
    AccessClaims,
    AuthTokenConfig,
    TokenConfigError,
    TokenExpiredError,
    TokenKind,
    TokenMalformedError,
    TokenProvider,
)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    PyJWT adapter signing access and refresh tokens with independent secrets.

    Every token carries a random ``jti`` so two tokens issued for the same
    user within the same second still differ.

    :param config: Immutable signing configuration.
    :param clock: Source of "now" used for ``iat``/``exp``.
    """

    config: AuthTokenConfig
    clock: Callable[[], datetime] = field(default=_utcnow)

    @classmethod
    def from_config(cls, settings: Mapping[str, Any]) -> JWTTokenProvider:
        """Build the provider from Flask settings.

        :raises TokenConfigError: When a secret is missing or an expiry is unparsable.
        """
        try:
            access_ttl = parse_duration(settings.get("ACCESS_TOKEN_EXPIRY", "1d"))
            refresh_ttl = parse_duration(settings.get("REFRESH_TOKEN_EXPIRY", "10d"))
        except ValueError as exc:
            raise TokenConfigError(str(exc)) from exc
        cfg = AuthTokenConfig(
            access_secret=settings.get("ACCESS_TOKEN_SECRET") or "",
            access_expires_in=int(access_ttl.total_seconds()),
            refresh_secret=settings.get("REFRESH_TOKEN_SECRET") or "",
            refresh_expires_in=int(refresh_ttl.total_seconds()),
            algorithm=settings.get("TOKEN_ALGORITHM", "HS256"),
        )
        return cls(config=cfg)

    # ------------------------------ Issuing ------------------------------

    def _encode(self, kind: TokenKind, subject: int, extra: dict[str, Any] | None = None) -> str:
        now = self.clock()
        payload: dict[str, Any] = {
            "sub": str(subject),
            "type": kind.value,
            "jti": uuid4().hex,
            "iat": now,
            "exp": now + timedelta(seconds=self.config.expires_in(kind)),
        }
        if extra:
            payload.update(extra)
        return jwt.encode(payload, self.config.secret_for(kind), algorithm=self.config.algorithm)

    def issue_access_token(self, claims: AccessClaims) -> str:
        return self._encode(
            TokenKind.ACCESS,
            claims.user_id,
            {
                "email": claims.email,
                "username": claims.username,
                "full_name": claims.full_name,
            },
        )

    def issue_refresh_token(self, user_id: int) -> str:
        return self._encode(TokenKind.REFRESH, user_id)

    # ---------------------------- Verification ----------------------------

    def verify(self, token: str, kind: TokenKind) -> dict[str, Any]:
        """Decode ``token`` with the secret of ``kind`` and check its ``type``.

        :raises TokenExpiredError: When ``exp`` has passed.
        :raises TokenMalformedError: On bad signature, structure or type.
        """
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self.config.secret_for(kind),
                algorithms=[self.config.algorithm],
                options={"require": ["sub", "exp", "type"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise TokenMalformedError("Not a valid token") from exc

        if payload.get("type") != kind.value:
            raise TokenMalformedError(f"Expected a {kind.value} token")
        return payload
