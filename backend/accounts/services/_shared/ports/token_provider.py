from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol


class TokenKind(str, Enum):
    """The two token families; each has its own secret and lifetime."""

    ACCESS = "access"
    REFRESH = "refresh"


class TokenError(Exception):
    """Base class for token verification failures."""


class TokenExpiredError(TokenError):
    """The token signature is valid but ``exp`` is in the past."""


class TokenMalformedError(TokenError):
    """Bad signature, unparseable structure or wrong token ``type``."""


class TokenConfigError(RuntimeError):
    """Token secrets or lifetimes are missing or unusable; fatal at startup."""


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Immutable signing configuration for both token families.

    :param access_secret: HMAC secret for access tokens.
    :type access_secret: str
    :param access_expires_in: Access token lifetime in seconds.
    :type access_expires_in: int
    :param refresh_secret: HMAC secret for refresh tokens.
    :type refresh_secret: str
    :param refresh_expires_in: Refresh token lifetime in seconds.
    :type refresh_expires_in: int
    :param algorithm: JWS algorithm shared by both families.
    :type algorithm: str
    :raises TokenConfigError: When a secret is blank or a lifetime is not positive.
    """

    access_secret: str
    access_expires_in: int
    refresh_secret: str
    refresh_expires_in: int
    algorithm: str = "HS256"

    def __post_init__(self) -> None:
        if not self.access_secret or not self.refresh_secret:
            raise TokenConfigError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must be set.")
        if self.access_expires_in <= 0 or self.refresh_expires_in <= 0:
            raise TokenConfigError("Token lifetimes must be positive.")

    def secret_for(self, kind: TokenKind) -> str:
        return self.access_secret if kind is TokenKind.ACCESS else self.refresh_secret

    def expires_in(self, kind: TokenKind) -> int:
        return self.access_expires_in if kind is TokenKind.ACCESS else self.refresh_expires_in


@dataclass(frozen=True, slots=True)
class AccessClaims:
    """
    Identity claims embedded in an access token.

    :param user_id: Subject (serialized as string ``sub``).
    :type user_id: int
    :param email: Normalized email.
    :type email: str
    :param username: Normalized username.
    :type username: str
    :param full_name: Display name.
    :type full_name: str
    """

    user_id: int
    email: str
    username: str
    full_name: str


class TokenProvider(Protocol):
    """Port for signing and verifying access/refresh JWTs."""

    def issue_access_token(self, claims: AccessClaims) -> str: ...

    def issue_refresh_token(self, user_id: int) -> str: ...

    def verify(self, token: str, kind: TokenKind) -> dict[str, Any]:
        """Return the claims or raise :class:`TokenExpiredError` / :class:`TokenMalformedError`."""
        ...
