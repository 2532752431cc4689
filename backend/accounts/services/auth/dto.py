# accounts/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass

from accounts.services.identity.dto import UserPublicOut

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login. At least one identifier must be present.

    :param password: Raw password (to be verified).
    :type password: str
    :param username: Username, if the client logs in by handle.
    :type username: str | None
    :param email: Email, if the client logs in by email.
    :type email: str | None
    """

    password: str
    username: str | None = None
    email: str | None = None


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT (``None`` when the client sent none).
    :type refresh_token: str | None
    """

    refresh_token: str | None


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param user_id: Authenticated user whose session ends.
    :type user_id: int
    """

    user_id: int


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class LoginOut:
    """
    Output DTO for a successful login.

    :param user: Public view of the authenticated user.
    :type user: UserPublicOut
    :param tokens: Freshly issued token pair.
    :type tokens: TokenPairOut
    """

    user: UserPublicOut
    tokens: TokenPairOut
