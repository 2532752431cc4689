"""
DTOs for IdentityService.

Data Transfer Objects (DTOs) isolate the service layer from ORM models,
ensuring clear input/output contracts and type safety.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from accounts.services._shared.ports import LocalFile

if TYPE_CHECKING:
    from accounts.models import User

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserUpdateIn:
    """
    Input DTO for updating profile fields.

    :param full_name: Optional new display name.
    :type full_name: str | None
    :param email: Optional new email.
    :type email: str | None
    """

    full_name: str | None = None
    email: str | None = None


@dataclass(frozen=True, slots=True)
class UserPasswordChangeIn:
    """
    Input DTO for changing a user's password.

    :param user_id: User identifier.
    :type user_id: int
    :param old_password: Current password.
    :type old_password: str
    :param new_password: New password (raw).
    :type new_password: str
    """

    user_id: int
    old_password: str
    new_password: str


@dataclass(frozen=True, slots=True)
class ImageUpdateIn:
    """
    Input DTO for replacing the avatar or the cover image.

    :param user_id: User identifier.
    :type user_id: int
    :param image: Staged file; ``None`` when the client sent nothing.
    :type image: LocalFile | None
    """

    user_id: int
    image: LocalFile | None


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Output DTO representing public-safe user data.

    Never carries the password hash nor the stored refresh token.

    :param id: User identifier.
    :type id: int
    :param username: Username.
    :type username: str
    :param email: Email address.
    :type email: str
    :param full_name: Display name.
    :type full_name: str
    :param avatar_url: Avatar URL on the media host.
    :type avatar_url: str
    :param cover_image_url: Cover image URL, or ``None``.
    :type cover_image_url: str | None
    :param created_at: Creation timestamp.
    :type created_at: datetime | None
    :param updated_at: Last update timestamp.
    :type updated_at: datetime | None
    """

    id: int
    username: str
    email: str
    full_name: str
    avatar_url: str
    cover_image_url: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, user: User) -> UserPublicOut:
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            avatar_url=user.avatar_url,
            cover_image_url=user.cover_image_url,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
