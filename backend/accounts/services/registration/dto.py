"""
DTOs for UserRegistrationService.

Contracts for the self-registration flow that uploads profile media and
creates the ``User`` row.
"""

from __future__ import annotations

from dataclasses import dataclass

from accounts.services._shared.ports import LocalFile

# --------------------------------------------------------------------------- #
# Input
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserRegistrationIn:
    """
    Input payload for the registration process.

    :param full_name: Display name.
    :type full_name: str
    :param email: Login email (normalized to lowercase+trim).
    :type email: str
    :param username: Public handle (normalized to lowercase+trim, unique).
    :type username: str
    :param password: Raw password (hashed by the service, never stored).
    :type password: str
    :param avatar: Staged avatar file (required).
    :type avatar: LocalFile | None
    :param cover_image: Staged cover image (optional).
    :type cover_image: LocalFile | None
    """

    full_name: str
    email: str
    username: str
    password: str
    avatar: LocalFile | None = None
    cover_image: LocalFile | None = None
