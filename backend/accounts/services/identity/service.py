"""
IdentityService
===============

Aggregate service for an authenticated user's own account:

- Current-user lookup
- Password lifecycle (verify old, store new hash, revoke the live session)
- Profile fields (full name, email)
- Avatar and cover image replacement through the media host
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from accounts.repositories.user import UserRepository
from accounts.services._shared.base import BaseService, ServiceContext
from accounts.services._shared.errors import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    UploadFailedError,
    violates,
)
from accounts.services._shared.ports import (
    LocalFile,
    ObjectStore,
    ObjectStoreError,
    PasswordHasher,
)
from accounts.services.identity.dto import (
    ImageUpdateIn,
    UserPasswordChangeIn,
    UserPublicOut,
    UserUpdateIn,
)

log = logging.getLogger(__name__)


class IdentityService(BaseService):
    """
    Application service for the `User` aggregate once authenticated.

    Responsibilities
    ----------------
    - Retrieve the public view of a user.
    - Manage the password lifecycle.
    - Update profile fields and media URLs safely.
    """

    def __init__(
        self,
        *,
        password_hasher: PasswordHasher,
        object_store: ObjectStore,
        revoke_sessions_on_password_change: bool = True,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        :param password_hasher: Adapter used to verify and hash passwords.
        :param object_store: Media host adapter for image uploads.
        :param revoke_sessions_on_password_change: Clear the stored refresh
            token when the password changes.
        :param ctx: Optional request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.hasher = password_hasher
        self.media = object_store
        self.revoke_sessions_on_password_change = revoke_sessions_on_password_change

    # --------------------------------------------------------------------- #
    # Retrieval
    # --------------------------------------------------------------------- #

    def get_user(self, user_id: int) -> UserPublicOut:
        """
        Retrieve a user by identifier.

        :param user_id: User primary key.
        :type user_id: int
        :returns: Public-safe user DTO.
        :rtype: UserPublicOut
        :raises NotFoundError: If user does not exist.
        """
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return UserPublicOut.from_model(user)

    # --------------------------------------------------------------------- #
    # Password management
    # --------------------------------------------------------------------- #

    def change_password(self, dto: UserPasswordChangeIn) -> None:
        """
        Change a user's password after verifying the old one.

        On a wrong old password nothing is written. When session revocation is
        enabled the stored refresh token is cleared in the same transaction, so
        any refresh token issued before the change stops working.

        :param dto: Input DTO containing old and new passwords.
        :type dto: UserPasswordChangeIn
        :raises BadRequestError: When the new password is blank or the old
            password does not verify.
        :raises NotFoundError: When user not found.
        """
        if not (dto.new_password or "").strip():
            raise BadRequestError("New password is required")

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_for_update(dto.user_id)
            if user is None:
                raise NotFoundError("User", dto.user_id)

            if not self.hasher.verify(dto.old_password or "", user.password_hash):
                log.warning(
                    "Password change rejected",
                    extra=self.log_extra(user_id=dto.user_id, reason="invalid_old_password"),
                )
                raise BadRequestError("Invalid old password")

            repo.update_password_hash(user, self.hasher.hash(dto.new_password))
            if self.revoke_sessions_on_password_change:
                repo.set_refresh_token(user.id, None)

        log.info("Password changed", extra=self.log_extra(user_id=dto.user_id))

    # --------------------------------------------------------------------- #
    # Profile
    # --------------------------------------------------------------------- #

    def update_profile(self, user_id: int, dto: UserUpdateIn) -> UserPublicOut:
        """
        Update the display name and/or email.

        :param user_id: User identifier.
        :type user_id: int
        :param dto: Input DTO containing new values.
        :type dto: UserUpdateIn
        :returns: Updated user DTO.
        :rtype: UserPublicOut
        :raises BadRequestError: When no field is provided or a value is invalid.
        :raises ConflictError: When the email belongs to another user.
        :raises NotFoundError: When user not found.
        """
        updates: dict[str, Any] = {
            k: v.strip()
            for k, v in {"full_name": dto.full_name, "email": dto.email}.items()
            if v is not None and v.strip()
        }
        if not updates:
            raise BadRequestError("At least one of fullName or email is required")

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_for_update(user_id)
            if user is None:
                raise NotFoundError("User", user_id)

            email = updates.get("email")
            if email is not None and repo.exists_by_email(email, exclude_id=user_id):
                raise ConflictError("User", "email already in use")

            try:
                repo.update(user, **updates)
            except ValueError as exc:
                raise BadRequestError(str(exc)) from exc
            except IntegrityError as exc:
                if violates(exc, "uq_users_email"):
                    raise ConflictError("User", "email already in use") from exc
                raise

            return UserPublicOut.from_model(user)

    # --------------------------------------------------------------------- #
    # Media
    # --------------------------------------------------------------------- #

    def update_avatar(self, dto: ImageUpdateIn) -> UserPublicOut:
        """
        Upload a new avatar and store its URL.

        :raises BadRequestError: When no file was provided.
        :raises UploadFailedError: When the media host yields no URL.
        """
        if dto.image is None:
            raise BadRequestError("Avatar file is missing")
        url = self._upload(dto.image, label="avatar")
        return self._set_media_url(dto.user_id, avatar_url=url)

    def update_cover_image(self, dto: ImageUpdateIn) -> UserPublicOut:
        """
        Upload a new cover image and store its URL.

        :raises BadRequestError: When no file was provided.
        :raises UploadFailedError: When the media host yields no URL.
        """
        if dto.image is None:
            raise BadRequestError("Cover image file is missing")
        url = self._upload(dto.image, label="cover image")
        return self._set_media_url(dto.user_id, cover_image_url=url)

    # --------------------------------------------------------------------- #
    # Internals
    # --------------------------------------------------------------------- #

    def _upload(self, file: LocalFile, *, label: str) -> str:
        try:
            media = self.media.upload(file)
        except ObjectStoreError as exc:
            log.warning("Upload failed", extra=self.log_extra(reason=str(exc)))
            raise UploadFailedError(f"Error while uploading {label}") from exc
        if not media.url:
            raise UploadFailedError(f"Error while uploading {label}")
        return media.url

    def _set_media_url(self, user_id: int, **fields: str) -> UserPublicOut:
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_for_update(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            repo.update(user, **fields)
            return UserPublicOut.from_model(user)
