"""
UserRegistrationService
=======================

Process-level service that registers a new identity:

- Rejects blank fields and an already taken username or email.
- Pushes the avatar (required) and cover image (optional) to the media host.
- Hashes the password and inserts the ``User`` row.
- Re-reads the row and returns its public view.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from accounts.repositories.user import UserRepository
from accounts.services._shared.base import BaseService, ServiceContext
from accounts.services._shared.errors import (
    BadRequestError,
    ConflictError,
    InternalError,
    UploadFailedError,
    violates,
)
from accounts.services._shared.ports import (
    LocalFile,
    ObjectStore,
    ObjectStoreError,
    PasswordHasher,
)
from accounts.services.identity.dto import UserPublicOut
from accounts.services.registration.dto import UserRegistrationIn

log = logging.getLogger(__name__)


class UserRegistrationService(BaseService):
    """
    Orchestrates the user registration process.
    """

    def __init__(
        self,
        *,
        password_hasher: PasswordHasher,
        object_store: ObjectStore,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.hasher = password_hasher
        self.media = object_store

    def register(self, dto: UserRegistrationIn) -> UserPublicOut:
        """
        Register a user with profile media.

        Uploads happen before the insert; a failed insert therefore leaves the
        uploaded assets orphaned on the media host.

        :param dto: Registration input.
        :type dto: :class:`UserRegistrationIn`
        :returns: Public view of the created user.
        :rtype: :class:`UserPublicOut`
        :raises BadRequestError: When a text field is blank or the avatar is missing.
        :raises ConflictError: When the username or email is already taken.
        :raises UploadFailedError: When the avatar upload fails.
        :raises InternalError: When the created row cannot be read back.
        """
        fields = {
            "full_name": dto.full_name,
            "email": dto.email,
            "username": dto.username,
            "password": dto.password,
        }
        if any(not (v or "").strip() for v in fields.values()):
            raise BadRequestError("All fields are required")
        if dto.avatar is None:
            raise BadRequestError("Avatar file is required")

        # Fast-path conflict check; the unique constraints remain authoritative.
        with self.ro_uow() as uow_ro:
            repo_ro: UserRepository = uow_ro.users
            if repo_ro.find_by_username_or_email(username=dto.username, email=dto.email):
                raise ConflictError("User", "user with email or username already exists")

        avatar_url = self._upload_avatar(dto.avatar)
        cover_url = self._upload_cover(dto.cover_image)

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            try:
                user = repo.model(
                    full_name=dto.full_name,
                    email=dto.email,
                    username=dto.username,
                    avatar_url=avatar_url,
                    cover_image_url=cover_url,
                    password_hash=self.hasher.hash(dto.password),
                )
            except ValueError as exc:
                raise BadRequestError(str(exc)) from exc
            try:
                repo.add(user)
            except IntegrityError as exc:
                if violates(exc, "uq_users_email"):
                    raise ConflictError("User", "email already in use") from exc
                if violates(exc, "uq_users_username"):
                    raise ConflictError("User", "username already in use") from exc
                raise
            user_id = user.id

        with self.ro_uow() as uow_ro:
            created = uow_ro.users.get(user_id)
            if created is None:
                raise InternalError("Something went wrong while registering the user")
            out = UserPublicOut.from_model(created)

        log.info("User registered", extra=self.log_extra(user_id=out.id))
        return out

    # ----------------------------- Internals ---------------------------------

    def _upload_avatar(self, file: LocalFile) -> str:
        try:
            media = self.media.upload(file)
        except ObjectStoreError as exc:
            log.warning("Avatar upload failed", extra=self.log_extra(reason=str(exc)))
            raise UploadFailedError("Avatar file is required") from exc
        if not media.url:
            raise UploadFailedError("Avatar file is required")
        return media.url

    def _upload_cover(self, file: LocalFile | None) -> str | None:
        """Upload the optional cover; a failure degrades to no cover image."""
        if file is None:
            return None
        try:
            media = self.media.upload(file)
        except ObjectStoreError as exc:
            log.warning(
                "Cover image upload failed; continuing without it",
                extra=self.log_extra(reason=str(exc)),
            )
            return None
        return media.url or None
