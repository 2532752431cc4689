# accounts/infra/media/cloudinary_object_store.py
"""Cloudinary upload adapter and object-store selection.

Uploads go through the official ``cloudinary`` SDK with
``resource_type="auto"`` so the host detects images and other media.
Credentials are passed on every call; the SDK's process-global
configuration is never touched.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from accounts.services._shared.ports import (
    InMemoryObjectStore,
    LocalFile,
    ObjectStore,
    ObjectStoreError,
    UploadedMedia,
)

log = logging.getLogger(__name__)


class CloudinaryObjectStore(ObjectStore):
    """
    Push staged files to Cloudinary.

    Parameters
    ----------
    cloud_name, api_key, api_secret : str
        Account credentials.
    folder : str | None
        Optional destination folder.
    timeout : float
        Per-request timeout in seconds; no retries are attempted.
    """

    def __init__(
        self,
        *,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.timeout = timeout

    def upload_options(self) -> dict[str, Any]:
        """Keyword arguments handed to :func:`cloudinary.uploader.upload`."""
        options: dict[str, Any] = {
            "resource_type": "auto",
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
            "api_secret": self.api_secret,
            "timeout": self.timeout,
        }
        if self.folder:
            options["folder"] = self.folder
        return options

    def upload(self, file: LocalFile) -> UploadedMedia:
        try:
            result: Mapping[str, Any] = cloudinary.uploader.upload(
                str(file.path), **self.upload_options()
            )
        except OSError as exc:
            raise ObjectStoreError(f"Cannot read staged file {file.path}") from exc
        except CloudinaryError as exc:
            log.debug("Cloudinary rejected upload: %s", exc)
            raise ObjectStoreError(f"Media host rejected upload: {exc}") from exc

        url = result.get("secure_url") or result.get("url")
        if not url:
            raise ObjectStoreError("Media host response carries no URL")
        log.info("File uploaded to media host")
        return UploadedMedia(url=url, public_id=str(result.get("public_id", "")))


def build_object_store(settings: Mapping[str, Any]) -> ObjectStore:
    """Select the object store named by ``OBJECT_STORE_BACKEND``.

    :raises RuntimeError: For an unknown backend or missing Cloudinary credentials.
    """
    backend = str(settings.get("OBJECT_STORE_BACKEND", "cloudinary")).strip().lower()
    if backend == "memory":
        return InMemoryObjectStore()
    if backend != "cloudinary":
        raise RuntimeError(f"Unknown OBJECT_STORE_BACKEND: {backend!r}")

    cloud_name = settings.get("CLOUDINARY_CLOUD_NAME")
    api_key = settings.get("CLOUDINARY_API_KEY")
    api_secret = settings.get("CLOUDINARY_API_SECRET")
    if not (cloud_name and api_key and api_secret):
        raise RuntimeError(
            "CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET must be set."
        )
    return CloudinaryObjectStore(
        cloud_name=cloud_name,
        api_key=api_key,
        api_secret=api_secret,
        folder=settings.get("CLOUDINARY_FOLDER") or None,
        timeout=float(settings.get("CLOUDINARY_UPLOAD_TIMEOUT", 30.0)),
    )
