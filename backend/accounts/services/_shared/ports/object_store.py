from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from uuid import uuid4


class ObjectStoreError(Exception):
    """The media host rejected the upload or could not be reached."""


@dataclass(frozen=True, slots=True)
class LocalFile:
    """
    A file staged on local disk, ready to be pushed to the media host.

    :param path: Absolute path of the staged file.
    :type path: pathlib.Path
    :param filename: Client-supplied (sanitized) filename.
    :type filename: str
    :param content_type: MIME type reported by the client, if any.
    :type content_type: str | None
    """

    path: Path
    filename: str
    content_type: str | None = None


@dataclass(frozen=True, slots=True)
class UploadedMedia:
    """
    Result of a successful upload.

    :param url: Public (https) URL of the stored asset.
    :type url: str
    :param public_id: Host-side identifier of the asset.
    :type public_id: str
    """

    url: str
    public_id: str


class ObjectStore(Protocol):
    """Port for a third-party media host."""

    def upload(self, file: LocalFile) -> UploadedMedia:
        """Store ``file`` and return its URL; raise :class:`ObjectStoreError` on failure."""
        ...


class InMemoryObjectStore(ObjectStore):
    """
    Process-local object store for development and tests.

    Uploaded bytes are kept in memory and exposed as ``memory://`` URLs.
    ``fail_on`` makes uploads of the given filenames raise
    :class:`ObjectStoreError`, to exercise failure paths.
    """

    def __init__(self, *, fail_on: set[str] | None = None, fail_all: bool = False) -> None:
        self._lock = threading.Lock()
        self.objects: dict[str, bytes] = {}
        self.fail_on: set[str] = set(fail_on or ())
        self.fail_all = fail_all

    def upload(self, file: LocalFile) -> UploadedMedia:
        if self.fail_all or file.filename in self.fail_on:
            raise ObjectStoreError(f"Simulated upload failure for {file.filename!r}")
        try:
            data = file.path.read_bytes()
        except OSError as exc:
            raise ObjectStoreError(f"Cannot read staged file {file.path}") from exc
        public_id = f"{uuid4().hex}/{file.filename}"
        with self._lock:
            self.objects[public_id] = data
        return UploadedMedia(url=f"memory://{public_id}", public_id=public_id)
