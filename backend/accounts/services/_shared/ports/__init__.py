"""
accounts.services._shared.ports
===============================

Hexagonal *ports* the service layer depends on. Concrete adapters live under
``accounts.infra``.

Modules
-------
- :mod:`token_provider`:
    :class:`~.TokenProvider` for signing/verifying access and refresh JWTs,
    its immutable :class:`~.AuthTokenConfig` and the token error hierarchy.

- :mod:`password_hasher`:
    :class:`~.PasswordHasher` for salted one-way password hashing.

- :mod:`object_store`:
    :class:`~.ObjectStore` for the third-party media host, the
    :class:`~.LocalFile` / :class:`~.UploadedMedia` values and an
    in-memory double.
"""

from __future__ import annotations

from .object_store import (
    InMemoryObjectStore,
    LocalFile,
    ObjectStore,
    ObjectStoreError,
    UploadedMedia,
)
from .password_hasher import PasswordHasher
from .token_provider import (
    AccessClaims,
    AuthTokenConfig,
    TokenConfigError,
    TokenError,
    TokenExpiredError,
    TokenKind,
    TokenMalformedError,
    TokenProvider,
)

__all__ = [
    "AccessClaims",
    "AuthTokenConfig",
    "InMemoryObjectStore",
    "LocalFile",
    "ObjectStore",
    "ObjectStoreError",
    "PasswordHasher",
    "TokenConfigError",
    "TokenError",
    "TokenExpiredError",
    "TokenKind",
    "TokenMalformedError",
    "TokenProvider",
    "UploadedMedia",
]
