from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """Port for one-way, salted password hashing."""

    def hash(self, plaintext: str) -> str:
        """Return a salted hash; raise ``ValueError`` on empty input."""
        ...

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Return ``True`` only when ``plaintext`` matches ``hashed``; never raise."""
        ...
