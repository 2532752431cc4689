# accounts/infra/security/werkzeug_password_hasher.py
from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from accounts.services._shared.ports import PasswordHasher


@dataclass(frozen=True, slots=True)
class WerkzeugPasswordHasher(PasswordHasher):
    """
    Salted password hashing via :mod:`werkzeug.security`.

    :param method: Werkzeug method string, cost included
        (``"scrypt"``, ``"pbkdf2:sha256:600000"``...).
    :param salt_length: Salt length in characters.
    """

    method: str = "scrypt"
    salt_length: int = 16

    def hash(self, plaintext: str) -> str:
        if not plaintext:
            raise ValueError("Password must be a non-empty string.")
        return generate_password_hash(plaintext, method=self.method, salt_length=self.salt_length)

    def verify(self, plaintext: str, hashed: str) -> bool:
        # check_password_hash compares digests in constant time.
        if not plaintext or not hashed:
            return False
        try:
            return check_password_hash(hashed, plaintext)
        except ValueError:
            # Unknown method or malformed stored hash
            return False
