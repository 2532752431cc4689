"""Unit tests for the werkzeug-backed password hasher."""

from __future__ import annotations

import pytest
from accounts.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher


@pytest.fixture()
def hasher() -> WerkzeugPasswordHasher:
    return WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")


def test_hash_is_salted_and_verifies(hasher):
    first = hasher.hash("Secret1!")
    second = hasher.hash("Secret1!")

    assert first != second
    assert "Secret1!" not in first
    assert hasher.verify("Secret1!", first)
    assert hasher.verify("Secret1!", second)


def test_verify_rejects_wrong_password(hasher):
    assert not hasher.verify("wrong", hasher.hash("Secret1!"))


def test_hash_rejects_empty_input(hasher):
    with pytest.raises(ValueError):
        hasher.hash("")


@pytest.mark.parametrize("stored", ["", "not-a-hash", "unknown$salt$digest"])
def test_verify_returns_false_for_unusable_hash(hasher, stored):
    assert hasher.verify("Secret1!", stored) is False


def test_verify_empty_plaintext(hasher):
    assert hasher.verify("", hasher.hash("x")) is False
