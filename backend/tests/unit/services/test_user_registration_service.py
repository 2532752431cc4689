# tests/unit/services/test_user_registration_service.py
from __future__ import annotations

import pytest
from accounts.models import User
from accounts.services._shared.errors import (
    BadRequestError,
    ConflictError,
    InternalError,
    UploadFailedError,
)
from accounts.services._shared.ports import InMemoryObjectStore
from accounts.services.identity.dto import UserPublicOut
from accounts.services.registration.dto import UserRegistrationIn
from accounts.services.registration.service import UserRegistrationService
from sqlalchemy import func, select
from tests.factories.user import UserFactory


@pytest.fixture()
def store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture()
def service(password_hasher, store) -> UserRegistrationService:
    return UserRegistrationService(password_hasher=password_hasher, object_store=store)


@pytest.fixture()
def payload(image_file):
    def _make(**overrides) -> UserRegistrationIn:
        data = {
            "full_name": "Alice A",
            "email": "alice@x.com",
            "username": "alice",
            "password": "Secret1!",
            "avatar": image_file("avatar.png"),
            "cover_image": None,
        }
        data.update(overrides)
        return UserRegistrationIn(**data)

    return _make


def _user_count(session) -> int:
    return session.execute(select(func.count()).select_from(User)).scalar_one()


def test_register_creates_user_with_hashed_password(service, payload, session, password_hasher):
    out = service.register(payload())

    assert isinstance(out, UserPublicOut)
    assert out.username == "alice"
    assert out.email == "alice@x.com"
    assert out.avatar_url.startswith("memory://")
    assert out.cover_image_url is None

    row = session.get(User, out.id)
    assert row.password_hash != "Secret1!"
    assert password_hasher.verify("Secret1!", row.password_hash)
    assert row.refresh_token is None


def test_register_normalizes_username_and_email(service, payload):
    out = service.register(payload(username="  Alice ", email=" ALICE@X.com"))

    assert out.username == "alice"
    assert out.email == "alice@x.com"


def test_register_uploads_cover_when_given(service, payload, image_file, store):
    out = service.register(payload(cover_image=image_file("cover.jpg")))

    assert out.cover_image_url is not None
    assert len(store.objects) == 2


def test_register_degrades_when_cover_upload_fails(service, payload, image_file, store):
    store.fail_on.add("cover.jpg")

    out = service.register(payload(cover_image=image_file("cover.jpg")))

    assert out.cover_image_url is None
    assert out.avatar_url


@pytest.mark.parametrize("field", ["full_name", "email", "username", "password"])
@pytest.mark.parametrize("value", ["", "   "])
def test_register_rejects_blank_fields(service, payload, session, field, value):
    with pytest.raises(BadRequestError):
        service.register(payload(**{field: value}))
    assert _user_count(session) == 0


def test_register_requires_avatar(service, payload, store):
    with pytest.raises(BadRequestError):
        service.register(payload(avatar=None))
    assert store.objects == {}


def test_register_avatar_upload_failure(service, payload, store, session):
    store.fail_all = True

    with pytest.raises(UploadFailedError):
        service.register(payload())
    assert _user_count(session) == 0


@pytest.mark.parametrize(
    "overrides",
    [{"username": "ALICE", "email": "other@x.com"}, {"username": "other", "email": "Alice@X.com"}],
)
def test_register_conflicts_on_taken_username_or_email(service, payload, store, overrides):
    UserFactory(username="alice", email="alice@x.com")

    with pytest.raises(ConflictError):
        service.register(payload(**overrides))
    # Conflict is detected before anything is uploaded
    assert store.objects == {}


def test_register_maps_unique_violation_to_conflict(service, payload, monkeypatch):
    """A concurrent insert that slips past the pre-check still yields Conflict."""
    from accounts.repositories.user import UserRepository

    UserFactory(username="alice", email="alice@x.com")
    monkeypatch.setattr(UserRepository, "find_by_username_or_email", lambda self, **kw: None)

    with pytest.raises(ConflictError):
        service.register(payload())


def test_register_internal_error_when_row_vanishes(service, payload, monkeypatch):
    from accounts.repositories.user import UserRepository

    monkeypatch.setattr(UserRepository, "get", lambda self, entity_id: None)

    with pytest.raises(InternalError):
        service.register(payload())


def test_register_rejects_malformed_email(service, payload):
    with pytest.raises(BadRequestError):
        service.register(payload(email="not-an-email"))
