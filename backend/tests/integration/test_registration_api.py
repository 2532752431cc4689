"""HTTP tests for ``POST /api/v1/users/register``."""

from __future__ import annotations

from accounts.models import User
from tests.factories.user import UserFactory
from tests.helpers.assertions import assert_problem, assert_public_user
from tests.helpers.http import API, upload


def _form(**overrides):
    data = {
        "fullName": "Alice A",
        "email": "alice@x.com",
        "username": "alice",
        "password": "Secret1!",
        "avatar": upload("avatar.png"),
    }
    data.update(overrides)
    return {k: v for k, v in data.items() if v is not None}


def _register(client, **overrides):
    return client.post(
        f"{API}/register", data=_form(**overrides), content_type="multipart/form-data"
    )


def test_register_returns_public_user(client, session):
    resp = _register(client)

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert_public_user(data)
    assert data["username"] == "alice"
    assert data["email"] == "alice@x.com"
    assert data["avatar"].startswith("memory://")
    assert data["coverImage"] is None
    assert session.get(User, data["id"]) is not None


def test_register_with_cover_image(client):
    resp = _register(client, coverImage=upload("cover.jpg"))

    assert resp.status_code == 201
    assert resp.get_json()["data"]["coverImage"].startswith("memory://")


def test_register_deletes_staged_files(client, upload_dir):
    _register(client, coverImage=upload("cover.jpg"))
    _register(client, username="")

    assert not upload_dir.exists() or list(upload_dir.iterdir()) == []


def test_register_missing_avatar_is_bad_request(client):
    resp = _register(client, avatar=None)

    assert_problem(resp, 400, "bad_request")


def test_register_blank_field_is_bad_request(client):
    resp = _register(client, fullName="   ")

    assert_problem(resp, 400, "bad_request")


def test_register_conflict(client):
    UserFactory(username="alice", email="someone@x.com")

    resp = _register(client)

    assert_problem(resp, 409, "conflict")


def test_register_avatar_upload_failure(client, object_store):
    object_store.fail_all = True

    resp = _register(client)

    assert_problem(resp, 502, "upload_failed")


def test_register_cover_failure_still_creates_user(client, object_store):
    object_store.fail_on.add("cover.jpg")

    resp = _register(client, coverImage=upload("cover.jpg"))

    assert resp.status_code == 201
    assert resp.get_json()["data"]["coverImage"] is None
