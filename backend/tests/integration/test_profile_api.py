"""HTTP tests for password change and profile/media updates."""

from __future__ import annotations

from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from tests.helpers.assertions import assert_problem
from tests.helpers.auth import bearer, login, login_tokens
from tests.helpers.http import API, upload


def test_change_password_flow(client):
    user = UserFactory()
    tokens = login_tokens(client, user.username)

    resp = client.post(
        f"{API}/change-password",
        json={"oldPassword": DEFAULT_PASSWORD, "newPassword": "N3w-Secret"},
        headers=bearer(tokens["accessToken"]),
    )

    assert resp.status_code == 200
    assert_problem(login(client, user.username, DEFAULT_PASSWORD), 401)
    assert login(client, user.username, "N3w-Secret").status_code == 200
    # The refresh token from before the change no longer rotates
    stale = client.post(f"{API}/refresh-token", json={"refreshToken": tokens["refreshToken"]})
    assert_problem(stale, 401)


def test_change_password_wrong_old_password(client):
    user = UserFactory()
    tokens = login_tokens(client, user.username)

    resp = client.post(
        f"{API}/change-password",
        json={"oldPassword": "not-it", "newPassword": "N3w-Secret"},
        headers=bearer(tokens["accessToken"]),
    )

    assert_problem(resp, 400, "bad_request")
    assert login(client, user.username, DEFAULT_PASSWORD).status_code == 200


def test_update_account(client):
    user = UserFactory()
    tokens = login_tokens(client, user.username)

    resp = client.patch(
        f"{API}/update-account",
        json={"fullName": "Renamed", "email": "renamed@x.com"},
        headers=bearer(tokens["accessToken"]),
    )

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["fullName"] == "Renamed"
    assert data["email"] == "renamed@x.com"


def test_update_account_errors(client):
    UserFactory(email="taken@x.com")
    user = UserFactory()
    headers = bearer(login_tokens(client, user.username)["accessToken"])

    assert_problem(client.patch(f"{API}/update-account", json={}, headers=headers), 400)
    assert_problem(
        client.patch(f"{API}/update-account", json={"email": "taken@x.com"}, headers=headers),
        409,
        "conflict",
    )


def test_update_avatar_and_cover(client):
    user = UserFactory()
    headers = bearer(login_tokens(client, user.username)["accessToken"])

    avatar = client.patch(
        f"{API}/avatar",
        data={"avatar": upload("new.png")},
        headers=headers,
        content_type="multipart/form-data",
    )
    cover = client.patch(
        f"{API}/cover-image",
        data={"coverImage": upload("cover.png")},
        headers=headers,
        content_type="multipart/form-data",
    )

    assert avatar.status_code == 200
    assert avatar.get_json()["data"]["avatar"].endswith("/new.png")
    assert cover.status_code == 200
    assert cover.get_json()["data"]["coverImage"].endswith("/cover.png")


def test_update_avatar_without_file(client):
    user = UserFactory()
    headers = bearer(login_tokens(client, user.username)["accessToken"])

    resp = client.patch(f"{API}/avatar", data={}, headers=headers, content_type="multipart/form-data")

    assert_problem(resp, 400, "bad_request")


def test_update_cover_upload_failure(client, object_store):
    user = UserFactory()
    headers = bearer(login_tokens(client, user.username)["accessToken"])
    object_store.fail_all = True

    resp = client.patch(
        f"{API}/cover-image",
        data={"coverImage": upload("cover.png")},
        headers=headers,
        content_type="multipart/form-data",
    )

    assert_problem(resp, 502, "upload_failed")


def test_change_password_rejects_whitespace_only_password(client):
    user = UserFactory()
    tokens = login_tokens(client, user.username)

    resp = client.post(
        f"{API}/change-password",
        json={"oldPassword": DEFAULT_PASSWORD, "newPassword": "   "},
        headers=bearer(tokens["accessToken"]),
    )

    assert_problem(resp, 400, "bad_request")
    assert login(client, user.username, DEFAULT_PASSWORD).status_code == 200
