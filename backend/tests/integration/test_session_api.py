"""HTTP tests for login, refresh rotation, logout and the auth gate."""

from __future__ import annotations

from accounts.models import User
from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from tests.helpers.assertions import assert_problem, assert_public_user
from tests.helpers.auth import bearer, login, login_tokens
from tests.helpers.http import API, set_cookies, upload


def test_register_then_login_by_email(client):
    client.post(
        f"{API}/register",
        data={
            "fullName": "Alice",
            "email": "alice@x.com",
            "username": "alice",
            "password": "Secret1!",
            "avatar": upload(),
        },
        content_type="multipart/form-data",
    )

    resp = client.post(f"{API}/login", json={"email": "alice@x.com", "password": "Secret1!"})

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert_public_user(data["user"])
    assert data["user"]["username"] == "alice"
    assert data["accessToken"] and data["refreshToken"]


def test_login_sets_secure_http_only_cookies(client):
    user = UserFactory()

    resp = login(client, user.username)

    cookies = set_cookies(resp)
    assert set(cookies) >= {"accessToken", "refreshToken"}
    for header in (cookies["accessToken"], cookies["refreshToken"]):
        assert "HttpOnly" in header
        assert "Secure" in header
        assert "SameSite=Lax" in header
    body = resp.get_json()["data"]
    assert cookies["refreshToken"].startswith(f"refreshToken={body['refreshToken']}")


def test_login_errors(client):
    user = UserFactory()

    assert_problem(client.post(f"{API}/login", json={"password": "x"}), 400, "bad_request")
    assert_problem(login(client, "nobody"), 404, "not_found")
    assert_problem(login(client, user.username, "wrong-password"), 401, "unauthorized")


def test_current_user_with_bearer_and_cookie(client):
    user = UserFactory()
    tokens = login_tokens(client, user.username)

    by_header = client.get(f"{API}/current-user", headers=bearer(tokens["accessToken"]))
    by_cookie = client.get(
        f"{API}/current-user", headers={"Cookie": f"accessToken={tokens['accessToken']}"}
    )

    for resp in (by_header, by_cookie):
        assert resp.status_code == 200
        assert resp.get_json()["data"]["id"] == user.id


def test_gate_rejects_missing_and_invalid_tokens(client):
    user = UserFactory()
    tokens = login_tokens(client, user.username)

    assert_problem(client.get(f"{API}/current-user"), 401, "unauthorized")
    assert_problem(client.get(f"{API}/current-user", headers=bearer("junk")), 401)
    assert_problem(
        client.get(f"{API}/current-user", headers=bearer(tokens["refreshToken"])), 401
    )


def test_refresh_rotates_and_rejects_replay(client):
    user = UserFactory()
    first = login_tokens(client, user.username)

    resp = client.post(f"{API}/refresh-token", json={"refreshToken": first["refreshToken"]})
    assert resp.status_code == 200
    second = resp.get_json()["data"]
    assert second["refreshToken"] != first["refreshToken"]
    assert "refreshToken" in set_cookies(resp)

    replay = client.post(f"{API}/refresh-token", json={"refreshToken": first["refreshToken"]})
    assert_problem(replay, 401, "unauthorized")

    # The new access token works at the gate
    me = client.get(f"{API}/current-user", headers=bearer(second["accessToken"]))
    assert me.status_code == 200


def test_refresh_reads_cookie_when_body_empty(client):
    user = UserFactory()
    tokens = login_tokens(client, user.username)

    resp = client.post(
        f"{API}/refresh-token", headers={"Cookie": f"refreshToken={tokens['refreshToken']}"}
    )

    assert resp.status_code == 200


def test_refresh_body_takes_precedence_over_cookie(client):
    user = UserFactory()
    tokens = login_tokens(client, user.username)

    resp = client.post(
        f"{API}/refresh-token",
        json={"refreshToken": tokens["refreshToken"]},
        headers={"Cookie": "refreshToken=stale-value"},
    )

    assert resp.status_code == 200


def test_refresh_without_token(client):
    assert_problem(client.post(f"{API}/refresh-token", json={}), 401, "unauthorized")


def test_logout_clears_cookies_and_session(client, session):
    user = UserFactory()
    tokens = login_tokens(client, user.username)

    resp = client.post(f"{API}/logout", headers=bearer(tokens["accessToken"]))

    assert resp.status_code == 200
    cookies = set_cookies(resp)
    assert cookies["accessToken"].startswith("accessToken=;")
    assert cookies["refreshToken"].startswith("refreshToken=;")
    assert "SameSite=Lax" in cookies["refreshToken"]
    session.expire_all()
    assert session.get(User, user.id).refresh_token is None

    after = client.post(f"{API}/refresh-token", json={"refreshToken": tokens["refreshToken"]})
    assert_problem(after, 401)


def test_logout_requires_authentication(client):
    assert_problem(client.post(f"{API}/logout"), 401)


def test_login_response_never_leaks_credentials(client):
    user = UserFactory()

    body = login(client, user.username, DEFAULT_PASSWORD).get_json()["data"]

    assert "passwordHash" not in body["user"]
    assert "password_hash" not in str(body)


def test_problem_carries_request_id(client):
    resp = client.get(f"{API}/current-user", headers={"X-Request-Id": "req-123"})

    assert assert_problem(resp, 401)["request_id"] == "req-123"
