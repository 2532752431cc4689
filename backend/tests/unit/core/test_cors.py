"""CORS policy: explicit origins get credentials, wildcards do not."""

from __future__ import annotations

import pytest
from accounts.core.cors import parse_origins


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, []),
        ("", []),
        ("*", ["*"]),
        ("http://a.test, https://b.test/", ["http://a.test", "https://b.test"]),
        (["http://a.test", " "], ["http://a.test"]),
    ],
)
def test_parse_origins(raw, expected):
    assert parse_origins(raw) == expected


def test_preflight_allows_credentials_for_listed_origin(app, client):
    resp = client.options(
        "/api/v1/users/login",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"
    assert resp.headers["Access-Control-Allow-Credentials"] == "true"
