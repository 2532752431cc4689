"""Smoke tests for the health endpoint and error envelope."""

from __future__ import annotations

from tests.helpers.assertions import assert_problem


def test_health_ok(client):
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["status"] == "ok"
    assert data["db"] == "ok"


def test_unknown_route_is_problem_json(client):
    body = assert_problem(client.get("/api/v1/nope"), 404, "not_found")

    assert body["instance"] == "/api/v1/nope"


def test_validation_error_is_422(client):
    resp = client.post("/api/v1/users/login", json={"username": "x" * 300, "password": "p"})

    body = assert_problem(resp, 422, "validation_error")
    assert "username" in body["details"]["errors"]
