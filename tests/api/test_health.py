"""Liveness and readiness endpoint tests."""

from __future__ import annotations

from fastapi.testclient import TestClient


def test_health_reports_checks(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    # No REDIS_URL under test: stores run in memory
    assert resp.json() == {"status": "ok", "checks": {"redis": "not_configured"}}


def test_ready(client: TestClient) -> None:
    assert client.get("/ready").status_code == 200


def test_health_needs_no_auth(client: TestClient) -> None:
    resp = client.get("/health", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 200
