"""
tests/test_health.py -- Integration tests for GET /api/health.

Covers:
  - 200 response with status, version, and components fields
  - components.database reports 'ok' against a live store
  - No authentication required
"""

from __future__ import annotations


def test_health_returns_200_with_components(api_client):
    """Health endpoint returns 200 with status, version, and components."""
    resp = api_client.client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert "version" in data
    assert data["components"] == {"app": "ok", "database": "ok"}


def test_health_reports_degraded_database(api_client, monkeypatch):
    monkeypatch.setattr(api_client.store, "ping", lambda: False)
    data = api_client.client.get("/api/health").json()
    assert data["status"] == "degraded"
    assert data["components"]["database"] == "error"


def test_health_no_auth_required(api_client):
    resp = api_client.client.get("/api/health", headers={})
    assert resp.status_code == 200
