"""Tests for logging/metrics hardening."""

from __future__ import annotations


def test_metrics_endpoint(client):
    client.get("/api/auth/ping")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert b"exam_requests_total" in resp.data


def test_metrics_can_be_disabled(app_with_db, client):
    app_with_db.config["METRICS_ENABLED"] = False
    resp = client.get("/metrics")
    assert resp.status_code == 404


def test_request_id_header(client):
    resp = client.get("/api/auth/ping")
    assert resp.status_code == 200
    assert "X-Request-ID" in resp.headers


def test_request_id_is_echoed(client):
    resp = client.get("/api/auth/ping", headers={"X-Request-ID": "abc123"})
    assert resp.headers["X-Request-ID"] == "abc123"
