"""Smoke tests for the Flask application factory."""

from __future__ import annotations

import pytest

from exam_app import create_app


@pytest.fixture(scope="module")
def app():
    app = create_app("test")
    yield app


def test_app_creation(app):
    assert app is not None
    assert app.config["TESTING"] is True
    assert app.config["MAIL_ENABLED"] is False


@pytest.mark.parametrize(
    "endpoint",
    [
        "/api/auth/ping",
        "/api/subjects/ping",
        "/api/questions/ping",
        "/api/audio/ping",
        "/api/completions/ping",
        "/api/grinds/ping",
        "/api/billing/ping",
        "/api/settings/ping",
        "/api/onboarding/ping",
        "/api/support/ping",
        "/api/reports/ping",
        "/api/admin/ping",
        "/api/timetable/ping",
        "/api/points/ping",
        "/api/dashboard/ping",
    ],
)
def test_ping_endpoints(app, endpoint):
    client = app.test_client()
    response = client.get(endpoint)
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["status"] == "ok"


def test_missing_token_returns_json_401(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Missing authorization token"


def test_invalid_token_returns_json_401(client):
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid token"


def test_root_admin_created_only_when_configured(app_with_db, client):
    from exam_app.models import User

    client.get("/api/auth/ping")
    assert User.query.filter_by(is_root=True).first() is None

    app_with_db.config.update(
        {
            "ROOT_ADMIN_EMAIL": "Root@Example.com",
            "ROOT_ADMIN_PASSWORD": "RootPass123!",
            "_ROOT_ADMIN_READY": False,
        }
    )
    client.get("/api/auth/ping")
    root = User.query.filter_by(is_root=True).first()
    assert root is not None
    assert root.email == "root@example.com"
    assert root.role == "admin"


def test_seed_catalog_command(app_with_db):
    from exam_app.models import Subject

    runner = app_with_db.test_cli_runner()
    result = runner.invoke(args=["seed-catalog"])
    assert result.exit_code == 0
    assert "Seeded" in result.output
    assert Subject.query.filter_by(name="Mathematics", level="Foundation").first() is not None

    again = runner.invoke(args=["seed-catalog"])
    assert "Seeded 0 subjects." in again.output
