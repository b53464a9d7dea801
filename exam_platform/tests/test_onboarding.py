"""Tests for first-run onboarding."""

from __future__ import annotations


def _auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def test_onboarding_status_starts_incomplete(client, student_token):
    resp = client.get("/api/onboarding/status", headers=_auth_header(student_token))
    assert resp.status_code == 200
    assert resp.get_json() == {"onboarding_completed": False}


def test_complete_onboarding(client, student_token, catalog):
    headers = _auth_header(student_token)
    resp = client.post(
        "/api/onboarding",
        json={"name": "Niamh", "subject_ids": [catalog["maths"]]},
        headers=headers,
    )
    assert resp.status_code == 200
    user = resp.get_json()["user"]
    assert user["profile"] == {"name": "Niamh", "onboarding_completed": True}
    assert [s["name"] for s in user["subjects"]] == ["Mathematics"]

    status = client.get("/api/onboarding/status", headers=headers)
    assert status.get_json()["onboarding_completed"] is True


def test_onboarding_requires_subjects(client, student_token):
    resp = client.post(
        "/api/onboarding",
        json={"name": "Niamh", "subject_ids": []},
        headers=_auth_header(student_token),
    )
    assert resp.status_code == 400
    assert resp.get_json()["errors"]["subject_ids"] == ["Please select at least one subject"]


def test_onboarding_requires_name(client, student_token, catalog):
    resp = client.post(
        "/api/onboarding",
        json={"name": "", "subject_ids": [catalog["maths"]]},
        headers=_auth_header(student_token),
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Name cannot be empty"
