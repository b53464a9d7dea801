"""Tests for account settings endpoints."""

from __future__ import annotations

from exam_app.extensions import db
from exam_app.models import EmailVerificationTicket, User
from exam_app.utils.security import verify_password


def _auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def test_get_settings_returns_user(client, student_token):
    resp = client.get("/api/settings", headers=_auth_header(student_token))
    assert resp.status_code == 200
    assert resp.get_json()["user"]["email"] == "student@example.com"


def test_update_name(client, student_token):
    resp = client.patch(
        "/api/settings/name",
        json={"name": "  Aoife Byrne  "},
        headers=_auth_header(student_token),
    )
    assert resp.status_code == 200
    assert resp.get_json() == {"message": "Name updated successfully", "name": "Aoife Byrne"}


def test_update_name_rejects_blank_and_long(client, student_token):
    blank = client.patch("/api/settings/name", json={"name": "   "}, headers=_auth_header(student_token))
    assert blank.status_code == 400
    assert blank.get_json()["message"] == "Name cannot be empty"

    long = client.patch("/api/settings/name", json={"name": "x" * 101}, headers=_auth_header(student_token))
    assert long.status_code == 400
    assert long.get_json()["message"] == "Name must be less than 100 characters"


def test_change_password_rules(client, student_token):
    headers = _auth_header(student_token)
    mismatch = client.post(
        "/api/settings/password",
        json={"current_password": "StrongPass123!", "new_password": "abcdef", "confirm_password": "abcdeg"},
        headers=headers,
    )
    assert mismatch.status_code == 400
    assert mismatch.get_json()["message"] == "New passwords do not match"

    short = client.post(
        "/api/settings/password",
        json={"current_password": "StrongPass123!", "new_password": "abc", "confirm_password": "abc"},
        headers=headers,
    )
    assert short.get_json()["message"] == "New password must be at least 6 characters"

    wrong = client.post(
        "/api/settings/password",
        json={"current_password": "WrongPass", "new_password": "abcdefg", "confirm_password": "abcdefg"},
        headers=headers,
    )
    assert wrong.get_json()["message"] == "Current password is incorrect"

    ok = client.post(
        "/api/settings/password",
        json={"current_password": "StrongPass123!", "new_password": "abcdefg", "confirm_password": "abcdefg"},
        headers=headers,
    )
    assert ok.status_code == 200
    user = User.query.filter_by(email="student@example.com").first()
    assert verify_password("abcdefg", user.password_hash)


def test_email_change_flow_notifies_old_address(client, student_token, outbox):
    headers = _auth_header(student_token)
    resp = client.post(
        "/api/settings/email",
        json={"new_email": "New@Example.com", "password": "StrongPass123!"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert outbox[-1]["to"] == "new@example.com"

    ticket = EmailVerificationTicket.query.filter_by(email="new@example.com").first()
    verify = client.post(
        "/api/settings/email/verify",
        json={"new_email": "new@example.com", "token": ticket.code},
        headers=headers,
    )
    assert verify.status_code == 200
    assert verify.get_json()["email"] == "new@example.com"
    assert outbox[-1]["to"] == "student@example.com"
    assert User.query.filter_by(email="new@example.com").first() is not None


def test_email_change_rejects_taken_address(client, student_token, admin_token):
    resp = client.post(
        "/api/settings/email",
        json={"new_email": "admin@example.com", "password": "StrongPass123!"},
        headers=_auth_header(student_token),
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "This email is already in use"


def test_email_change_requires_password(client, student_token):
    resp = client.post(
        "/api/settings/email",
        json={"new_email": "other@example.com", "password": "nope"},
        headers=_auth_header(student_token),
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Incorrect password"


def test_email_verify_rejects_malformed_code(client, student_token):
    resp = client.post(
        "/api/settings/email/verify",
        json={"new_email": "other@example.com", "token": "12ab"},
        headers=_auth_header(student_token),
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Invalid verification code"


def test_resend_without_pending_change(client, student_token):
    resp = client.post(
        "/api/settings/email/resend",
        json={"new_email": "other@example.com"},
        headers=_auth_header(student_token),
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "No pending email change for this address"


def test_replace_subjects_keeps_grades(client, student_token, catalog):
    headers = _auth_header(student_token)
    resp = client.put(
        "/api/settings/subjects",
        json={"subject_ids": [catalog["maths"], catalog["french"]]},
        headers=headers,
    )
    assert resp.status_code == 200
    assert [s["id"] for s in resp.get_json()["subjects"]] == [catalog["maths"], catalog["french"]]

    user = User.query.filter_by(email="student@example.com").first()
    for link in user.subjects:
        if link.subject_id == catalog["maths"]:
            link.grade = "H2"
    db.session.commit()

    resp = client.put(
        "/api/settings/subjects",
        json={"subject_ids": [catalog["maths"]]},
        headers=headers,
    )
    subjects = resp.get_json()["subjects"]
    assert len(subjects) == 1
    assert subjects[0]["grade"] == "H2"


def test_replace_subjects_unknown_id(client, student_token, catalog):
    resp = client.put(
        "/api/settings/subjects",
        json={"subject_ids": [catalog["maths"], 9999]},
        headers=_auth_header(student_token),
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "unknown_subject"
