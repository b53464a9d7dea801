"""Tests for question issue reports and admin question edits."""

from __future__ import annotations

from exam_app.extensions import db
from exam_app.models import Question, Topic


def _auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _report(client, token, question_id, report_type="metadata", question_type="normal"):
    return client.post(
        "/api/reports",
        json={
            "question_id": question_id,
            "question_type": question_type,
            "report_type": report_type,
            "description": "The year shown on this question is wrong.",
        },
        headers=_auth_header(token),
    )


def test_student_creates_report(client, student_token, catalog):
    resp = _report(client, student_token, catalog["questions"][0])
    assert resp.status_code == 201
    report = resp.get_json()["report"]
    assert report["status"] == "pending"
    assert report["question_type"] == "normal"
    assert report["question_title"] == "2023 - Paper 1 - Question 1 - (a)"
    assert report["reporter_email"] == "student@example.com"


def test_duplicate_report_rejected(client, student_token, catalog):
    question_id = catalog["questions"][0]
    _report(client, student_token, question_id)
    again = _report(client, student_token, question_id)
    assert again.status_code == 400
    assert again.get_json()["message"] == "You have already reported this issue for this question"
    assert _report(client, student_token, question_id, report_type="other").status_code == 201


def test_report_validation(client, student_token, catalog):
    missing = _report(client, student_token, 9999)
    assert missing.status_code == 404

    short = client.post(
        "/api/reports",
        json={"question_id": catalog["questions"][0], "report_type": "metadata", "description": "bad"},
        headers=_auth_header(student_token),
    )
    assert short.status_code == 400
    assert "description" in short.get_json()["errors"]


def test_admin_triage_and_statistics(client, student_token, admin_token, catalog):
    _report(client, student_token, catalog["questions"][0])
    created = _report(client, student_token, catalog["audio"], "incorrect_topic", "audio").get_json()["report"]
    assert created["question_type"] == "audio"

    admin = _auth_header(admin_token)
    assert client.get("/api/reports", headers=_auth_header(student_token)).status_code == 403

    listing = client.get("/api/reports?status=pending", headers=admin).get_json()
    assert len(listing["reports"]) == 2

    resolved = client.patch(
        f"/api/reports/{created['id']}",
        json={"status": "resolved", "admin_notes": "Topic fixed"},
        headers=admin,
    )
    assert resolved.status_code == 200
    body = resolved.get_json()["report"]
    assert body["status"] == "resolved"
    assert body["resolved_at"] is not None
    assert body["admin_notes"] == "Topic fixed"

    stats = client.get("/api/reports/statistics", headers=admin).get_json()["statistics"]
    assert stats == {
        "total": 2,
        "pending": 1,
        "resolved": 1,
        "dismissed": 0,
        "by_type": {"metadata": 1, "incorrect_topic": 1, "other": 0},
    }

    reopened = client.patch(f"/api/reports/{created['id']}", json={"status": "pending"}, headers=admin)
    assert reopened.get_json()["report"]["resolved_at"] is None

    assert client.get("/api/reports?status=closed", headers=admin).status_code == 400
    assert client.patch("/api/reports/9999", json={"status": "dismissed"}, headers=admin).status_code == 404


def test_admin_edit_recomputes_order_and_audits(client, admin_token, catalog):
    admin = _auth_header(admin_token)
    question_id = catalog["questions"][4]
    resp = client.patch(
        f"/api/admin/questions/{question_id}",
        json={"year": 2024, "topic_ids": [catalog["geometry"]]},
        headers=admin,
    )
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["changed"] is True
    assert data["question"]["year"] == 2024
    assert data["question"]["topics"] == [{"id": catalog["geometry"], "name": "Geometry"}]

    listing = client.get(f"/api/questions?subject_id={catalog['maths']}").get_json()
    assert listing["questions"][0]["id"] == question_id
    assert db.session.get(Question, question_id).sort_key.startswith("7975.")

    unchanged = client.patch(f"/api/admin/questions/{question_id}", json={"year": 2024}, headers=admin)
    assert unchanged.get_json()["changed"] is False

    history = client.get(f"/api/admin/questions/{question_id}/audit", headers=admin).get_json()["history"]
    assert len(history) == 1
    assert history[0]["user_email"] == "admin@example.com"
    assert history[0]["changes"]["before"] == {"year": 2021, "topic_ids": [catalog["algebra"]]}
    assert history[0]["changes"]["after"] == {"year": 2024, "topic_ids": [catalog["geometry"]]}


def test_admin_edit_rejects_foreign_topics(client, admin_token, catalog):
    grammar = Topic(name="Grammar", subject_id=catalog["french"])
    db.session.add(grammar)
    db.session.commit()

    resp = client.patch(
        f"/api/admin/questions/{catalog['questions'][0]}",
        json={"topic_ids": [catalog["algebra"], grammar.id]},
        headers=_auth_header(admin_token),
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "invalid_topic_ids"


def test_admin_edit_audio_question(client, admin_token, catalog):
    admin = _auth_header(admin_token)
    resp = client.patch(
        f"/api/admin/questions/{catalog['audio']}?question_type=audio",
        json={"additional_info": "Section B"},
        headers=admin,
    )
    assert resp.status_code == 200
    assert resp.get_json()["question"]["title"].endswith("- Section B")

    bad_type = client.patch(
        f"/api/admin/questions/{catalog['audio']}?question_type=video",
        json={"additional_info": "x"},
        headers=admin,
    )
    assert bad_type.status_code == 400


def test_admin_routes_forbidden_for_students(client, student_token, catalog):
    resp = client.patch(
        f"/api/admin/questions/{catalog['questions'][0]}",
        json={"year": 2020},
        headers=_auth_header(student_token),
    )
    assert resp.status_code == 403
    missing = client.get("/api/admin/questions/1/audit", headers=_auth_header(student_token))
    assert missing.status_code == 403


def test_admin_send_reminders_endpoint(client, admin_token):
    resp = client.post("/api/admin/grinds/send-reminders", headers=_auth_header(admin_token))
    assert resp.status_code == 200
    assert resp.get_json() == {"sent": 0}


def test_admin_send_feedback_requests_endpoint(client, admin_token, student_token):
    resp = client.post("/api/admin/grinds/send-feedback-requests", headers=_auth_header(admin_token))
    assert resp.status_code == 200
    assert resp.get_json() == {"sent": 0}
    denied = client.post("/api/admin/grinds/send-feedback-requests", headers=_auth_header(student_token))
    assert denied.status_code == 403
