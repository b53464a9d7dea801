"""Tests for the CAO points calculator."""

from __future__ import annotations

import pytest

from exam_app.services import points_service


def _auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.parametrize(
    ("grade", "points"),
    [("H1", 100), ("H4", 66), ("H8", 28), ("O1", 56), ("O8", 0), ("Distinction", 66), ("Z9", 0), (None, 0)],
)
def test_points_for_grade(grade, points):
    assert points_service.points_for_grade(grade) == points


def test_maths_bonus_only_for_h1_to_h6():
    assert points_service.maths_bonus("Mathematics", "H6") == 25
    assert points_service.maths_bonus("Maths", "H1") == 25
    assert points_service.maths_bonus("Mathematics", "H7") == 0
    assert points_service.maths_bonus("Mathematics", "O1") == 0
    assert points_service.maths_bonus("Physics", "H1") == 0


def test_default_and_effective_grades():
    assert points_service.default_grade("Higher") == "H3"
    assert points_service.default_grade("Ordinary") == "O3"
    assert points_service.default_grade("Higher", "LCVP") == "Merit"
    assert points_service.effective_grade(None, "Higher") == "H3"
    assert points_service.effective_grade("Merit", "Higher", "Physics") == "H3"
    assert points_service.effective_grade("O2", "Ordinary") == "O2"


def test_grade_stepping():
    assert points_service.next_grade("H3", "up") == "H2"
    assert points_service.next_grade("H1", "up") == "H1"
    assert points_service.next_grade("O8", "down") == "O8"
    assert points_service.next_grade("Merit", "up", "LCVP") == "Distinction"
    assert points_service.next_grade("Pass", "down", "LCVP") == "Pass"
    assert points_service.convert_grade_level("H2", "Ordinary") == "O2"
    assert points_service.convert_grade_level("Merit", "Ordinary") == "Merit"
    assert points_service.grades_for_level("Ordinary")[0] == "O1"


def test_best_six_subjects_count():
    entries = [
        {"subject_name": "Mathematics", "level": "Higher", "grade": "H2"},
        {"subject_name": "English", "level": "Higher", "grade": "H1"},
        {"subject_name": "Irish", "level": "Ordinary", "grade": "O1"},
        {"subject_name": "French", "level": "Higher", "grade": "H3"},
        {"subject_name": "Biology", "level": "Higher", "grade": "H4"},
        {"subject_name": "Chemistry", "level": "Higher", "grade": "H5"},
        {"subject_name": "LCVP", "level": "Higher", "grade": "Pass"},
    ]
    result = points_service.calculate_points(entries)
    maths = result["breakdown"][0]
    assert maths["maths_bonus"] == 25
    assert maths["total_points"] == 113
    assert result["all_subjects_total"] == 113 + 100 + 56 + 77 + 66 + 56 + 28
    assert [row["subject_name"] for row in result["best_subjects"]] == [
        "Mathematics",
        "English",
        "French",
        "Biology",
        "Irish",
        "Chemistry",
    ]
    assert result["total"] == 113 + 100 + 77 + 66 + 56 + 56


def test_calculate_endpoint_with_explicit_entries(client, student_token):
    resp = client.post(
        "/api/points/calculate",
        json={"entries": [{"subject_name": "Mathematics", "level": "Higher", "grade": "H1"}]},
        headers=_auth_header(student_token),
    )
    assert resp.status_code == 200
    assert resp.get_json()["total"] == 125


def test_calculate_endpoint_validates_level(client, student_token):
    resp = client.post(
        "/api/points/calculate",
        json={"entries": [{"subject_name": "Mathematics", "level": "Advanced"}]},
        headers=_auth_header(student_token),
    )
    assert resp.status_code == 400


def test_points_from_saved_grades(client, student_token, catalog):
    headers = _auth_header(student_token)
    client.put(
        "/api/settings/subjects",
        json={"subject_ids": [catalog["maths"], catalog["french"]]},
        headers=headers,
    )

    defaults = client.get("/api/points", headers=headers).get_json()
    assert [row["grade"] for row in defaults["breakdown"]] == ["H3", "H3"]
    assert defaults["total"] == (77 + 25) + 77

    saved = client.put(
        "/api/points/grades",
        json={"grades": {str(catalog["maths"]): "H1"}},
        headers=headers,
    )
    assert saved.status_code == 200
    assert saved.get_json()["total"] == 125 + 77

    fallback = client.post("/api/points/calculate", json={}, headers=headers).get_json()
    assert fallback["total"] == 125 + 77


def test_save_grades_rejects_invalid(client, student_token, catalog):
    headers = _auth_header(student_token)
    client.put("/api/settings/subjects", json={"subject_ids": [catalog["maths"]]}, headers=headers)

    bad_grade = client.put("/api/points/grades", json={"grades": {str(catalog["maths"]): "Merit"}}, headers=headers)
    assert bad_grade.status_code == 400
    assert bad_grade.get_json()["message"] == "invalid_grade"

    not_selected = client.put(
        "/api/points/grades", json={"grades": {str(catalog["french"]): "H1"}}, headers=headers
    )
    assert not_selected.get_json()["message"] == "subject_not_selected"
