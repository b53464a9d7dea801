"""Subject catalogue: slugs and listing endpoints."""

from __future__ import annotations

import pytest

from exam_app.extensions import db
from exam_app.models import Subject
from exam_app.services import subject_service


@pytest.mark.parametrize(
    ("name", "level", "slug"),
    [
        ("Mathematics", "Higher", "mathematics-higher"),
        ("Applied Maths", "Ordinary", "applied-maths-ordinary"),
        ("Home  Economics", "Higher", "home-economics-higher"),
        ("LCVP", "Higher", "lcvp"),
    ],
)
def test_generate_slug(name, level, slug):
    assert subject_service.generate_slug(name, level) == slug


def test_parse_slug():
    assert subject_service.parse_slug("applied-maths-ordinary") == ("Applied maths", "Ordinary")
    assert subject_service.parse_slug("french-higher") == ("French", "Higher")
    assert subject_service.parse_slug("lcvp") == ("LCVP", "Higher")


def test_list_subjects_includes_slugs(client, catalog):
    resp = client.get("/api/subjects")
    assert resp.status_code == 200
    slugs = [item["slug"] for item in resp.get_json()["subjects"]]
    assert slugs == ["french-higher", "mathematics-higher"]


def test_subject_by_slug_with_topics(client, catalog):
    resp = client.get("/api/subjects/mathematics-higher")
    assert resp.status_code == 200
    subject = resp.get_json()["subject"]
    assert subject["id"] == catalog["maths"]
    assert [topic["name"] for topic in subject["topics"]] == ["Algebra", "Geometry"]

    missing = client.get("/api/subjects/latin-higher")
    assert missing.status_code == 404


def test_subject_slug_matches_punctuated_names(client, app_with_db):
    db.session.add(Subject(name="Phys-Chem", level="Ordinary"))
    db.session.commit()
    resp = client.get("/api/subjects/phys-chem-ordinary")
    assert resp.status_code == 200
    assert resp.get_json()["subject"]["name"] == "Phys-Chem"


def test_topics_and_years(client, catalog):
    topics = client.get(f"/api/subjects/{catalog['maths']}/topics")
    assert [topic["id"] for topic in topics.get_json()["topics"]] == [catalog["algebra"], catalog["geometry"]]

    years = client.get(f"/api/subjects/{catalog['maths']}/years")
    assert years.get_json()["years"] == [2023, 2022, 2021]

    assert client.get("/api/subjects/999/topics").status_code == 404
    assert client.get("/api/subjects/999/years").status_code == 404


def test_audio_subjects(client, catalog):
    resp = client.get("/api/subjects/audio")
    assert [item["id"] for item in resp.get_json()["subjects"]] == [catalog["french"]]
