"""Tests for past-question browsing, filters and cursor pagination."""

from __future__ import annotations

import json
from datetime import timedelta

from flask_jwt_extended import create_access_token

from exam_app.models.question import build_sort_key
from exam_app.services import question_service
from exam_app.services.question_service import QuestionFilters


def _auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def test_parse_filter_params_drops_invalid_values():
    filters = question_service.parse_filter_params(
        {
            "subject_id": "3",
            "q": "  circle theorem ",
            "topics": "1,x,2",
            "years": "2023,0,abc",
            "types": "deferred,bogus",
            "numbers": "4",
        }
    )
    assert filters.subject_id == 3
    assert filters.search_term == "circle theorem"
    assert filters.search_terms == ["circle", "theorem"]
    assert filters.topic_ids == [1, 2]
    assert filters.years == [2023]
    assert filters.exam_types == ["deferred"]
    assert filters.question_numbers == [4]


def test_build_filter_query_omits_empty_values():
    assert question_service.build_filter_query(QuestionFilters()) == ""
    query = question_service.build_filter_query(
        QuestionFilters(subject_id=3, search_term="circle theorem", topic_ids=[1, 2], years=[2023])
    )
    assert query == "subject_id=3&q=circle+theorem&topics=1,2&years=2023"


def test_sort_key_orders_newest_first():
    newer = build_sort_key(2023, 1, "normal", 1, ["a"])
    older = build_sort_key(2022, 1, "normal", 1, ["a"])
    deferred = build_sort_key(2023, 1, "deferred", 1, [])
    assert newer == "7976.01.0.001.a"
    assert newer < deferred < older


def test_format_question_title():
    class Row:
        year = 2023
        paper_number = 1
        exam_type = "deferred"
        question_number = 4
        question_parts = ["a", "b"]
        additional_info = None

    assert question_service.format_question_title(Row) == "2023 - Paper 1 - Deferred - Question 4 - (a), (b)"

    Row.paper_number = None
    Row.exam_type = "normal"
    Row.question_parts = []
    Row.additional_info = "Section A"
    assert question_service.format_question_title(Row) == "2023 - Question 4 - Section A"


def test_merge_pages_keeps_first_position_and_latest_value():
    pages = [
        {"questions": [{"id": 1, "title": "old"}, {"id": 2, "title": "two"}]},
        {"questions": [{"id": 1, "title": "new"}, {"id": 3, "title": "three"}]},
        {"questions": []},
    ]
    merged = question_service.merge_pages(pages)
    assert [item["id"] for item in merged] == [1, 2, 3]
    assert merged[0]["title"] == "new"


def test_list_questions_in_browse_order(client, catalog):
    resp = client.get(f"/api/questions?subject_id={catalog['maths']}")
    assert resp.status_code == 200
    data = resp.get_json()
    assert [q["id"] for q in data["questions"]] == catalog["questions"]
    assert data["total_count"] == 5
    assert data["next_cursor"] is None
    assert data["filters"] == f"subject_id={catalog['maths']}"
    assert "completion_count" not in data["questions"][0]
    assert data["questions"][0]["title"] == "2023 - Paper 1 - Question 1 - (a)"


def test_cursor_walk_visits_every_question_once(client, catalog):
    seen = []
    cursor = None
    pages = 0
    while True:
        url = f"/api/questions?subject_id={catalog['maths']}&limit=2"
        if cursor:
            url += f"&cursor={cursor}"
        data = client.get(url).get_json()
        seen.extend(q["id"] for q in data["questions"])
        pages += 1
        cursor = data["next_cursor"]
        if not cursor:
            break
    assert pages == 3
    assert seen == catalog["questions"]


def test_tampered_cursor_rejected(client, catalog):
    first = client.get(f"/api/questions?subject_id={catalog['maths']}&limit=2").get_json()
    resp = client.get(f"/api/questions?limit=2&cursor={first['next_cursor']}x")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "invalid_cursor"


def test_cursor_from_other_listing_rejected(client, catalog):
    first = client.get(f"/api/questions?subject_id={catalog['maths']}&limit=2").get_json()
    resp = client.get(f"/api/audio/questions?cursor={first['next_cursor']}")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "invalid_cursor"


def test_page_size_is_clamped(app_with_db, catalog):
    filters = QuestionFilters(subject_id=catalog["maths"])
    app_with_db.config["QUESTION_PAGE_MAX"] = 3
    page = question_service.search_questions(question_service.QUESTION_MODELS["normal"], filters, limit=500)
    assert len(page["questions"]) == 3
    assert page["next_cursor"] is not None

    page = question_service.search_questions(question_service.QUESTION_MODELS["normal"], filters, limit=-4)
    assert len(page["questions"]) == 1


def test_zero_limit_clamps_to_one(client, app_with_db, catalog):
    filters = QuestionFilters(subject_id=catalog["maths"])
    page = question_service.search_questions(question_service.QUESTION_MODELS["normal"], filters, limit=0)
    assert len(page["questions"]) == 1

    resp = client.get(f"/api/questions?subject_id={catalog['maths']}&limit=0")
    assert resp.status_code == 200
    assert len(resp.get_json()["questions"]) == 1


def test_stale_token_browses_as_guest(client, app_with_db, catalog):
    with app_with_db.app_context():
        expired = create_access_token(identity="1", expires_delta=timedelta(seconds=-60))
    for token in (expired, "not-a-jwt"):
        resp = client.get(f"/api/questions?subject_id={catalog['maths']}", headers=_auth_header(token))
        assert resp.status_code == 200
        assert resp.get_json()["questions"]


def test_filters_by_search_topic_year_and_type(client, catalog):
    base = f"/api/questions?subject_id={catalog['maths']}"
    q0, q1, q2, q3, q4 = catalog["questions"]

    search = client.get(f"{base}&q=quadratic").get_json()
    assert [q["id"] for q in search["questions"]] == [q0, q2]

    topic = client.get(f"{base}&topics={catalog['algebra']}").get_json()
    assert [q["id"] for q in topic["questions"]] == [q0, q2, q4]

    deferred = client.get(f"{base}&years=2023&types=deferred").get_json()
    assert [q["id"] for q in deferred["questions"]] == [q2]

    numbers = client.get(f"{base}&numbers=4").get_json()
    assert [q["id"] for q in numbers["questions"]] == [q3]

    wildcard = client.get(f"{base}&q=%25").get_json()
    assert wildcard["total_count"] == 0


def test_navigation_lists_titles(client, catalog):
    resp = client.get(f"/api/questions/navigation?subject_id={catalog['maths']}&years=2022")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["total_count"] == 1
    assert data["items"][0]["title"] == "2022 - Paper 2 - Question 4 - (a), (b)"


def test_question_detail_includes_count_for_signed_in_user(client, catalog, student_token):
    question_id = catalog["questions"][1]
    anonymous = client.get(f"/api/questions/{question_id}").get_json()["question"]
    assert "completion_count" not in anonymous
    assert anonymous["topics"] == [{"id": catalog["geometry"], "name": "Geometry"}]

    headers = _auth_header(student_token)
    client.post("/api/completions", json={"question_id": question_id}, headers=headers)
    detail = client.get(f"/api/questions/{question_id}", headers=headers).get_json()["question"]
    assert detail["completion_count"] == 1

    listing = client.get(f"/api/questions?subject_id={catalog['maths']}", headers=headers).get_json()
    counts = {q["id"]: q["completion_count"] for q in listing["questions"]}
    assert counts[question_id] == 1
    assert counts[catalog["questions"][0]] == 0


def test_question_detail_not_found(client):
    resp = client.get("/api/questions/9999")
    assert resp.status_code == 404


def test_audio_listing_and_topics(client, catalog):
    listing = client.get(f"/api/audio/questions?subject_id={catalog['french']}").get_json()
    assert [q["id"] for q in listing["questions"]] == [catalog["audio"]]
    assert listing["questions"][0]["audio_url"].endswith(".mp3")

    topics = client.get(f"/api/audio/subjects/{catalog['french']}/topics").get_json()
    assert [t["name"] for t in topics["topics"]] == ["Daily life"]

    missing = client.get("/api/audio/subjects/9999/topics")
    assert missing.status_code == 404


def test_export_command_merges_all_pages(app_with_db, catalog):
    app_with_db.config["QUESTION_PAGE_SIZE"] = 2
    runner = app_with_db.test_cli_runner()
    result = runner.invoke(args=["questions", "export", "--subject-id", str(catalog["maths"])])
    assert result.exit_code == 0, result.output
    items = json.loads(result.output)
    assert [item["id"] for item in items] == catalog["questions"]
