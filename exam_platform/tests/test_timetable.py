"""Tests for the personal exam timetable and calendar export."""

from __future__ import annotations

from types import SimpleNamespace

from icalendar import Calendar

from exam_app.services import timetable_service
from exam_app.services.timetable_data import EXAM_TIMETABLE_2026


def _auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _subject(name: str, level: str = "Higher"):
    return SimpleNamespace(name=name, level=level)


def _ids(slots):
    return [slot.id for slot in slots]


def test_level_filter_picks_only_matching_papers():
    foundation = timetable_service.get_exams_for_subjects([_subject("Mathematics", "Foundation")])
    assert _ids(foundation["exams"]) == ["maths-f"]

    irish = timetable_service.get_exams_for_subjects([_subject("Irish")])
    assert _ids(irish["exams"]) == ["irish-p1-h", "irish-p2-h"]


def test_exams_are_unique_and_sorted():
    result = timetable_service.get_exams_for_subjects(
        [_subject("Biology"), _subject("English"), _subject("English"), _subject("Home Economics", "Ordinary")]
    )
    assert _ids(result["exams"]) == ["english-p1", "home-ec", "english-p2", "biology"]


def test_separately_announced_subjects():
    result = timetable_service.get_exams_for_subjects([_subject("Computer Science"), _subject("LCVP")])
    assert result["exams"] == []
    assert result["separately_announced"] == ["Computer Science", "LCVP"]


def test_database_names_map_to_timetable_labels():
    assert timetable_service.timetable_names("Applied Maths") == ("Applied Mathematics",)
    assert timetable_service.timetable_names("Physics") == ("Physics",)
    slots = [slot for slot in EXAM_TIMETABLE_2026 if slot.id == "dcg"]
    result = timetable_service.get_exams_for_subjects(
        [SimpleNamespace(name="Design & Communication Graphics", level="Ordinary")], slots
    )
    assert _ids(result["exams"]) == ["dcg"]


def test_days_include_free_weekdays_and_group_into_weeks():
    exams = timetable_service.get_exams_for_subjects(
        [_subject("English"), _subject("Home Economics", "Ordinary"), _subject("Biology")]
    )["exams"]
    days = timetable_service.group_exams_by_day(exams)
    assert [day["date"] for day in days] == [
        "2026-06-03",
        "2026-06-04",
        "2026-06-05",
        "2026-06-08",
        "2026-06-09",
    ]
    assert [day["is_free_day"] for day in days] == [False, False, True, True, False]
    assert days[0]["day_of_week"] == "Wednesday"

    weeks = timetable_service.group_days_by_week(days)
    assert [len(week["days"]) for week in weeks] == [3, 2]
    assert [week["week_number"] for week in weeks] == [1, 2]

    insights = timetable_service.get_exam_insights(exams, days)
    assert insights["total_exams"] == 4
    assert insights["exam_days"] == 3
    assert insights["free_days"] == 2
    assert insights["busiest_day"] == {"date": "2026-06-03", "label": "Wednesday 3 June", "count": 2}
    assert insights["first_exam"].id == "english-p1"
    assert insights["last_exam"].id == "biology"
    assert insights["morning_exams"] == 1
    assert insights["afternoon_exams"] == 3


def test_empty_timetable():
    assert timetable_service.group_exams_by_day([]) == []
    insights = timetable_service.get_exam_insights([], [])
    assert insights["total_exams"] == 0
    assert insights["busiest_day"] is None


def test_format_helpers():
    assert timetable_service.format_time("09:30") == "9:30am"
    assert timetable_service.format_time("14:00") == "2pm"
    assert timetable_service.format_time("12:10") == "12:10pm"
    assert timetable_service.format_duration("09:30", "12:20") == "2h 50m"
    assert timetable_service.format_duration("12:10", "12:50") == "40m"
    assert timetable_service.format_duration("14:00", "17:00") == "3h"
    assert timetable_service.parse_exam_label("French — Aural") == {
        "subject": "French",
        "paper": None,
        "component": "Aural",
    }
    assert timetable_service.parse_exam_label("English, Paper 1") == {
        "subject": "English",
        "paper": "Paper 1",
        "component": None,
    }
    assert timetable_service.parse_exam_label("Biology")["subject"] == "Biology"


def test_google_calendar_link(app_with_db):
    slot = next(slot for slot in EXAM_TIMETABLE_2026 if slot.id == "english-p1")
    url = timetable_service.google_calendar_url(slot)
    assert "dates=20260603T093000/20260603T122000" in url
    assert "ctz=Europe/Dublin" in url
    assert "text=LC%202026%3A%20English%2C%20Paper%201" in url


def test_build_ics_events(app_with_db):
    slots = [slot for slot in EXAM_TIMETABLE_2026 if slot.id in ("english-p1", "biology")]
    calendar = Calendar.from_ical(timetable_service.build_ics(slots))
    events = list(calendar.walk("VEVENT"))
    assert [str(event["uid"]) for event in events] == [
        "lc2026-english-p1@uncooked.ie",
        "lc2026-biology@uncooked.ie",
    ]
    assert str(events[0]["summary"]) == "LC 2026: English, Paper 1"
    start = events[0].decoded("dtstart")
    assert (start.hour, start.minute) == (9, 30)


def test_timetable_endpoint(client, student_token, catalog):
    headers = _auth_header(student_token)
    client.put(
        "/api/settings/subjects",
        json={"subject_ids": [catalog["maths"], catalog["french"]]},
        headers=headers,
    )
    resp = client.get("/api/timetable", headers=headers)
    assert resp.status_code == 200
    data = resp.get_json()
    assert [exam["id"] for exam in data["exams"]] == ["maths-p1", "maths-p2", "french-written", "french-aural"]
    aural = data["exams"][-1]
    assert aural["duration"] == "40m"
    assert aural["session"] == "morning"
    assert aural["label_component"] == "Aural"
    assert data["insights"]["first_exam"]["id"] == "maths-p1"


def test_calendar_download(client, student_token, catalog):
    headers = _auth_header(student_token)
    client.put("/api/settings/subjects", json={"subject_ids": [catalog["french"]]}, headers=headers)

    full = client.get("/api/timetable/calendar.ics", headers=headers)
    assert full.status_code == 200
    assert full.mimetype == "text/calendar"
    assert 'filename="leaving-cert-2026.ics"' in full.headers["Content-Disposition"]
    assert len(list(Calendar.from_ical(full.data).walk("VEVENT"))) == 2

    single = client.get("/api/timetable/calendar.ics?exam_id=french-aural", headers=headers)
    assert 'filename="french-aural.ics"' in single.headers["Content-Disposition"]
    assert len(list(Calendar.from_ical(single.data).walk("VEVENT"))) == 1

    missing = client.get("/api/timetable/calendar.ics?exam_id=english-p1", headers=headers)
    assert missing.status_code == 404
