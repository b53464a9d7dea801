"""Match a student's subjects against the exam timetable and summarise it."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Sequence
from urllib.parse import quote
from zoneinfo import ZoneInfo

from flask import current_app
from icalendar import Calendar, Event

from .timetable_data import DB_TO_TIMETABLE, EXAM_TIMETABLE_2026, SEPARATELY_ANNOUNCED, ExamSlot

LABEL_SEPARATOR = " — "
MORNING_CUTOFF_HOUR = 13
CALENDAR_NAME = "Leaving Cert 2026"


def level_code(level: str) -> str:
    if level == "Higher":
        return "H"
    if level == "Ordinary":
        return "O"
    return "F"


def timetable_names(db_name: str) -> tuple[str, ...]:
    return DB_TO_TIMETABLE.get(db_name, (db_name,))


def get_exams_for_subjects(
    subjects: Iterable, timetable: Sequence[ExamSlot] = EXAM_TIMETABLE_2026
) -> dict:
    """Return ``{"exams", "separately_announced"}`` for objects with ``name`` and ``level``.

    Exams are unique by id and ordered by date then start time.
    """

    separately_announced: list[str] = []
    matched: dict[str, ExamSlot] = {}
    for subject in subjects:
        name = subject.name
        if name in SEPARATELY_ANNOUNCED:
            if name not in separately_announced:
                separately_announced.append(name)
            continue
        code = level_code(subject.level)
        names = timetable_names(name)
        for slot in timetable:
            if slot.id in matched or code not in slot.levels:
                continue
            if slot.subject_key == name or slot.label.split(LABEL_SEPARATOR)[0] in names:
                matched[slot.id] = slot
    exams = sorted(matched.values(), key=lambda slot: (slot.date, slot.start_time))
    return {"exams": exams, "separately_announced": separately_announced}


def group_exams_by_day(exams: Sequence[ExamSlot]) -> list[dict]:
    """Weekdays from the first to the last exam date; days without exams are free days."""

    if not exams:
        return []
    exam_dates = sorted({slot.date for slot in exams})
    current = date.fromisoformat(exam_dates[0])
    last = date.fromisoformat(exam_dates[-1])
    days = []
    while current <= last:
        if current.weekday() < 5:
            iso = current.isoformat()
            slots = [slot for slot in exams if slot.date == iso]
            days.append(
                {
                    "date": iso,
                    "day_of_week": current.strftime("%A"),
                    "day_of_month": current.day,
                    "month": current.strftime("%B"),
                    "slots": slots,
                    "is_free_day": not slots,
                }
            )
        current += timedelta(days=1)
    return days


def group_days_by_week(days: Sequence[dict]) -> list[dict]:
    weeks: list[dict] = []
    current: list[dict] = []
    for day in days:
        if day["day_of_week"] == "Monday" and current:
            weeks.append({"week_number": len(weeks) + 1, "days": current})
            current = []
        current.append(day)
    if current:
        weeks.append({"week_number": len(weeks) + 1, "days": current})
    return weeks


def _start_hour(slot: ExamSlot) -> int:
    return int(slot.start_time.split(":")[0])


def get_exam_insights(exams: Sequence[ExamSlot], days: Sequence[dict]) -> dict:
    if not exams:
        return {
            "total_exams": 0,
            "exam_days": 0,
            "free_days": 0,
            "busiest_day": None,
            "first_exam": None,
            "last_exam": None,
            "morning_exams": 0,
            "afternoon_exams": 0,
        }
    exam_days = [day for day in days if not day["is_free_day"]]
    busiest = None
    for day in exam_days:
        if busiest is None or len(day["slots"]) > busiest["count"]:
            busiest = {
                "date": day["date"],
                "label": f"{day['day_of_week']} {day['day_of_month']} {day['month']}",
                "count": len(day["slots"]),
            }
    morning = sum(1 for slot in exams if _start_hour(slot) < MORNING_CUTOFF_HOUR)
    return {
        "total_exams": len(exams),
        "exam_days": len(exam_days),
        "free_days": len(days) - len(exam_days),
        "busiest_day": busiest,
        "first_exam": exams[0],
        "last_exam": exams[-1],
        "morning_exams": morning,
        "afternoon_exams": len(exams) - morning,
    }


def format_time(value: str) -> str:
    hour, minute = (int(part) for part in value.split(":"))
    period = "pm" if hour >= 12 else "am"
    display = hour - 12 if hour > 12 else hour
    return f"{display}{period}" if minute == 0 else f"{display}:{minute:02d}{period}"


def _minutes(value: str) -> int:
    hour, minute = (int(part) for part in value.split(":"))
    return hour * 60 + minute


def format_duration(start_time: str, end_time: str) -> str:
    hours, minutes = divmod(_minutes(end_time) - _minutes(start_time), 60)
    if hours == 0:
        return f"{minutes}m"
    if minutes == 0:
        return f"{hours}h"
    return f"{hours}h {minutes}m"


def parse_exam_label(label: str) -> dict:
    """Split ``"French — Aural"`` or ``"English, Paper 1"`` into subject and descriptor."""

    if LABEL_SEPARATOR in label:
        subject, _, descriptor = label.partition(LABEL_SEPARATOR)
        return {"subject": subject, "paper": None, "component": descriptor}
    if ", " in label:
        subject, _, descriptor = label.partition(", ")
        return {"subject": subject, "paper": descriptor, "component": None}
    return {"subject": label, "paper": None, "component": None}


def _local(slot: ExamSlot, value: str) -> datetime:
    tz = ZoneInfo(current_app.config.get("TIMETABLE_TIMEZONE", "Europe/Dublin"))
    return datetime.fromisoformat(f"{slot.date}T{value}").replace(tzinfo=tz)


def google_calendar_url(slot: ExamSlot) -> str:
    compact = slot.date.replace("-", "")
    start = f"{compact}T{slot.start_time.replace(':', '')}00"
    end = f"{compact}T{slot.end_time.replace(':', '')}00"
    tz = current_app.config.get("TIMETABLE_TIMEZONE", "Europe/Dublin")
    return (
        "https://calendar.google.com/calendar/render?action=TEMPLATE"
        f"&text={quote(f'LC 2026: {slot.label}', safe='')}"
        f"&dates={start}/{end}"
        f"&details={quote(f'Leaving Certificate 2026{LABEL_SEPARATOR}{slot.label}', safe='')}"
        f"&ctz={tz}"
    )


def build_ics(slots: Sequence[ExamSlot]) -> bytes:
    domain = current_app.config.get("TIMETABLE_UID_DOMAIN", "uncooked.ie")
    cal = Calendar()
    cal.add("prodid", f"-//{current_app.config.get('APP_NAME', 'Uncooked')}//Exam Timetable//EN")
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("x-wr-calname", CALENDAR_NAME)
    for slot in slots:
        event = Event()
        event.add("uid", f"lc2026-{slot.id}@{domain}")
        event.add("summary", f"LC 2026: {slot.label}")
        event.add("description", f"Leaving Certificate 2026{LABEL_SEPARATOR}{slot.label}")
        event.add("dtstart", _local(slot, slot.start_time))
        event.add("dtend", _local(slot, slot.end_time))
        cal.add_component(event)
    return cal.to_ical()


def serialize_slot(slot: ExamSlot) -> dict:
    payload = slot.to_dict()
    payload.update(
        {
            "start_label": format_time(slot.start_time),
            "end_label": format_time(slot.end_time),
            "duration": format_duration(slot.start_time, slot.end_time),
            "session": "morning" if _start_hour(slot) < MORNING_CUTOFF_HOUR else "afternoon",
            "google_calendar_url": google_calendar_url(slot),
            **{f"label_{key}": value for key, value in parse_exam_label(slot.label).items()},
        }
    )
    return payload


def build_timetable(subjects: Iterable) -> dict:
    """Full timetable view for a student's subjects, ready to serialise."""

    result = get_exams_for_subjects(subjects)
    exams = result["exams"]
    days = group_exams_by_day(exams)
    weeks = group_days_by_week(days)
    insights = get_exam_insights(exams, days)

    def day_payload(day: dict) -> dict:
        return {**day, "slots": [serialize_slot(slot) for slot in day["slots"]]}

    for key in ("first_exam", "last_exam"):
        if insights[key] is not None:
            insights[key] = serialize_slot(insights[key])
    return {
        "exams": [serialize_slot(slot) for slot in exams],
        "days": [day_payload(day) for day in days],
        "weeks": [
            {"week_number": week["week_number"], "days": [day_payload(day) for day in week["days"]]}
            for week in weeks
        ],
        "insights": insights,
        "separately_announced": result["separately_announced"],
    }
