"""CAO points calculation from predicted grades."""

from __future__ import annotations

from typing import Iterable

from werkzeug.exceptions import BadRequest

from ..extensions import db
from ..models import User
from . import cache_service

HIGHER_POINTS = {"H1": 100, "H2": 88, "H3": 77, "H4": 66, "H5": 56, "H6": 46, "H7": 37, "H8": 28}
ORDINARY_POINTS = {"O1": 56, "O2": 46, "O3": 37, "O4": 28, "O5": 20, "O6": 12, "O7": 0, "O8": 0}
LCVP_POINTS = {"Distinction": 66, "Merit": 46, "Pass": 28}
LCVP_GRADES = ("Distinction", "Merit", "Pass")

MATHS_SUBJECT_NAMES = ("mathematics", "maths")
MATHS_BONUS = 25
MATHS_BONUS_GRADES = ("H1", "H2", "H3", "H4", "H5", "H6")
COUNTED_SUBJECTS = 6


def is_lcvp(subject_name: str | None) -> bool:
    return (subject_name or "").lower() == "lcvp"


def is_maths(subject_name: str | None) -> bool:
    return (subject_name or "").lower() in MATHS_SUBJECT_NAMES


def points_for_grade(grade: str | None) -> int:
    if not grade:
        return 0
    for table in (HIGHER_POINTS, ORDINARY_POINTS, LCVP_POINTS):
        if grade in table:
            return table[grade]
    return 0


def maths_bonus(subject_name: str, grade: str | None) -> int:
    if is_maths(subject_name) and grade in MATHS_BONUS_GRADES:
        return MATHS_BONUS
    return 0


def is_valid_grade(grade: str | None, subject_name: str | None = None) -> bool:
    if not grade:
        return False
    if is_lcvp(subject_name):
        return grade in LCVP_POINTS
    return grade in HIGHER_POINTS or grade in ORDINARY_POINTS


def default_grade(level: str, subject_name: str | None = None) -> str:
    if is_lcvp(subject_name):
        return "Merit"
    return "H3" if level == "Higher" else "O3"


def effective_grade(stored: str | None, level: str, subject_name: str | None = None) -> str:
    if is_valid_grade(stored, subject_name):
        return stored
    return default_grade(level, subject_name)


def grades_for_level(level: str, subject_name: str | None = None) -> list[str]:
    if is_lcvp(subject_name):
        return list(LCVP_GRADES)
    if level == "Higher":
        return list(HIGHER_POINTS)
    return list(ORDINARY_POINTS)


def next_grade(current: str, direction: str, subject_name: str | None = None) -> str:
    """Step one grade ``up`` (better) or ``down``; boundaries are sticky."""

    if is_lcvp(subject_name):
        if current not in LCVP_GRADES:
            return "Merit"
        index = LCVP_GRADES.index(current)
        index = max(0, index - 1) if direction == "up" else min(len(LCVP_GRADES) - 1, index + 1)
        return LCVP_GRADES[index]
    prefix, number = current[0], int(current[1])
    number = max(1, number - 1) if direction == "up" else min(8, number + 1)
    return f"{prefix}{number}"


def convert_grade_level(grade: str, new_level: str) -> str:
    if grade in LCVP_GRADES:
        return grade
    prefix = "H" if new_level == "Higher" else "O"
    return f"{prefix}{grade[1]}"


def calculate_points(entries: Iterable[dict]) -> dict:
    """Entries carry ``subject_name``, ``level`` and optional ``grade`` (and ``subject_id``)."""

    breakdown = []
    for entry in entries:
        name = entry["subject_name"]
        level = entry.get("level") or "Higher"
        grade = effective_grade(entry.get("grade"), level, name)
        base = points_for_grade(grade)
        bonus = maths_bonus(name, grade)
        breakdown.append(
            {
                "subject_id": entry.get("subject_id"),
                "subject_name": name,
                "level": level,
                "grade": grade,
                "base_points": base,
                "maths_bonus": bonus,
                "total_points": base + bonus,
                "is_lcvp": is_lcvp(name),
            }
        )
    best = sorted(breakdown, key=lambda row: row["total_points"], reverse=True)[:COUNTED_SUBJECTS]
    return {
        "breakdown": breakdown,
        "all_subjects_total": sum(row["total_points"] for row in breakdown),
        "best_subjects": best,
        "total": sum(row["total_points"] for row in best),
    }


def entries_for_user(user: User) -> list[dict]:
    return [
        {
            "subject_id": link.subject_id,
            "subject_name": link.subject.name,
            "level": link.subject.level,
            "grade": link.grade,
        }
        for link in user.subjects
        if link.subject is not None
    ]


def save_grades(user: User, grades: dict[int, str]) -> list[dict]:
    links = {link.subject_id: link for link in user.subjects}
    for subject_id, grade in grades.items():
        link = links.get(int(subject_id))
        if link is None:
            raise BadRequest("subject_not_selected")
        if not is_valid_grade(grade, link.subject.name):
            raise BadRequest("invalid_grade")
        link.grade = grade
    db.session.commit()
    cache_service.invalidate_user(user.id)
    return entries_for_user(user)
