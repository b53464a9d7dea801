"""Subject lookup, slugs and catalogue listings."""

from __future__ import annotations

import re

from sqlalchemy import func

from ..extensions import db
from ..models import AudioQuestion, AudioTopic, Question, Subject, Topic

LCVP_SLUG = "lcvp"


def generate_slug(name: str, level: str) -> str:
    slug_name = re.sub(r"\s+", "-", name.strip().lower())
    if slug_name == LCVP_SLUG:
        return LCVP_SLUG
    return f"{slug_name}-{level.lower()}"


def parse_slug(slug: str) -> tuple[str, str]:
    """Split a slug into ``(name, level)``; the last segment is the level."""

    if slug == LCVP_SLUG:
        return "LCVP", "Higher"
    parts = slug.split("-")
    level = parts[-1]
    name = " ".join(parts[:-1])
    return name[:1].upper() + name[1:], level[:1].upper() + level[1:]


def serialize_subject(subject: Subject) -> dict:
    return {
        "id": subject.id,
        "name": subject.name,
        "level": subject.level,
        "slug": generate_slug(subject.name, subject.level),
    }


def serialize_topic(topic) -> dict:
    return {"id": topic.id, "name": topic.name, "subject_id": topic.subject_id}


def list_subjects() -> list[Subject]:
    return Subject.query.order_by(Subject.name, Subject.level).all()


def get_subject_by_slug(slug: str) -> Subject | None:
    # Matching on the regenerated slug tolerates names with punctuation such as "Phys-Chem".
    name, level = parse_slug(slug)
    candidate = Subject.query.filter(
        func.lower(Subject.name) == name.lower(),
        func.lower(Subject.level) == level.lower(),
    ).first()
    if candidate:
        return candidate
    for subject in Subject.query.filter(func.lower(Subject.level) == level.lower()).all():
        if generate_slug(subject.name, subject.level) == slug:
            return subject
    return None


def list_topics(subject_id: int) -> list[Topic]:
    return Topic.query.filter_by(subject_id=subject_id).order_by(Topic.name).all()


def list_audio_topics(subject_id: int) -> list[AudioTopic]:
    return AudioTopic.query.filter_by(subject_id=subject_id).order_by(AudioTopic.name).all()


def list_available_years(subject_id: int) -> list[int]:
    rows = (
        db.session.query(Question.year)
        .filter(Question.subject_id == subject_id)
        .distinct()
        .order_by(Question.year.desc())
        .all()
    )
    return [row[0] for row in rows]


def list_subjects_with_audio() -> list[Subject]:
    subject_ids = db.session.query(AudioQuestion.subject_id).distinct()
    return (
        Subject.query.filter(Subject.id.in_(subject_ids))
        .order_by(Subject.name, Subject.level)
        .all()
    )
