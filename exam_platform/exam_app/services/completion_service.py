"""Completion events and the statistics derived from them."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import func
from werkzeug.exceptions import BadRequest, NotFound

from ..extensions import db
from ..metrics import record_completion
from ..models import (
    AudioQuestion,
    AudioTopic,
    Question,
    QuestionCompletion,
    Subject,
    Topic,
    audio_question_topics,
    question_topics,
)
from ..models.progress import QUESTION_TYPES
from . import cache_service
from .question_service import format_question_title

PERIOD_DAYS = {"all": None, "year": 365, "month": 30, "week": 7}
RECENT_ACTIVITY_LIMIT = 10
ALL_TIME_DAILY_WINDOW = 30


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _target_column(question_type: str):
    if question_type not in QUESTION_TYPES:
        raise BadRequest("invalid_question_type")
    if question_type == "audio":
        return QuestionCompletion.audio_question_id
    return QuestionCompletion.question_id


def _count_for(user_id: int, question_type: str, question_id: int) -> int:
    column = _target_column(question_type)
    return (
        QuestionCompletion.query.filter(
            QuestionCompletion.user_id == user_id,
            QuestionCompletion.question_type == question_type,
            column == question_id,
        ).count()
    )


def add_completion(user_id: int, question_id: int, question_type: str = "normal") -> int:
    """Record one completion and return the user's new count for the question."""

    _target_column(question_type)
    model = AudioQuestion if question_type == "audio" else Question
    if db.session.get(model, question_id) is None:
        raise NotFound("question_not_found")
    completion = QuestionCompletion(user_id=user_id, question_type=question_type)
    if question_type == "audio":
        completion.audio_question_id = question_id
    else:
        completion.question_id = question_id
    db.session.add(completion)
    db.session.commit()
    record_completion(question_type, "add")
    cache_service.invalidate_user(user_id)
    return _count_for(user_id, question_type, question_id)


def undo_latest_completion(user_id: int, question_id: int, question_type: str = "normal") -> int:
    """Delete the most recent completion of a question and return the new count."""

    column = _target_column(question_type)
    latest = (
        QuestionCompletion.query.filter(
            QuestionCompletion.user_id == user_id,
            QuestionCompletion.question_type == question_type,
            column == question_id,
        )
        .order_by(QuestionCompletion.completed_at.desc(), QuestionCompletion.id.desc())
        .first()
    )
    if latest is None:
        raise NotFound("completion_not_found")
    db.session.delete(latest)
    db.session.commit()
    record_completion(question_type, "undo")
    cache_service.invalidate_user(user_id)
    return _count_for(user_id, question_type, question_id)


def completion_counts(user_id: int, question_type: str = "normal", question_ids=None) -> dict[int, int]:
    column = _target_column(question_type)
    query = db.session.query(column, func.count(QuestionCompletion.id)).filter(
        QuestionCompletion.user_id == user_id,
        QuestionCompletion.question_type == question_type,
    )
    if question_ids is not None:
        query = query.filter(column.in_(list(question_ids)))
    return {target: count for target, count in query.group_by(column).all()}


def resolve_period(period: str | None) -> int | None:
    key = (period or "all").lower()
    if key not in PERIOD_DAYS:
        raise BadRequest("invalid_period")
    return PERIOD_DAYS[key]


def get_user_stats(user_id: int, days_ago: int | None = None, subject_id: int | None = None) -> dict:
    """Aggregate a user's completions, optionally limited to the last ``days_ago`` days."""

    since = _now() - timedelta(days=days_ago) if days_ago else None
    base = QuestionCompletion.query.filter(QuestionCompletion.user_id == user_id)
    if since is not None:
        base = base.filter(QuestionCompletion.completed_at >= since)
    completions = base.order_by(QuestionCompletion.completed_at.desc()).all()

    normal = [c for c in completions if c.question_type == "normal" and c.question is not None]
    audio = [c for c in completions if c.question_type == "audio" and c.audio_question is not None]
    if subject_id:
        normal = [c for c in normal if c.question.subject_id == subject_id]
        audio = [c for c in audio if c.audio_question.subject_id == subject_id]

    return {
        "total_completions": len(normal) + len(audio),
        "unique_questions": len({c.question_id for c in normal}) + len({c.audio_question_id for c in audio}),
        "by_subject": _by_subject(normal, audio, subject_id),
        "by_topic": _by_topic(normal, question_topics.c.question_id, question_topics.c.topic_id, Topic),
        "by_audio_topic": _by_topic(
            audio,
            audio_question_topics.c.audio_question_id,
            audio_question_topics.c.audio_topic_id,
            AudioTopic,
        ),
        "by_year": _by_year(normal),
        "recent_activity": _recent_activity(normal + audio),
        "daily_activity": _daily_activity(normal + audio, days_ago),
    }


def _by_subject(normal, audio, subject_id: int | None) -> list[dict]:
    available = dict(
        db.session.query(Question.subject_id, func.count(Question.id)).group_by(Question.subject_id).all()
    )
    audio_available = dict(
        db.session.query(AudioQuestion.subject_id, func.count(AudioQuestion.id))
        .group_by(AudioQuestion.subject_id)
        .all()
    )
    buckets: dict[int, dict] = {}

    def bucket(sid: int) -> dict:
        if sid not in buckets:
            buckets[sid] = {
                "unique": set(),
                "total": 0,
                "audio_unique": set(),
                "audio_total": 0,
            }
        return buckets[sid]

    for completion in normal:
        entry = bucket(completion.question.subject_id)
        entry["unique"].add(completion.question_id)
        entry["total"] += 1
    for completion in audio:
        entry = bucket(completion.audio_question.subject_id)
        entry["audio_unique"].add(completion.audio_question_id)
        entry["audio_total"] += 1
    if subject_id:
        bucket(subject_id)

    subjects = {s.id: s for s in Subject.query.filter(Subject.id.in_(list(buckets))).all()} if buckets else {}
    rows = []
    for sid, entry in buckets.items():
        subject = subjects.get(sid)
        if subject is None:
            continue
        rows.append(
            {
                "subject_id": sid,
                "subject_name": subject.name,
                "subject_level": subject.level,
                "unique_completed": len(entry["unique"]),
                "total_completions": entry["total"],
                "total_available": available.get(sid, 0),
                "audio_unique_completed": len(entry["audio_unique"]),
                "audio_total_completions": entry["audio_total"],
                "audio_total_available": audio_available.get(sid, 0),
            }
        )
    rows.sort(key=lambda row: (-row["total_completions"] - row["audio_total_completions"], row["subject_name"]))
    return rows


def _by_topic(completions, link_question_col, link_topic_col, topic_model) -> list[dict]:
    if not completions:
        return []
    target_ids = {c.target_id for c in completions}
    links = db.session.query(link_question_col, link_topic_col).filter(link_question_col.in_(target_ids)).all()
    topics_for: dict[int, list[int]] = defaultdict(list)
    for question_id, topic_id in links:
        topics_for[question_id].append(topic_id)

    unique: dict[int, set] = defaultdict(set)
    totals: dict[int, int] = defaultdict(int)
    for completion in completions:
        for topic_id in topics_for.get(completion.target_id, []):
            unique[topic_id].add(completion.target_id)
            totals[topic_id] += 1
    if not totals:
        return []

    topics = {t.id: t for t in topic_model.query.filter(topic_model.id.in_(list(totals))).all()}
    rows = [
        {
            "topic_id": topic_id,
            "topic_name": topics[topic_id].name,
            "subject_id": topics[topic_id].subject_id,
            "unique_completed": len(unique[topic_id]),
            "total_completions": totals[topic_id],
        }
        for topic_id in totals
        if topic_id in topics
    ]
    rows.sort(key=lambda row: (-row["total_completions"], row["topic_name"]))
    return rows


def _by_year(completions) -> list[dict]:
    unique: dict[int, set] = defaultdict(set)
    totals: dict[int, int] = defaultdict(int)
    for completion in completions:
        year = completion.question.year
        unique[year].add(completion.question_id)
        totals[year] += 1
    return [
        {"year": year, "unique_completed": len(unique[year]), "total_completions": totals[year]}
        for year in sorted(totals, reverse=True)
    ]


def _recent_activity(completions) -> list[dict]:
    ordered = sorted(completions, key=lambda c: (_aware(c.completed_at), c.id), reverse=True)
    items = []
    for completion in ordered[:RECENT_ACTIVITY_LIMIT]:
        question = completion.audio_question if completion.question_type == "audio" else completion.question
        items.append(
            {
                "question_id": completion.target_id,
                "question_type": completion.question_type,
                "subject_id": question.subject_id,
                "title": format_question_title(question),
                "completed_at": _aware(completion.completed_at).isoformat(),
            }
        )
    return items


def _daily_activity(completions, days_ago: int | None) -> list[dict]:
    window = days_ago or ALL_TIME_DAILY_WINDOW
    today = _now().date()
    start = today - timedelta(days=window - 1)
    counts: dict[date, int] = defaultdict(int)
    for completion in completions:
        day = _aware(completion.completed_at).date()
        if start <= day <= today:
            counts[day] += 1
    return [
        {"date": (start + timedelta(days=offset)).isoformat(), "count": counts.get(start + timedelta(days=offset), 0)}
        for offset in range(window)
    ]


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
