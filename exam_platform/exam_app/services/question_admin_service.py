"""Admin edits to question metadata, recorded in an audit trail."""

from __future__ import annotations

from werkzeug.exceptions import BadRequest, NotFound

from ..extensions import db
from ..models import AudioQuestion, AudioTopic, Question, QuestionAuditLog, Topic, User

EDITABLE_FIELDS = (
    "year",
    "paper_number",
    "question_number",
    "question_parts",
    "exam_type",
    "additional_info",
)


def _models(question_type: str):
    if question_type == "audio":
        return AudioQuestion, AudioTopic, QuestionAuditLog.audio_question_id
    return Question, Topic, QuestionAuditLog.question_id


def get_question_or_404(question_id: int, question_type: str = "normal"):
    model, _, _ = _models(question_type)
    question = db.session.get(model, question_id)
    if question is None:
        raise NotFound("Question not found")
    return question


def update_question(question_id: int, payload: dict, admin: User, question_type: str = "normal"):
    """Apply ``payload`` and log the fields that actually changed.

    ``topic_ids`` replaces the whole topic set; ids must belong to the question's subject.
    Returns the question and the audit entry (``None`` when nothing changed).
    """

    question = get_question_or_404(question_id, question_type)
    _, topic_model, _ = _models(question_type)
    before: dict = {}
    after: dict = {}

    for field in EDITABLE_FIELDS:
        if field not in payload:
            continue
        new_value = payload[field]
        if field == "question_parts":
            new_value = list(new_value or [])
        old_value = getattr(question, field)
        if field == "question_parts":
            old_value = list(old_value or [])
        if new_value != old_value:
            before[field] = old_value
            after[field] = new_value
            setattr(question, field, new_value)

    if "topic_ids" in payload:
        wanted = sorted(set(payload["topic_ids"] or []))
        topics = (
            topic_model.query.filter(topic_model.id.in_(wanted)).all() if wanted else []
        )
        if len(topics) != len(wanted) or any(t.subject_id != question.subject_id for t in topics):
            raise BadRequest("invalid_topic_ids")
        current = sorted(t.id for t in question.topics)
        if current != wanted:
            before["topic_ids"] = current
            after["topic_ids"] = wanted
            question.topics = topics

    if not after:
        return question, None

    question.refresh_sort_key()
    entry = QuestionAuditLog(
        user_id=admin.id,
        action="update",
        changes={"before": before, "after": after},
    )
    if question_type == "audio":
        entry.audio_question_id = question.id
    else:
        entry.question_id = question.id
    db.session.add(entry)
    db.session.commit()
    return question, entry


def audit_history(question_id: int, question_type: str = "normal") -> list[dict]:
    get_question_or_404(question_id, question_type)
    _, _, column = _models(question_type)
    entries = (
        QuestionAuditLog.query.filter(column == question_id)
        .order_by(QuestionAuditLog.created_at.desc(), QuestionAuditLog.id.desc())
        .all()
    )
    emails = {}
    user_ids = {entry.user_id for entry in entries}
    if user_ids:
        emails = dict(db.session.query(User.id, User.email).filter(User.id.in_(user_ids)).all())
    return [
        {
            "id": entry.id,
            "action": entry.action,
            "changes": entry.changes,
            "user_id": entry.user_id,
            "user_email": emails.get(entry.user_id),
            "created_at": entry.created_at.isoformat() if entry.created_at else None,
        }
        for entry in entries
    ]
