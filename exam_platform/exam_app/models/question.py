"""Past-paper question models (written and audio)."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import event
from sqlalchemy.orm import declared_attr

from ..extensions import db


def utcnow():
    return datetime.now(timezone.utc)


EXAM_TYPES = ("normal", "deferred", "supplemental")
_EXAM_TYPE_RANK = {name: index for index, name in enumerate(EXAM_TYPES)}


def build_sort_key(
    year: int,
    paper_number: int | None,
    exam_type: str | None,
    question_number: int | None,
    question_parts: list[str] | None,
) -> str:
    """Return a string whose ascending order is the browse order.

    Newest year first, then paper, exam type, question number and parts.
    """

    rank = _EXAM_TYPE_RANK.get(exam_type or "normal", len(EXAM_TYPES))
    parts = ",".join(question_parts or [])
    return (
        f"{9999 - int(year):04d}."
        f"{paper_number or 0:02d}."
        f"{rank}."
        f"{question_number or 0:03d}."
        f"{parts}"
    )


question_topics = db.Table(
    "question_topics",
    db.Column("question_id", db.Integer, db.ForeignKey("questions.id"), primary_key=True),
    db.Column("topic_id", db.Integer, db.ForeignKey("topics.id"), primary_key=True),
)

audio_question_topics = db.Table(
    "audio_question_topics",
    db.Column(
        "audio_question_id", db.Integer, db.ForeignKey("audio_questions.id"), primary_key=True
    ),
    db.Column("audio_topic_id", db.Integer, db.ForeignKey("audio_topics.id"), primary_key=True),
)


class PastPaperMixin:
    year = db.Column(db.Integer, nullable=False, index=True)
    paper_number = db.Column(db.Integer)
    question_number = db.Column(db.Integer)
    question_parts = db.Column(db.JSON, nullable=False, default=list)
    exam_type = db.Column(db.String(16), nullable=False, default="normal")
    additional_info = db.Column(db.String(255))
    sort_key = db.Column(db.String(64), nullable=False, default="", index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    @declared_attr
    def subject_id(cls):
        return db.Column(db.Integer, db.ForeignKey("subjects.id"), nullable=False, index=True)

    @declared_attr
    def subject(cls):
        return db.relationship("Subject")

    def refresh_sort_key(self) -> None:
        self.sort_key = build_sort_key(
            self.year,
            self.paper_number,
            self.exam_type,
            self.question_number,
            self.question_parts,
        )


class Question(PastPaperMixin, db.Model):
    __tablename__ = "questions"

    id = db.Column(db.Integer, primary_key=True)
    full_text = db.Column(db.Text)
    question_image_url = db.Column(db.String(512))
    question_image_width = db.Column(db.Integer)
    question_image_height = db.Column(db.Integer)
    marking_scheme_image_url = db.Column(db.String(512))
    marking_scheme_image_width = db.Column(db.Integer)
    marking_scheme_image_height = db.Column(db.Integer)

    topics = db.relationship("Topic", secondary=question_topics, lazy="selectin", order_by="Topic.name")

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Question {self.id} {self.year} Q{self.question_number}>"


class AudioQuestion(PastPaperMixin, db.Model):
    __tablename__ = "audio_questions"

    id = db.Column(db.Integer, primary_key=True)
    audio_url = db.Column(db.String(512), nullable=False)
    transcript_url = db.Column(db.String(512))

    topics = db.relationship(
        "AudioTopic", secondary=audio_question_topics, lazy="selectin", order_by="AudioTopic.name"
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<AudioQuestion {self.id} {self.year} Q{self.question_number}>"


def _stamp_sort_key(_mapper, _connection, target) -> None:
    target.refresh_sort_key()


for _model in (Question, AudioQuestion):
    event.listen(_model, "before_insert", _stamp_sort_key)
    event.listen(_model, "before_update", _stamp_sort_key)
