"""Question completion events."""

from __future__ import annotations

from datetime import datetime, timezone

from ..extensions import db


def utcnow():
    return datetime.now(timezone.utc)


QUESTION_TYPES = ("normal", "audio")


class QuestionCompletion(db.Model):
    """One "I practiced this" event; a question may be completed many times."""

    __tablename__ = "question_completions"
    __table_args__ = (
        db.CheckConstraint(
            "(question_id IS NOT NULL AND audio_question_id IS NULL)"
            " OR (question_id IS NULL AND audio_question_id IS NOT NULL)",
            name="ck_completion_single_target",
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    question_type = db.Column(db.String(16), nullable=False, default="normal")
    question_id = db.Column(db.Integer, db.ForeignKey("questions.id"), index=True)
    audio_question_id = db.Column(db.Integer, db.ForeignKey("audio_questions.id"), index=True)
    completed_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    question = db.relationship("Question")
    audio_question = db.relationship("AudioQuestion")

    @property
    def target_id(self) -> int:
        return self.audio_question_id if self.question_type == "audio" else self.question_id
