"""Question issue reports and the admin edit audit trail."""

from __future__ import annotations

from datetime import datetime, timezone

from ..extensions import db


def utcnow():
    return datetime.now(timezone.utc)


REPORT_TYPES = ("metadata", "incorrect_topic", "other")
REPORT_STATUSES = ("pending", "resolved", "dismissed")
AUDIT_ACTIONS = ("update", "delete", "topic_add", "topic_remove")


class QuestionReport(db.Model):
    __tablename__ = "question_reports"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    question_id = db.Column(db.Integer, db.ForeignKey("questions.id"), index=True)
    audio_question_id = db.Column(db.Integer, db.ForeignKey("audio_questions.id"), index=True)
    report_type = db.Column(db.String(32), nullable=False)
    description = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    resolved_by = db.Column(db.Integer, db.ForeignKey("users.id"))
    resolved_at = db.Column(db.DateTime(timezone=True))
    admin_notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    reporter = db.relationship("User", foreign_keys=[user_id])


class QuestionAuditLog(db.Model):
    __tablename__ = "question_audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    question_id = db.Column(db.Integer, db.ForeignKey("questions.id"), index=True)
    audio_question_id = db.Column(db.Integer, db.ForeignKey("audio_questions.id"), index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    action = db.Column(db.String(32), nullable=False)
    changes = db.Column(db.JSON, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False, index=True)
