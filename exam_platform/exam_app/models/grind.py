"""Live tutoring session ("grind") models."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from ..extensions import db


def utcnow():
    return datetime.now(timezone.utc)


class Grind(db.Model):
    __tablename__ = "grinds"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    scheduled_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    duration_minutes = db.Column(db.Integer, nullable=False, default=60)
    meeting_url = db.Column(db.String(512))
    max_participants = db.Column(db.Integer)
    feedback_email_body = db.Column(db.Text)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"))
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    registrations = db.relationship(
        "GrindRegistration",
        back_populates="grind",
        cascade="all, delete-orphan",
    )

    @property
    def ends_at(self) -> datetime:
        return self.scheduled_at + timedelta(minutes=self.duration_minutes or 0)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Grind {self.id} {self.title!r} at {self.scheduled_at}>"


class GrindRegistration(db.Model):
    __tablename__ = "grind_registrations"
    __table_args__ = (db.UniqueConstraint("grind_id", "user_id", name="uq_grind_registration"),)

    id = db.Column(db.Integer, primary_key=True)
    grind_id = db.Column(db.Integer, db.ForeignKey("grinds.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    registered_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    confirmation_email_sent_at = db.Column(db.DateTime(timezone=True))
    reminder_email_sent_at = db.Column(db.DateTime(timezone=True))
    feedback_email_sent_at = db.Column(db.DateTime(timezone=True))

    grind = db.relationship("Grind", back_populates="registrations")
    user = db.relationship("User")
