"""Curriculum models: subjects and their topics."""

from __future__ import annotations

from datetime import datetime, timezone

from ..extensions import db


def utcnow():
    return datetime.now(timezone.utc)


LEVELS = ("Higher", "Ordinary", "Foundation")


class Subject(db.Model):
    __tablename__ = "subjects"
    __table_args__ = (db.UniqueConstraint("name", "level", name="uq_subject_name_level"),)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    level = db.Column(db.String(16), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    topics = db.relationship(
        "Topic",
        back_populates="subject",
        order_by="Topic.name",
        cascade="all, delete-orphan",
    )
    audio_topics = db.relationship(
        "AudioTopic",
        back_populates="subject",
        order_by="AudioTopic.name",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Subject {self.name} ({self.level})>"


class Topic(db.Model):
    __tablename__ = "topics"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    subject_id = db.Column(db.Integer, db.ForeignKey("subjects.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    subject = db.relationship("Subject", back_populates="topics")


class AudioTopic(db.Model):
    __tablename__ = "audio_topics"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    subject_id = db.Column(db.Integer, db.ForeignKey("subjects.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    subject = db.relationship("Subject", back_populates="audio_topics")
