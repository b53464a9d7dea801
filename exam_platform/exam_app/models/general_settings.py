"""Admin-editable key/value settings (support inbox and similar)."""

from __future__ import annotations

from datetime import datetime, timezone

from ..extensions import db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GeneralSetting(db.Model):
    __tablename__ = "general_settings"

    key = db.Column(db.String(64), primary_key=True)
    value = db.Column(db.Text, nullable=True)
    updated_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    editor = db.relationship("User", lazy="joined")

    def audit_dict(self) -> dict:
        return {
            "key": self.key,
            "updated_by": self.editor.email if self.editor else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
