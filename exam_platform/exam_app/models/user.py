"""User domain models."""

from __future__ import annotations

from datetime import datetime, timezone

from ..extensions import db


def utcnow():
    return datetime.now(timezone.utc)


class User(db.Model):
    """Application user (student or admin) with mirrored billing state."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(32), nullable=False, default="student")
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_root = db.Column(db.Boolean, default=False, nullable=False)
    is_email_verified = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    password_reset_token = db.Column(db.String(255))
    password_reset_requested_at = db.Column(db.DateTime(timezone=True))
    password_reset_expires_at = db.Column(db.DateTime(timezone=True))
    # Billing fields are written only by the Stripe webhook and checkout flow.
    stripe_customer_id = db.Column(db.String(255), unique=True, index=True)
    subscription_id = db.Column(db.String(255))
    subscription_status = db.Column(db.String(32), nullable=False, default="none")
    subscription_current_period_end = db.Column(db.DateTime(timezone=True))
    subscription_cancel_at_period_end = db.Column(db.Boolean, nullable=False, default=False)
    free_grind_credits = db.Column(db.Integer, nullable=False, default=0)

    profile = db.relationship(
        "UserProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    subjects = db.relationship(
        "UserSubject",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="UserSubject.id",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<User {self.email} ({self.role})>"


class UserProfile(db.Model):
    """Display name and onboarding progress for a user."""

    __tablename__ = "user_profiles"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), unique=True, nullable=False)
    name = db.Column(db.String(100))
    onboarding_completed = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    user = db.relationship("User", back_populates="profile")

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<UserProfile user_id={self.user_id} onboarded={self.onboarding_completed}>"


class UserSubject(db.Model):
    """A subject the user is sitting, with an optional predicted grade."""

    __tablename__ = "user_subjects"
    __table_args__ = (db.UniqueConstraint("user_id", "subject_id", name="uq_user_subject"),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    subject_id = db.Column(db.Integer, db.ForeignKey("subjects.id"), nullable=False)
    grade = db.Column(db.String(16))
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    user = db.relationship("User", back_populates="subjects")
    subject = db.relationship("Subject", lazy="joined")


class EmailVerificationTicket(db.Model):
    __tablename__ = "email_verification_tickets"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    purpose = db.Column(db.String(32), nullable=False, default="signup")
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    code = db.Column(db.String(12), nullable=False)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    last_sent_at = db.Column(db.DateTime(timezone=True))
    resend_count = db.Column(db.Integer, default=0, nullable=False)
    attempts = db.Column(db.Integer, default=0, nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<EmailVerificationTicket email={self.email} purpose={self.purpose}>"
