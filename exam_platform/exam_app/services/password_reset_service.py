"""Password reset links.

The emailed token is random; only its SHA-256 digest is stored on the user,
so a leaked database row cannot be replayed as a reset link.
"""

from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from urllib.parse import urlencode

from flask import current_app
from werkzeug.exceptions import BadRequest

from ..extensions import db
from ..models import User
from ..utils import hash_password
from . import cache_service, email_templates, mail_service

TOKEN_TTL = timedelta(minutes=30)
REQUEST_COOLDOWN = timedelta(minutes=5)


def _utc(value: datetime | None) -> datetime | None:
    # sqlite hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def token_digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def reset_link(token: str) -> str:
    base = (current_app.config.get("PASSWORD_RESET_URL") or "").strip()
    if not base:
        site = current_app.config.get("SITE_URL", "http://localhost:3000").rstrip("/")
        base = f"{site}/auth/reset-password"
    joiner = "&" if "?" in base else "?"
    return base + joiner + urlencode({"token": token})


def request_password_reset(email: str) -> None:
    """Mail a reset link. Unknown addresses get the same silent success."""

    address = (email or "").strip().lower()
    if not address:
        raise BadRequest("reset_identifier_missing")
    user = User.query.filter_by(email=address).first()
    if user is None:
        current_app.logger.info("Password reset requested for unknown address")
        return

    now = datetime.now(timezone.utc)
    previous = _utc(user.password_reset_requested_at)
    if previous is not None and now - previous < REQUEST_COOLDOWN:
        raise BadRequest("reset_recent")

    token = secrets.token_urlsafe(48)
    user.password_reset_token = token_digest(token)
    user.password_reset_requested_at = now
    user.password_reset_expires_at = now + TOKEN_TTL
    db.session.commit()

    minutes = int(TOKEN_TTL.total_seconds() // 60)
    subject, text, html = email_templates.password_reset(reset_link(token), minutes)
    mail_service.send_best_effort(
        to=user.email,
        subject=subject,
        text=text,
        html=html,
        headers={"X-Mail-Template": "password_reset"},
    )


def confirm_password_reset(token: str, new_password: str) -> User:
    if not token:
        raise BadRequest("reset_token_missing")
    user = User.query.filter_by(password_reset_token=token_digest(token)).first()
    if user is None:
        raise BadRequest("reset_token_invalid")
    expires_at = _utc(user.password_reset_expires_at)
    if expires_at is None or datetime.now(timezone.utc) > expires_at:
        raise BadRequest("reset_token_expired")

    user.password_hash = hash_password(new_password)
    user.password_reset_token = None
    user.password_reset_requested_at = None
    user.password_reset_expires_at = None
    db.session.commit()
    cache_service.invalidate_user(user.id)
    current_app.logger.info("Password reset completed for user %s", user.id)
    return user
