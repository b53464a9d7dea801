"""Six-digit email codes gating sign-up and email changes.

One ticket row exists per target address. Re-requesting a code reuses the
row, subject to a one-minute cooldown and five sends per rolling day.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone

from flask import current_app
from werkzeug.exceptions import BadRequest

from ..extensions import db
from ..models import EmailVerificationTicket, User
from . import cache_service, email_templates, mail_service

CODE_LENGTH = 6
CODE_TTL = timedelta(minutes=5)
MAX_ATTEMPTS = 5
RESEND_COOLDOWN = timedelta(seconds=60)
RESEND_WINDOW = timedelta(hours=24)
RESEND_DAILY_LIMIT = 5

PURPOSE_SIGNUP = "signup"
PURPOSE_EMAIL_CHANGE = "email_change"


def _utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _ticket(email: str) -> EmailVerificationTicket | None:
    return EmailVerificationTicket.query.filter_by(email=email).first()


def _owned_ticket(email: str, purpose: str, user_id: int | None = None) -> EmailVerificationTicket:
    ticket = _ticket(email)
    if ticket is None or ticket.purpose != purpose or ticket.user_id != user_id:
        raise BadRequest("verification_code_missing")
    return ticket


def _throttle(ticket: EmailVerificationTicket, now: datetime) -> None:
    last_sent = _utc(ticket.last_sent_at)
    if last_sent is None:
        return
    if now - last_sent < RESEND_COOLDOWN:
        raise BadRequest("verification_code_recent")
    if now - last_sent >= RESEND_WINDOW:
        ticket.resend_count = 0
    elif ticket.resend_count >= RESEND_DAILY_LIMIT:
        raise BadRequest("verification_resend_limit")


def _send_new_code(ticket: EmailVerificationTicket, now: datetime) -> None:
    ticket.code = "".join(secrets.choice("0123456789") for _ in range(CODE_LENGTH))
    ticket.expires_at = now + CODE_TTL
    ticket.attempts = 0
    ticket.last_sent_at = now
    ticket.resend_count = (ticket.resend_count or 0) + 1
    db.session.add(ticket)
    db.session.commit()

    minutes = int(CODE_TTL.total_seconds() // 60)
    subject, text, html = email_templates.verification_code(ticket.code, minutes, purpose=ticket.purpose)
    mail_service.send_email(
        to=ticket.email,
        subject=subject,
        text=text,
        html=html,
        headers={"X-Mail-Template": ticket.purpose},
    )


def _verify(ticket: EmailVerificationTicket, code: str) -> None:
    if datetime.now(timezone.utc) > _utc(ticket.expires_at):
        raise BadRequest("verification_code_expired")
    if ticket.attempts >= MAX_ATTEMPTS:
        raise BadRequest("verification_attempts_exceeded")
    if not secrets.compare_digest(ticket.code.encode(), (code or "").strip().encode()):
        ticket.attempts += 1
        db.session.commit()
        raise BadRequest("verification_code_invalid")


def request_signup_code(email: str) -> None:
    address = email.lower()
    if User.query.filter_by(email=address).first():
        raise BadRequest("email_exists")
    now = datetime.now(timezone.utc)
    ticket = _ticket(address)
    if ticket is None:
        ticket = EmailVerificationTicket(email=address, purpose=PURPOSE_SIGNUP)
    elif ticket.purpose != PURPOSE_SIGNUP:
        raise BadRequest("verification_pending_other")
    else:
        _throttle(ticket, now)
    ticket.user_id = None
    _send_new_code(ticket, now)


def consume_signup_code(email: str, code: str) -> EmailVerificationTicket:
    """Check the code and delete the ticket; the caller creates the account."""

    ticket = _owned_ticket(email.lower(), PURPOSE_SIGNUP)
    _verify(ticket, code)
    db.session.delete(ticket)
    db.session.commit()
    return ticket


def request_email_change_code(user: User, new_email: str) -> None:
    address = new_email.lower()
    if address == user.email:
        raise BadRequest("email_same_as_current")
    if User.query.filter_by(email=address).first():
        raise BadRequest("email_exists")

    now = datetime.now(timezone.utc)
    ticket = _ticket(address)
    if ticket is None:
        ticket = EmailVerificationTicket(email=address, purpose=PURPOSE_EMAIL_CHANGE)
    elif ticket.purpose != PURPOSE_EMAIL_CHANGE or ticket.user_id not in (None, user.id):
        raise BadRequest("verification_pending_other")
    else:
        _throttle(ticket, now)
    ticket.user_id = user.id
    _send_new_code(ticket, now)


def resend_email_change_code(user: User, new_email: str) -> None:
    ticket = _owned_ticket(new_email.lower(), PURPOSE_EMAIL_CHANGE, user.id)
    now = datetime.now(timezone.utc)
    _throttle(ticket, now)
    _send_new_code(ticket, now)


def confirm_email_change(user: User, new_email: str, code: str) -> User:
    ticket = _owned_ticket(new_email.lower(), PURPOSE_EMAIL_CHANGE, user.id)
    _verify(ticket, code)

    old_email, user.email = user.email, ticket.email
    user.is_email_verified = True
    db.session.delete(ticket)
    db.session.commit()
    cache_service.invalidate_user(user.id)

    if old_email and old_email.lower() != user.email:
        subject, text, html = email_templates.email_change_notice(old_email, user.email)
        delivered = mail_service.send_best_effort(
            to=old_email,
            subject=subject,
            text=text,
            html=html,
            headers={"X-Mail-Template": "email_change_notice"},
        )
        if not delivered:
            current_app.logger.warning("Email change notice to %s was not delivered", old_email)
    return user
