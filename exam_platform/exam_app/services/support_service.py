"""Contact and grind feedback forms delivered to the support inbox."""

from __future__ import annotations

from werkzeug.exceptions import BadRequest

from ..extensions import db
from ..models import Grind, User
from . import email_templates, mail_service, settings_service
from .account_service import NAME_MAX_LENGTH, is_valid_email

CONTACT_CATEGORIES = (
    "General Question",
    "Bug Report",
    "Billing Issue",
    "Feature Request",
    "Other",
)
MESSAGE_MIN_LENGTH = 10
MESSAGE_MAX_LENGTH = 2000


def resolve_sender(user: User | None, name: str | None, email: str | None) -> tuple[str, str]:
    """Signed-in users are identified from their account; guests must supply both fields."""

    if user is not None:
        display = (user.profile.name if user.profile and user.profile.name else "") or user.email.split("@")[0]
        return display, user.email
    cleaned_name = (name or "").strip()
    cleaned_email = (email or "").strip()
    if not cleaned_name:
        raise BadRequest("Name is required")
    if len(cleaned_name) > NAME_MAX_LENGTH:
        raise BadRequest("Name must be less than 100 characters")
    if not is_valid_email(cleaned_email):
        raise BadRequest("Please enter a valid email address")
    return cleaned_name, cleaned_email


def _check_body(value: str, label: str) -> None:
    if len(value) < MESSAGE_MIN_LENGTH:
        raise BadRequest(f"{label} must be at least {MESSAGE_MIN_LENGTH} characters")
    if len(value) > MESSAGE_MAX_LENGTH:
        raise BadRequest(f"{label} must be less than {MESSAGE_MAX_LENGTH} characters")


def _recipient() -> str:
    recipient = settings_service.support_recipient()
    if not recipient:
        raise BadRequest("support_email_not_configured")
    return recipient


def send_contact_message(user: User | None, payload: dict) -> None:
    category = payload.get("category")
    if category not in CONTACT_CATEGORIES:
        raise BadRequest("Please choose a valid category")
    message = (payload.get("message") or "").strip()
    _check_body(message, "Message")
    name, email = resolve_sender(user, payload.get("name"), payload.get("email"))

    subject, text, html = email_templates.contact_message(
        name=name,
        email=email,
        category=category,
        message=message,
        user_id=user.id if user else None,
    )
    mail_service.send_email(
        to=_recipient(),
        subject=subject,
        text=text,
        html=html,
        reply_to=email,
        headers={"X-Support-Form": "contact"},
    )


def send_grind_feedback(user: User | None, payload: dict) -> None:
    grind_id = payload.get("grind_id")
    grind = db.session.get(Grind, grind_id) if grind_id else None
    if grind is None:
        raise BadRequest("Invalid grind session.")
    feedback = (payload.get("feedback") or "").strip()
    if not feedback:
        raise BadRequest("Feedback is required")
    _check_body(feedback, "Feedback")
    name, email = resolve_sender(user, payload.get("name"), payload.get("email"))

    subject, text, html = email_templates.grind_feedback(
        name=name,
        email=email,
        grind=grind,
        feedback=feedback,
    )
    mail_service.send_email(
        to=_recipient(),
        subject=subject,
        text=text,
        html=html,
        reply_to=email,
        headers={"X-Support-Form": "feedback"},
    )
