"""Profile, subject selection and credential changes for the signed-in user."""

from __future__ import annotations

import re

from werkzeug.exceptions import BadRequest

from ..extensions import db
from ..models import Subject, User, UserProfile, UserSubject
from ..utils import hash_password, verify_password
from . import billing_service, cache_service, verification_service
from .subject_service import serialize_subject

NAME_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 6
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
CODE_PATTERN = re.compile(r"^\d{6}$")

_VERIFICATION_MESSAGES = {
    "verification_code_expired": "Verification code has expired. Please request a new one.",
    "verification_code_invalid": "Invalid verification code",
    "verification_attempts_exceeded": "Too many attempts. Please request a new code.",
    "verification_code_missing": "No pending email change for this address",
    "verification_code_recent": "Please wait a minute before requesting another code",
    "verification_resend_limit": "Too many codes requested today. Please try again tomorrow.",
    "email_exists": "This email is already in use",
    "email_same_as_current": "This is already your email address",
    "verification_pending_other": "This email is already in use",
}


def is_valid_email(value: str | None) -> bool:
    return bool(value and EMAIL_PATTERN.match(value))


def ensure_profile(user: User) -> UserProfile:
    if user.profile is None:
        user.profile = UserProfile(user_id=user.id)
        db.session.add(user.profile)
    return user.profile


def serialize_profile(user: User) -> dict | None:
    profile = user.profile
    if profile is None:
        return None
    return {
        "name": profile.name,
        "onboarding_completed": bool(profile.onboarding_completed),
    }


def serialize_user_subjects(user: User) -> list[dict]:
    return [
        {**serialize_subject(link.subject), "grade": link.grade}
        for link in user.subjects
        if link.subject is not None
    ]


def serialize_user(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "is_admin": user.is_admin,
        "is_email_verified": bool(user.is_email_verified),
        "created_at": user.created_at.isoformat() if user.created_at else None,
        "profile": serialize_profile(user),
        "subjects": serialize_user_subjects(user),
        "subscription": billing_service.describe_subscription(user),
    }


def validate_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise BadRequest("Name cannot be empty")
    if len(cleaned) > NAME_MAX_LENGTH:
        raise BadRequest("Name must be less than 100 characters")
    return cleaned


def update_name(user: User, name: str | None) -> UserProfile:
    profile = ensure_profile(user)
    profile.name = validate_name(name)
    db.session.commit()
    cache_service.invalidate_user(user.id)
    return profile


def replace_subjects(user: User, subject_ids, *, commit: bool = True) -> list[UserSubject]:
    """Swap the user's subject set in one transaction; retained subjects keep their grade."""

    wanted: list[int] = []
    for value in subject_ids or []:
        subject_id = int(value)
        if subject_id not in wanted:
            wanted.append(subject_id)
    known = {row.id for row in Subject.query.filter(Subject.id.in_(wanted)).all()} if wanted else set()
    missing = [subject_id for subject_id in wanted if subject_id not in known]
    if missing:
        raise BadRequest("unknown_subject")

    # Retained rows are reused; re-inserting them would collide with uq_user_subject.
    existing = {link.subject_id: link for link in user.subjects}
    user.subjects = [existing.get(subject_id) or UserSubject(subject_id=subject_id) for subject_id in wanted]
    if commit:
        db.session.commit()
        cache_service.invalidate_user(user.id)
    return user.subjects


def _translate(exc: BadRequest) -> BadRequest:
    return BadRequest(_VERIFICATION_MESSAGES.get(exc.description, exc.description))


def request_email_change(user: User, new_email: str, password: str) -> None:
    normalized = (new_email or "").strip().lower()
    if not is_valid_email(normalized):
        raise BadRequest("Please enter a valid email address")
    if not verify_password(password or "", user.password_hash):
        raise BadRequest("Incorrect password")
    try:
        verification_service.request_email_change_code(user, normalized)
    except BadRequest as exc:
        raise _translate(exc) from exc


def resend_email_change(user: User, new_email: str) -> None:
    try:
        verification_service.resend_email_change_code(user, (new_email or "").strip().lower())
    except BadRequest as exc:
        raise _translate(exc) from exc


def verify_email_change(user: User, new_email: str, token: str) -> User:
    if not CODE_PATTERN.match(token or ""):
        raise BadRequest("Invalid verification code")
    try:
        updated = verification_service.confirm_email_change(user, (new_email or "").strip().lower(), token)
    except BadRequest as exc:
        raise _translate(exc) from exc
    cache_service.invalidate_user(user.id)
    return updated


def change_password(user: User, current_password: str, new_password: str, confirm_password: str) -> None:
    if not current_password or not new_password or not confirm_password:
        raise BadRequest("All password fields are required")
    if new_password != confirm_password:
        raise BadRequest("New passwords do not match")
    if len(new_password) < PASSWORD_MIN_LENGTH:
        raise BadRequest("New password must be at least 6 characters")
    if new_password == current_password:
        raise BadRequest("New password must be different from current password")
    if not verify_password(current_password, user.password_hash):
        raise BadRequest("Current password is incorrect")
    user.password_hash = hash_password(new_password)
    db.session.add(user)
    db.session.commit()


def complete_onboarding(user: User, name: str, subject_ids) -> User:
    cleaned = validate_name(name)
    if not subject_ids:
        raise BadRequest("Please select at least one subject")
    profile = ensure_profile(user)
    profile.name = cleaned
    profile.onboarding_completed = True
    replace_subjects(user, subject_ids, commit=False)
    db.session.commit()
    cache_service.invalidate_user(user.id)
    return user


def onboarding_status(user: User) -> dict:
    return {"onboarding_completed": bool(user.profile and user.profile.onboarding_completed)}


def create_student(email: str, password: str) -> User:
    """Create a verified student account once its sign-up code has been consumed."""

    user = User(
        email=email,
        password_hash=hash_password(password),
        role="student",
        is_email_verified=True,
    )
    user.profile = UserProfile()
    db.session.add(user)
    db.session.commit()
    return user


def authenticate(email: str, password: str) -> User | None:
    user = User.query.filter_by(email=(email or "").strip().lower()).first()
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user
