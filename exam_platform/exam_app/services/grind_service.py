"""Live tutoring sessions: weekly listing, registration and email notices."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from flask import current_app
from sqlalchemy import func
from werkzeug.exceptions import BadRequest, NotFound

from ..extensions import db
from ..models import Grind, GrindRegistration, User
from . import billing_service, cache_service, email_templates, mail_service


_EDITABLE = (
    "title",
    "description",
    "duration_minutes",
    "meeting_url",
    "max_participants",
    "feedback_email_body",
)


class GrindError(Exception):
    def __init__(self, code: str, payload: dict | None = None):
        super().__init__(code)
        self.code = code
        self.payload = payload or {}


class SubscriptionRequired(GrindError):
    pass


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _coerce_aware(value: datetime | None) -> datetime | None:
    if not value:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def week_bounds(week_offset: int = 0, now: datetime | None = None) -> tuple[datetime, datetime]:
    """Monday 00:00 UTC of the current week shifted by ``week_offset`` weeks, and the Monday after."""

    current = now or _now()
    monday = (current - timedelta(days=current.weekday())).replace(hour=0, minute=0, second=0, microsecond=0)
    start = monday + timedelta(weeks=week_offset)
    return start, start + timedelta(days=7)


def _display_name(user: User) -> str:
    if user.profile and user.profile.name:
        return user.profile.name
    return user.email.split("@")[0]


def registration_counts(grind_ids) -> dict[int, int]:
    ids = list(grind_ids)
    if not ids:
        return {}
    rows = (
        db.session.query(GrindRegistration.grind_id, func.count(GrindRegistration.id))
        .filter(GrindRegistration.grind_id.in_(ids))
        .group_by(GrindRegistration.grind_id)
        .all()
    )
    return dict(rows)


def serialize_grind(grind: Grind, registration_count: int = 0, is_registered: bool = False) -> dict:
    scheduled = _coerce_aware(grind.scheduled_at)
    return {
        "id": grind.id,
        "title": grind.title,
        "description": grind.description,
        "scheduled_at": scheduled.isoformat(),
        "ends_at": (scheduled + timedelta(minutes=grind.duration_minutes or 0)).isoformat(),
        "duration_minutes": grind.duration_minutes,
        "meeting_url": grind.meeting_url,
        "max_participants": grind.max_participants,
        "registration_count": registration_count,
        "is_registered": is_registered,
    }


def list_week(user: User | None, week_offset: int = 0) -> dict:
    start, end = week_bounds(week_offset)
    grinds = (
        Grind.query.filter(Grind.scheduled_at >= start, Grind.scheduled_at < end)
        .order_by(Grind.scheduled_at, Grind.id)
        .all()
    )
    counts = registration_counts(g.id for g in grinds)
    registered: set[int] = set()
    if user is not None and grinds:
        registered = {
            row[0]
            for row in db.session.query(GrindRegistration.grind_id)
            .filter(
                GrindRegistration.user_id == user.id,
                GrindRegistration.grind_id.in_([g.id for g in grinds]),
            )
            .all()
        }
    return {
        "week_start": start.isoformat(),
        "week_end": end.isoformat(),
        "week_offset": week_offset,
        "grinds": [serialize_grind(g, counts.get(g.id, 0), g.id in registered) for g in grinds],
    }


def ensure_can_register(user: User) -> None:
    if user.is_admin or billing_service.is_subscription_active(user):
        return
    raise SubscriptionRequired(
        "subscription_required",
        {
            "message": "Active subscription required to register for grinds",
            "subscription": billing_service.describe_subscription(user),
        },
    )


def register(user: User, grind_id: int) -> GrindRegistration:
    ensure_can_register(user)
    grind = db.session.get(Grind, grind_id)
    if grind is None:
        raise NotFound("Grind not found")
    if _coerce_aware(grind.scheduled_at) <= _now():
        raise BadRequest("This grind has already started")
    if GrindRegistration.query.filter_by(grind_id=grind.id, user_id=user.id).first():
        raise BadRequest("You are already registered for this grind")
    if grind.max_participants:
        taken = GrindRegistration.query.filter_by(grind_id=grind.id).count()
        if taken >= grind.max_participants:
            raise BadRequest("This grind is full")

    registration = GrindRegistration(grind_id=grind.id, user_id=user.id)
    db.session.add(registration)
    db.session.commit()
    cache_service.invalidate_user(user.id)

    subject, text, html = email_templates.grind_confirmation(_display_name(user), grind)
    if mail_service.send_best_effort(
        to=user.email,
        subject=subject,
        text=text,
        html=html,
        headers={"X-Mail-Template": "grind_confirmation"},
    ):
        registration.confirmation_email_sent_at = _now()
        db.session.commit()
    else:
        current_app.logger.warning(
            "Confirmation for grind %s was not delivered to user %s", grind.id, user.id
        )
    return registration


def unregister(user: User, grind_id: int) -> None:
    registration = GrindRegistration.query.filter_by(grind_id=grind_id, user_id=user.id).first()
    if registration is None:
        raise NotFound("You are not registered for this grind")
    db.session.delete(registration)
    db.session.commit()
    cache_service.invalidate_user(user.id)


def create_grind(payload: dict, created_by: int | None = None) -> Grind:
    grind = Grind(
        title=payload["title"],
        description=payload.get("description"),
        scheduled_at=payload["scheduled_at"],
        duration_minutes=payload.get("duration_minutes")
        or current_app.config.get("GRIND_DEFAULT_DURATION_MINUTES", 60),
        meeting_url=payload.get("meeting_url"),
        max_participants=payload.get("max_participants"),
        feedback_email_body=payload.get("feedback_email_body"),
        created_by=created_by,
    )
    db.session.add(grind)
    db.session.commit()
    return grind


def update_grind(grind: Grind, payload: dict) -> tuple[Grind, int]:
    """Apply admin edits; returns the grind and how many registrants were told of a new time."""

    previous = _coerce_aware(grind.scheduled_at)
    for field in _EDITABLE:
        if field in payload:
            setattr(grind, field, payload[field])
    rescheduled = False
    if payload.get("scheduled_at") is not None:
        new_time = _coerce_aware(payload["scheduled_at"])
        if new_time != previous:
            grind.scheduled_at = new_time
            for registration in grind.registrations:
                registration.reminder_email_sent_at = None
                registration.feedback_email_sent_at = None
            rescheduled = True
    db.session.add(grind)
    db.session.commit()

    notified = 0
    if rescheduled:
        for registration in grind.registrations:
            subject, text, html = email_templates.grind_rescheduled(
                _display_name(registration.user), grind, previous
            )
            if mail_service.send_best_effort(
                to=registration.user.email,
                subject=subject,
                text=text,
                html=html,
                headers={"X-Mail-Template": "grind_rescheduled"},
            ):
                notified += 1
    return grind, notified


def list_registrations(grind: Grind) -> list[dict]:
    registrations = sorted(grind.registrations, key=lambda r: (_coerce_aware(r.registered_at), r.id))
    return [
        {
            "user_id": registration.user_id,
            "email": registration.user.email,
            "name": _display_name(registration.user),
            "registered_at": _coerce_aware(registration.registered_at).isoformat(),
            "confirmation_email_sent_at": (
                _coerce_aware(registration.confirmation_email_sent_at).isoformat()
                if registration.confirmation_email_sent_at
                else None
            ),
        }
        for registration in registrations
    ]


def _pending(grinds, stamp_column):
    ids = [grind.id for grind in grinds]
    if not ids:
        return []
    return (
        GrindRegistration.query.filter(
            GrindRegistration.grind_id.in_(ids),
            stamp_column.is_(None),
        )
        .order_by(GrindRegistration.grind_id, GrindRegistration.id)
        .all()
    )


def send_reminders(now: datetime | None = None) -> int:
    """Email registrants of grinds starting around the reminder lead time.

    Each registration is stamped with ``reminder_email_sent_at`` only once its
    email is delivered, so failed sends are retried on the next run. Returns
    the number of emails delivered.
    """

    config = current_app.config
    current = now or _now()
    lead = timedelta(minutes=int(config.get("GRIND_REMINDER_LEAD_MINUTES", 120)))
    window = timedelta(minutes=int(config.get("GRIND_REMINDER_WINDOW_MINUTES", 30)))
    grinds = Grind.query.filter(
        Grind.scheduled_at >= current + lead - window,
        Grind.scheduled_at <= current + lead + window,
    ).all()
    pending = _pending(grinds, GrindRegistration.reminder_email_sent_at)
    sent = 0
    for registration in pending:
        subject, text, html = email_templates.grind_reminder(
            _display_name(registration.user), registration.grind
        )
        if mail_service.send_best_effort(
            to=registration.user.email,
            subject=subject,
            text=text,
            html=html,
            headers={"X-Mail-Template": "grind_reminder"},
        ):
            registration.reminder_email_sent_at = current
            sent += 1
    db.session.commit()
    current_app.logger.info(
        "Grind reminders processed grinds=%s pending=%s sent=%s", len(grinds), len(pending), sent
    )
    return sent


def feedback_link(grind: Grind) -> str:
    site = current_app.config.get("SITE_URL", "").rstrip("/")
    return f"{site}/feedback?grind={grind.id}"


def send_feedback_requests(now: datetime | None = None) -> int:
    """Ask attendees of recently finished grinds how the session went."""

    config = current_app.config
    current = now or _now()
    earliest = timedelta(minutes=int(config.get("GRIND_FEEDBACK_MIN_MINUTES", 15)))
    latest = timedelta(minutes=int(config.get("GRIND_FEEDBACK_MAX_MINUTES", 75)))
    # ends_at is computed, so narrow by start time and filter the rest here
    candidates = Grind.query.filter(
        Grind.scheduled_at <= current - earliest,
        Grind.scheduled_at >= current - latest - timedelta(days=1),
    ).all()
    grinds = [
        grind
        for grind in candidates
        if current - latest <= _coerce_aware(grind.ends_at) <= current - earliest
    ]
    pending = _pending(grinds, GrindRegistration.feedback_email_sent_at)
    sent = 0
    for registration in pending:
        grind = registration.grind
        subject, text, html = email_templates.grind_feedback_request(
            _display_name(registration.user),
            grind,
            feedback_link(grind),
            grind.feedback_email_body,
        )
        if mail_service.send_best_effort(
            to=registration.user.email,
            subject=subject,
            text=text,
            html=html,
            headers={"X-Mail-Template": "grind_feedback_request"},
        ):
            registration.feedback_email_sent_at = current
            sent += 1
    db.session.commit()
    current_app.logger.info(
        "Grind feedback requests processed grinds=%s pending=%s sent=%s", len(grinds), len(pending), sent
    )
    return sent
