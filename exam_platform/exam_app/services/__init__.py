"""Business logic modules (questions, billing, grinds, timetable, etc.)."""

from . import (
    cache_service,
    mail_service,
    settings_service,
    subject_service,
    question_service,
    transcript_service,
    completion_service,
    billing_service,
    grind_service,
    account_service,
    verification_service,
    password_reset_service,
    support_service,
    report_service,
    question_admin_service,
    timetable_service,
    points_service,
    dashboard_service,
)

__all__ = [
    "cache_service",
    "mail_service",
    "settings_service",
    "subject_service",
    "question_service",
    "transcript_service",
    "completion_service",
    "billing_service",
    "grind_service",
    "account_service",
    "verification_service",
    "password_reset_service",
    "support_service",
    "report_service",
    "question_admin_service",
    "timetable_service",
    "points_service",
    "dashboard_service",
]
