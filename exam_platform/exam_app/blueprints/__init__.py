"""REST API blueprints (auth, questions, grinds, billing, etc.)."""

from __future__ import annotations

from .admin_bp import admin_bp
from .audio_bp import audio_bp
from .auth_bp import auth_bp
from .billing_bp import billing_bp
from .completions_bp import completions_bp, stats_bp
from .dashboard_bp import dashboard_bp
from .grinds_bp import grinds_bp
from .metrics_bp import metrics_bp
from .onboarding_bp import onboarding_bp
from .points_bp import points_bp
from .questions_bp import questions_bp
from .reports_bp import reports_bp
from .settings_bp import settings_bp
from .subjects_bp import subjects_bp
from .support_bp import support_bp
from .timetable_bp import timetable_bp

BLUEPRINTS = (
    (auth_bp, "/api/auth"),
    (subjects_bp, "/api/subjects"),
    (questions_bp, "/api/questions"),
    (audio_bp, "/api/audio"),
    (completions_bp, "/api/completions"),
    (stats_bp, "/api/stats"),
    (grinds_bp, "/api/grinds"),
    (billing_bp, "/api/billing"),
    (settings_bp, "/api/settings"),
    (onboarding_bp, "/api/onboarding"),
    (support_bp, "/api/support"),
    (reports_bp, "/api/reports"),
    (admin_bp, "/api/admin"),
    (timetable_bp, "/api/timetable"),
    (points_bp, "/api/points"),
    (dashboard_bp, "/api/dashboard"),
    (metrics_bp, ""),
)

__all__ = [
    "BLUEPRINTS",
    "admin_bp",
    "audio_bp",
    "auth_bp",
    "billing_bp",
    "completions_bp",
    "dashboard_bp",
    "grinds_bp",
    "metrics_bp",
    "onboarding_bp",
    "points_bp",
    "questions_bp",
    "reports_bp",
    "settings_bp",
    "stats_bp",
    "subjects_bp",
    "support_bp",
    "timetable_bp",
]
