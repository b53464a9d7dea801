"""Application configuration objects."""

from __future__ import annotations

import os
from datetime import timedelta
from functools import lru_cache
from typing import Any, Type

from sqlalchemy.pool import NullPool, StaticPool


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


class BaseConfig:
    """Shared defaults across all environments."""

    APP_NAME = "Uncooked"
    SITE_URL = os.getenv("SITE_URL", "http://localhost:3000").rstrip("/")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite+pysqlite:///exam_dev.db",
    )
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change_me")
    JWT_TOKEN_LOCATION = ("headers",)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(
        seconds=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES_SEC", "43200"))
    )
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    METRICS_ENABLED = _flag("METRICS_ENABLED", "true")
    RATE_LIMIT_DEFAULTS = [limit.strip() for limit in os.getenv("RATE_LIMIT_DEFAULTS", "200 per minute;1000 per day").split(";") if limit.strip()]
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = True
    FORM_RATE_LIMIT = os.getenv("FORM_RATE_LIMIT", "5 per hour")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    JSON_SORT_KEYS = False

    QUESTION_PAGE_SIZE = int(os.getenv("QUESTION_PAGE_SIZE", "20"))
    QUESTION_PAGE_MAX = int(os.getenv("QUESTION_PAGE_MAX", "50"))
    CURSOR_SECRET = os.getenv("CURSOR_SECRET") or JWT_SECRET_KEY
    CURSOR_SALT = os.getenv("CURSOR_SALT", "question-cursor")
    CURSOR_TTL_SECONDS = int(os.getenv("CURSOR_TTL_SECONDS", "86400"))

    TRANSCRIPT_FETCH_TIMEOUT = float(os.getenv("TRANSCRIPT_FETCH_TIMEOUT", "10"))
    TRANSCRIPT_FETCH_RETRIES = int(os.getenv("TRANSCRIPT_FETCH_RETRIES", "2"))
    TRANSCRIPT_RETRY_DELAY = float(os.getenv("TRANSCRIPT_RETRY_DELAY", "1.0"))

    DASHBOARD_CACHE_TTL = int(os.getenv("DASHBOARD_CACHE_TTL", "30"))
    DASHBOARD_CACHE_SIZE = int(os.getenv("DASHBOARD_CACHE_SIZE", "1024"))
    DASHBOARD_MAX_WORKERS = int(os.getenv("DASHBOARD_MAX_WORKERS", "5"))

    GRIND_REMINDER_LEAD_MINUTES = int(os.getenv("GRIND_REMINDER_LEAD_MINUTES", "120"))
    GRIND_REMINDER_WINDOW_MINUTES = int(os.getenv("GRIND_REMINDER_WINDOW_MINUTES", "30"))
    GRIND_FEEDBACK_MIN_MINUTES = int(os.getenv("GRIND_FEEDBACK_MIN_MINUTES", "15"))
    GRIND_FEEDBACK_MAX_MINUTES = int(os.getenv("GRIND_FEEDBACK_MAX_MINUTES", "75"))
    GRIND_DEFAULT_DURATION_MINUTES = int(os.getenv("GRIND_DEFAULT_DURATION_MINUTES", "60"))

    STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "")
    STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET", "")
    STRIPE_PRICE_ID = os.getenv("STRIPE_PRICE_ID", "")

    TIMETABLE_TIMEZONE = os.getenv("TIMETABLE_TIMEZONE", "Europe/Dublin")
    TIMETABLE_UID_DOMAIN = os.getenv("TIMETABLE_UID_DOMAIN", "uncooked.ie")

    SUPPORT_EMAIL = os.getenv("SUPPORT_EMAIL", "")
    ROOT_ADMIN_PASSWORD = os.getenv("ROOT_ADMIN_PASSWORD", "")
    ROOT_ADMIN_EMAIL = os.getenv("ROOT_ADMIN_EMAIL", "")
    MAIL_SERVER = os.getenv("MAIL_SERVER", "smtp.example.com")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USE_TLS = _flag("MAIL_USE_TLS", "true")
    MAIL_USE_SSL = _flag("MAIL_USE_SSL", "false")
    MAIL_ENABLED = _flag("MAIL_ENABLED", "true")
    MAIL_TIMEOUT = int(os.getenv("MAIL_TIMEOUT", "30"))
    MAIL_USERNAME = os.getenv("MAIL_USERNAME", "")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD", "")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "noreply@example.com")
    MAIL_DEFAULT_NAME = os.getenv("MAIL_DEFAULT_NAME", "Uncooked")
    MAIL_REPLY_TO = os.getenv("MAIL_REPLY_TO", "")
    PASSWORD_RESET_URL = os.getenv("PASSWORD_RESET_URL", f"{SITE_URL}/auth/reset-password")
    SQLITE_TIMEOUT_SEC = int(os.getenv("SQLITE_TIMEOUT_SEC", "15"))
    SQLITE_BUSY_TIMEOUT_MS = int(os.getenv("SQLITE_BUSY_TIMEOUT_MS", "15000"))
    if SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
        SQLALCHEMY_ENGINE_OPTIONS = {
            "poolclass": NullPool,
            "connect_args": {"timeout": SQLITE_TIMEOUT_SEC, "check_same_thread": False},
        }
    else:
        SQLALCHEMY_ENGINE_OPTIONS = {
            "pool_pre_ping": True,
            "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
            "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", "10")),
            "pool_timeout": int(os.getenv("DB_POOL_TIMEOUT", "30")),
        }


class DevConfig(BaseConfig):
    DEBUG = True


class ProdConfig(BaseConfig):
    DEBUG = False


class TestConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite+pysqlite:///:memory:"
    # A single shared connection keeps the in-memory database alive across sessions.
    SQLALCHEMY_ENGINE_OPTIONS = {
        "poolclass": StaticPool,
        "connect_args": {"check_same_thread": False},
    }
    JWT_SECRET_KEY = "test-secret"
    CURSOR_SECRET = "test-cursor-secret"
    MAIL_ENABLED = False
    SUPPORT_EMAIL = "support@example.com"
    STRIPE_SECRET_KEY = "sk_test_dummy"
    STRIPE_WEBHOOK_SECRET = "whsec_test"
    STRIPE_PRICE_ID = "price_test"
    TRANSCRIPT_RETRY_DELAY = 0.0
    DASHBOARD_CACHE_TTL = 0
    # sqlite :memory: shares one connection, so loaders must not overlap.
    DASHBOARD_MAX_WORKERS = 1
    RATELIMIT_STORAGE_URI = "memory://"
    RATE_LIMIT_DEFAULTS: list[str] = []


CONFIG_ALIASES: dict[str, Type[BaseConfig]] = {
    "dev": DevConfig,
    "development": DevConfig,
    "prod": ProdConfig,
    "production": ProdConfig,
    "test": TestConfig,
    "testing": TestConfig,
}


@lru_cache
def resolve_config(name_or_class: Any) -> Any:
    """Resolve config argument to the object expected by `app.config.from_object`."""

    if name_or_class is None:
        return DevConfig
    if isinstance(name_or_class, str):
        return CONFIG_ALIASES.get(name_or_class, name_or_class)
    return name_or_class
