"""Dashboard bootstrap: independent loaders fanned out over a thread pool.

A failing loader never fails the request. Its default is returned instead and its
name is listed in ``partial_failures``.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

from flask import current_app

from ..extensions import db
from ..metrics import record_loader_failure
from ..models import User
from . import account_service, billing_service, cache_service, grind_service, subject_service


def _user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise LookupError(f"user {user_id} not found")
    return user


def load_profile(user_id: int):
    return account_service.serialize_profile(_user(user_id))


def load_user_subjects(user_id: int):
    return account_service.serialize_user_subjects(_user(user_id))


def load_subjects(user_id: int):
    return [subject_service.serialize_subject(subject) for subject in subject_service.list_subjects()]


def load_subscription(user_id: int):
    return billing_service.describe_subscription(_user(user_id))


def load_grinds(user_id: int):
    return grind_service.list_week(_user(user_id), 0)["grinds"]


LOADERS: dict[str, Callable[[int], Any]] = {
    "profile": load_profile,
    "user_subjects": load_user_subjects,
    "subjects": load_subjects,
    "subscription": load_subscription,
    "grinds": load_grinds,
}


def _defaults() -> dict[str, Any]:
    return {
        "profile": None,
        "user_subjects": [],
        "subjects": [],
        "subscription": {
            "status": "none",
            "is_active": False,
            "current_period_end": None,
            "cancel_at_period_end": False,
        },
        "grinds": [],
    }


def _run_in_context(app, loader: Callable[[int], Any], user_id: int):
    with app.app_context():
        return loader(user_id)


def load_dashboard(user: User) -> dict:
    return cache_service.get_or_load(
        cache_service.user_key(user.id, "dashboard"),
        lambda: _build_snapshot(user),
        cacheable=lambda snapshot: not snapshot["partial_failures"],
    )


def _build_snapshot(user: User) -> dict:
    app = current_app._get_current_object()
    defaults = _defaults()
    data: dict[str, Any] = {}
    failures: list[str] = []
    workers = max(1, int(app.config.get("DASHBOARD_MAX_WORKERS", 5)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {name: pool.submit(_run_in_context, app, loader, user.id) for name, loader in LOADERS.items()}
        for name, future in futures.items():
            try:
                data[name] = future.result()
            except Exception:
                current_app.logger.exception("Dashboard loader %s failed for user %s", name, user.id)
                record_loader_failure(name)
                failures.append(name)
                data[name] = defaults.get(name)

    return {
        **data,
        "is_admin": user.is_admin,
        "partial_failures": failures,
    }
