"""Admin-editable application settings backed by ``general_settings``.

Stored rows override the matching config keys, so a deployment can ship a
default support inbox and admins can repoint it without a redeploy.
"""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import GeneralSetting

SUPPORT_EMAIL_KEY = "support_email"

# Setting key -> config key used as the fallback.
CONFIG_FALLBACKS = {SUPPORT_EMAIL_KEY: "SUPPORT_EMAIL"}


def get_setting(key: str, default: str | None = None) -> str | None:
    row = db.session.get(GeneralSetting, key)
    if row is not None and row.value:
        return row.value
    fallback = CONFIG_FALLBACKS.get(key)
    if fallback and current_app.config.get(fallback):
        return current_app.config[fallback]
    return default


def set_setting(key: str, value: str | None, *, updated_by: int | None = None) -> GeneralSetting:
    row = db.session.get(GeneralSetting, key) or GeneralSetting(key=key)
    row.value = (value or "").strip() or None
    row.updated_by = updated_by
    db.session.add(row)
    db.session.commit()
    current_app.logger.info("Setting %s updated by user %s", key, updated_by)
    return row


def describe(key: str) -> dict | None:
    """Audit info for a stored setting, or None when only the config default applies."""

    row = db.session.get(GeneralSetting, key)
    return row.audit_dict() if row is not None else None


def support_recipient() -> str | None:
    """Inbox for contact and feedback mail."""

    return get_setting(SUPPORT_EMAIL_KEY)
