"""Stripe checkout, customer portal and webhook handling.

Webhook events are mapped onto the subscription fields on ``User`` and every
event is counted in the Stripe metrics.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import stripe
from flask import current_app
from werkzeug.exceptions import BadRequest

from ..extensions import db
from ..metrics import record_stripe_event
from ..models import User
from . import cache_service

SUBSCRIPTION_STATUSES = ("none", "active", "past_due", "canceled", "incomplete", "trialing")

_STATUS_MAP = {
    "active": "active",
    "past_due": "past_due",
    "unpaid": "past_due",
    "canceled": "canceled",
    "paused": "canceled",
    "incomplete": "incomplete",
    "incomplete_expired": "incomplete",
    "trialing": "trialing",
}


class WebhookSignatureError(Exception):
    """Raised when a webhook request cannot be authenticated."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _coerce_aware(value: datetime | None) -> datetime | None:
    if not value:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _configure() -> None:
    stripe.api_key = current_app.config.get("STRIPE_SECRET_KEY")


def _value(obj: Any, key: str, default: Any = None) -> Any:
    if obj is None:
        return default
    try:
        value = obj[key]
    except (KeyError, TypeError):
        return default
    return default if value is None else value


def _timestamp(value) -> datetime | None:
    if not value:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def map_status(stripe_status: str | None) -> str:
    return _STATUS_MAP.get(stripe_status or "", "none")


def is_subscription_active(user: User) -> bool:
    if user.subscription_status != "active":
        return False
    period_end = _coerce_aware(user.subscription_current_period_end)
    return period_end is None or period_end > _now()


def describe_subscription(user: User) -> dict:
    period_end = _coerce_aware(user.subscription_current_period_end)
    return {
        "status": user.subscription_status or "none",
        "is_active": is_subscription_active(user),
        "current_period_end": period_end.isoformat() if period_end else None,
        "cancel_at_period_end": bool(user.subscription_cancel_at_period_end),
    }


def ensure_customer(user: User) -> str:
    if user.stripe_customer_id:
        return user.stripe_customer_id
    _configure()
    customer = stripe.Customer.create(email=user.email, metadata={"user_id": str(user.id)})
    user.stripe_customer_id = customer["id"]
    db.session.add(user)
    db.session.commit()
    current_app.logger.info("Created Stripe customer %s for user %s", customer["id"], user.id)
    return user.stripe_customer_id


def create_checkout_session(user: User) -> str:
    """Start a hosted subscription checkout and return its URL."""

    config = current_app.config
    price_id = config.get("STRIPE_PRICE_ID")
    if not price_id:
        raise BadRequest("billing_not_configured")
    customer_id = ensure_customer(user)
    _configure()
    site_url = config.get("SITE_URL", "").rstrip("/")
    session = stripe.checkout.Session.create(
        customer=customer_id,
        mode="subscription",
        line_items=[{"price": price_id, "quantity": 1}],
        success_url=f"{site_url}/dashboard/grinds?success=true",
        cancel_url=f"{site_url}/dashboard/settings?canceled=true",
        metadata={"user_id": str(user.id)},
    )
    return session["url"]


def create_portal_session(user: User) -> str:
    if not user.stripe_customer_id:
        raise BadRequest("No subscription found")
    _configure()
    site_url = current_app.config.get("SITE_URL", "").rstrip("/")
    session = stripe.billing_portal.Session.create(
        customer=user.stripe_customer_id,
        return_url=f"{site_url}/dashboard/settings",
    )
    return session["url"]


# Webhook ------------------------------------------------------------------------


def construct_event(payload: bytes, signature: str | None):
    if not signature:
        raise WebhookSignatureError("missing_signature")
    secret = current_app.config.get("STRIPE_WEBHOOK_SECRET")
    if not secret:
        raise WebhookSignatureError("webhook_not_configured")
    try:
        return stripe.Webhook.construct_event(payload, signature, secret)
    except ValueError as exc:
        raise WebhookSignatureError("invalid_payload") from exc
    except stripe.SignatureVerificationError as exc:
        raise WebhookSignatureError("invalid_signature") from exc


def handle_event(event) -> str:
    """Apply one verified webhook event; returns ``handled`` or ``ignored``."""

    event_type = _value(event, "type", "")
    obj = _value(_value(event, "data"), "object")
    handler = _HANDLERS.get(event_type)
    if handler is None:
        record_stripe_event(event_type, "ignored")
        return "ignored"
    try:
        handler(obj)
    except Exception:
        db.session.rollback()
        record_stripe_event(event_type, "error")
        raise
    record_stripe_event(event_type, "handled")
    return "handled"


def _user_for_customer(customer_id: str | None) -> User | None:
    if not customer_id:
        return None
    user = User.query.filter_by(stripe_customer_id=customer_id).first()
    if user is None:
        current_app.logger.warning("No user linked to Stripe customer %s", customer_id)
    return user


def _save(user: User) -> None:
    db.session.add(user)
    db.session.commit()
    cache_service.invalidate_user(user.id)


def _on_checkout_completed(session) -> None:
    if _value(session, "mode") != "subscription":
        return
    user_id = _value(_value(session, "metadata", {}), "user_id")
    user = db.session.get(User, int(user_id)) if user_id else None
    if user is None:
        current_app.logger.warning("Checkout session %s has no known user", _value(session, "id"))
        return
    user.stripe_customer_id = _value(session, "customer") or user.stripe_customer_id
    user.subscription_id = _value(session, "subscription")
    user.subscription_status = "active"
    _save(user)
    current_app.logger.info("Subscription activated for user %s", user.id)


def _period_end(subscription) -> datetime | None:
    value = _value(subscription, "current_period_end")
    if value is None:
        items = _value(_value(subscription, "items"), "data", [])
        if items:
            value = _value(items[0], "current_period_end")
    return _timestamp(value)


def _on_subscription_changed(subscription) -> None:
    user = _user_for_customer(_value(subscription, "customer"))
    if user is None:
        return
    user.subscription_id = _value(subscription, "id")
    user.subscription_status = map_status(_value(subscription, "status"))
    user.subscription_current_period_end = _period_end(subscription)
    user.subscription_cancel_at_period_end = bool(_value(subscription, "cancel_at_period_end", False))
    _save(user)


def _on_subscription_deleted(subscription) -> None:
    user = _user_for_customer(_value(subscription, "customer"))
    if user is None:
        return
    user.subscription_status = "canceled"
    user.subscription_id = None
    user.subscription_current_period_end = None
    user.subscription_cancel_at_period_end = False
    _save(user)


def _on_payment_failed(invoice) -> None:
    user = _user_for_customer(_value(invoice, "customer"))
    if user is None:
        return
    user.subscription_status = "past_due"
    _save(user)


_HANDLERS = {
    "checkout.session.completed": _on_checkout_completed,
    "customer.subscription.created": _on_subscription_changed,
    "customer.subscription.updated": _on_subscription_changed,
    "customer.subscription.deleted": _on_subscription_deleted,
    "invoice.payment_failed": _on_payment_failed,
}
