"""Tests for Stripe checkout, portal and webhook handling."""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from datetime import datetime, timedelta, timezone

import pytest
import stripe

from exam_app.extensions import db
from exam_app.models import User
from exam_app.services import billing_service


def _auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _signed_headers(payload: str, secret: str = "whsec_test") -> dict[str, str]:
    timestamp = int(time.time())
    signature = hmac.new(
        secret.encode("utf-8"),
        f"{timestamp}.{payload}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return {"Stripe-Signature": f"t={timestamp},v1={signature}"}


def _post_event(client, event_type: str, obj: dict):
    payload = json.dumps({"id": "evt_test", "type": event_type, "data": {"object": obj}})
    return client.post(
        "/api/billing/webhook",
        data=payload,
        content_type="application/json",
        headers=_signed_headers(payload),
    )


@pytest.mark.parametrize(
    ("stripe_status", "expected"),
    [
        ("active", "active"),
        ("unpaid", "past_due"),
        ("paused", "canceled"),
        ("incomplete_expired", "incomplete"),
        ("trialing", "trialing"),
        ("something_new", "none"),
        (None, "none"),
    ],
)
def test_map_status(stripe_status, expected):
    assert billing_service.map_status(stripe_status) == expected


def test_subscription_inactive_after_period_end(app_with_db):
    user = User(email="lapsed@example.com", password_hash="x", subscription_status="active")
    user.subscription_current_period_end = datetime.now(timezone.utc) - timedelta(days=1)
    assert billing_service.is_subscription_active(user) is False
    user.subscription_current_period_end = datetime.now(timezone.utc) + timedelta(days=1)
    assert billing_service.is_subscription_active(user) is True


def test_checkout_creates_customer_and_session(client, student_token, monkeypatch):
    calls = {}

    def fake_customer_create(**kwargs):
        calls["customer"] = kwargs
        return {"id": "cus_new"}

    def fake_session_create(**kwargs):
        calls["session"] = kwargs
        return {"url": "https://checkout.stripe.test/session"}

    monkeypatch.setattr(stripe.Customer, "create", fake_customer_create)
    monkeypatch.setattr(stripe.checkout.Session, "create", fake_session_create)

    resp = client.post("/api/billing/checkout", headers=_auth_header(student_token))
    assert resp.status_code == 200
    assert resp.get_json() == {"url": "https://checkout.stripe.test/session"}
    assert calls["customer"]["email"] == "student@example.com"
    assert calls["session"]["customer"] == "cus_new"
    assert calls["session"]["mode"] == "subscription"
    assert calls["session"]["line_items"] == [{"price": "price_test", "quantity": 1}]

    user = User.query.filter_by(email="student@example.com").first()
    assert user.stripe_customer_id == "cus_new"


def test_checkout_requires_price(app_with_db, client, student_token):
    app_with_db.config["STRIPE_PRICE_ID"] = None
    resp = client.post("/api/billing/checkout", headers=_auth_header(student_token))
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "billing_not_configured"


def test_checkout_stripe_failure_returns_502(client, subscriber_token, monkeypatch):
    def fail(**_kwargs):
        raise stripe.APIConnectionError("network down")

    monkeypatch.setattr(stripe.checkout.Session, "create", fail)
    resp = client.post("/api/billing/checkout", headers=_auth_header(subscriber_token))
    assert resp.status_code == 502


def test_portal_requires_customer(client, student_token):
    resp = client.post("/api/billing/portal", headers=_auth_header(student_token))
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "No subscription found"


def test_portal_for_subscriber(client, subscriber_token, monkeypatch):
    captured = {}

    def fake_portal(**kwargs):
        captured.update(kwargs)
        return {"url": "https://billing.stripe.test/portal"}

    monkeypatch.setattr(stripe.billing_portal.Session, "create", fake_portal)
    resp = client.post("/api/billing/portal", headers=_auth_header(subscriber_token))
    assert resp.status_code == 200
    assert resp.get_json()["url"] == "https://billing.stripe.test/portal"
    assert captured["customer"] == "cus_subscriber"


def test_subscription_endpoint(client, subscriber_token):
    resp = client.get("/api/billing/subscription", headers=_auth_header(subscriber_token))
    assert resp.status_code == 200
    assert resp.get_json()["subscription"] == {
        "status": "active",
        "is_active": True,
        "current_period_end": None,
        "cancel_at_period_end": False,
    }


def test_webhook_requires_signature(client):
    resp = client.post("/api/billing/webhook", data="{}", content_type="application/json")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "missing_signature"


def test_webhook_rejects_bad_signature(client):
    payload = json.dumps({"id": "evt_test", "type": "invoice.payment_failed", "data": {"object": {}}})
    resp = client.post(
        "/api/billing/webhook",
        data=payload,
        content_type="application/json",
        headers=_signed_headers(payload, secret="whsec_wrong"),
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "invalid_signature"


def test_webhook_rejects_invalid_payload(client):
    payload = "not json"
    resp = client.post(
        "/api/billing/webhook",
        data=payload,
        content_type="application/json",
        headers=_signed_headers(payload),
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "invalid_payload"


def test_checkout_completed_activates_subscription(client, student_token):
    user = User.query.filter_by(email="student@example.com").first()
    resp = _post_event(
        client,
        "checkout.session.completed",
        {
            "id": "cs_test",
            "mode": "subscription",
            "customer": "cus_checkout",
            "subscription": "sub_checkout",
            "metadata": {"user_id": str(user.id)},
        },
    )
    assert resp.status_code == 200
    assert resp.get_json() == {"received": True}

    db.session.refresh(user)
    assert user.subscription_status == "active"
    assert user.stripe_customer_id == "cus_checkout"
    assert user.subscription_id == "sub_checkout"


def test_subscription_updated_and_deleted(client, subscriber_token):
    period_end = int((datetime.now(timezone.utc) + timedelta(days=30)).timestamp())
    resp = _post_event(
        client,
        "customer.subscription.updated",
        {
            "id": "sub_live",
            "customer": "cus_subscriber",
            "status": "active",
            "cancel_at_period_end": True,
            "items": {"data": [{"current_period_end": period_end}]},
        },
    )
    assert resp.status_code == 200
    user = User.query.filter_by(email="subscriber@example.com").first()
    db.session.refresh(user)
    assert user.subscription_id == "sub_live"
    assert user.subscription_cancel_at_period_end is True
    assert int(billing_service._coerce_aware(user.subscription_current_period_end).timestamp()) == period_end

    _post_event(client, "customer.subscription.deleted", {"id": "sub_live", "customer": "cus_subscriber"})
    db.session.refresh(user)
    assert user.subscription_status == "canceled"
    assert user.subscription_id is None


def test_payment_failed_marks_past_due(client, subscriber_token):
    resp = _post_event(client, "invoice.payment_failed", {"id": "in_1", "customer": "cus_subscriber"})
    assert resp.status_code == 200
    user = User.query.filter_by(email="subscriber@example.com").first()
    db.session.refresh(user)
    assert user.subscription_status == "past_due"


def test_unknown_event_is_acknowledged(client):
    resp = _post_event(client, "customer.created", {"id": "cus_other"})
    assert resp.status_code == 200
    assert resp.get_json() == {"received": True}


def test_handler_failure_returns_500(client, monkeypatch):
    def explode(_obj):
        raise RuntimeError("database unavailable")

    monkeypatch.setitem(billing_service._HANDLERS, "invoice.payment_failed", explode)
    resp = _post_event(client, "invoice.payment_failed", {"id": "in_2", "customer": "cus_x"})
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Webhook handler failed"}
