"""Stripe checkout, billing portal and webhook endpoints."""

from __future__ import annotations

from http import HTTPStatus

import stripe
from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import current_user, jwt_required
from werkzeug.exceptions import BadRequest

from ..services import billing_service

billing_bp = Blueprint("billing_bp", __name__)


@billing_bp.get("/ping")
def ping():
    return jsonify({"module": "billing", "status": "ok"})


@billing_bp.post("/checkout")
@jwt_required()
def create_checkout():
    try:
        url = billing_service.create_checkout_session(current_user)
    except BadRequest as exc:
        return jsonify({"message": exc.description}), HTTPStatus.BAD_REQUEST
    except stripe.StripeError as exc:
        current_app.logger.error("Stripe checkout error for user %s: %s", current_user.id, exc)
        return (
            jsonify({"message": "Could not create checkout session. Please try again."}),
            HTTPStatus.BAD_GATEWAY,
        )
    return jsonify({"url": url})


@billing_bp.post("/portal")
@jwt_required()
def create_portal():
    try:
        url = billing_service.create_portal_session(current_user)
    except BadRequest as exc:
        return jsonify({"message": exc.description}), HTTPStatus.BAD_REQUEST
    except stripe.StripeError as exc:
        current_app.logger.error("Stripe portal error for user %s: %s", current_user.id, exc)
        return (
            jsonify({"message": "Could not open the billing portal. Please try again."}),
            HTTPStatus.BAD_GATEWAY,
        )
    return jsonify({"url": url})


@billing_bp.get("/subscription")
@jwt_required()
def subscription():
    return jsonify({"subscription": billing_service.describe_subscription(current_user)})


@billing_bp.post("/webhook")
def webhook():
    try:
        event = billing_service.construct_event(
            request.get_data(), request.headers.get("Stripe-Signature")
        )
    except billing_service.WebhookSignatureError as exc:
        current_app.logger.warning("Stripe webhook rejected: %s", exc)
        return jsonify({"error": str(exc)}), HTTPStatus.BAD_REQUEST

    try:
        outcome = billing_service.handle_event(event)
    except Exception:
        current_app.logger.exception("Stripe webhook handler failed for %s", event["type"])
        return jsonify({"error": "Webhook handler failed"}), HTTPStatus.INTERNAL_SERVER_ERROR
    current_app.logger.info("Stripe webhook %s %s", event["type"], outcome)
    return jsonify({"received": True})
