"""First-run onboarding: name plus subject selection."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import current_user, jwt_required
from marshmallow import ValidationError
from werkzeug.exceptions import BadRequest

from ..schemas import OnboardingSchema
from ..services import account_service

onboarding_bp = Blueprint("onboarding_bp", __name__)

onboarding_schema = OnboardingSchema()


@onboarding_bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    return jsonify({"errors": err.messages}), HTTPStatus.BAD_REQUEST


@onboarding_bp.get("/ping")
def ping():
    return jsonify({"module": "onboarding", "status": "ok"})


@onboarding_bp.get("/status")
@jwt_required()
def status():
    return jsonify(account_service.onboarding_status(current_user))


@onboarding_bp.post("")
@jwt_required()
def complete():
    payload = onboarding_schema.load(request.get_json() or {})
    try:
        user = account_service.complete_onboarding(current_user, payload["name"], payload["subject_ids"])
    except BadRequest as exc:
        return jsonify({"message": exc.description}), HTTPStatus.BAD_REQUEST
    return jsonify({"user": account_service.serialize_user(user)})
