"""Grind (live tutoring session) endpoints."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import current_user, jwt_required
from marshmallow import ValidationError
from werkzeug.exceptions import BadRequest, NotFound

from ..extensions import db
from ..models import Grind
from ..schemas import GrindSchema
from ..services import grind_service
from ..utils import require_admin

grinds_bp = Blueprint("grinds_bp", __name__)

grind_schema = GrindSchema()


def _subscription_guard():
    try:
        grind_service.ensure_can_register(current_user)
    except grind_service.SubscriptionRequired as exc:
        payload = {"error": exc.code, **exc.payload}
        return jsonify(payload), HTTPStatus.PAYMENT_REQUIRED
    return None


@grinds_bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    return jsonify({"errors": err.messages}), HTTPStatus.BAD_REQUEST


@grinds_bp.get("/ping")
def ping():
    return jsonify({"module": "grinds", "status": "ok"})


@grinds_bp.get("")
@jwt_required()
def list_grinds():
    week_offset = request.args.get("week_offset", default=0, type=int)
    return jsonify(grind_service.list_week(current_user, week_offset))


@grinds_bp.post("/<int:grind_id>/register")
@jwt_required()
def register(grind_id: int):
    guard = _subscription_guard()
    if guard:
        return guard
    try:
        registration = grind_service.register(current_user, grind_id)
    except NotFound as exc:
        return jsonify({"message": exc.description}), HTTPStatus.NOT_FOUND
    except BadRequest as exc:
        return jsonify({"message": exc.description}), HTTPStatus.BAD_REQUEST
    return (
        jsonify(
            {
                "message": "registered",
                "grind_id": grind_id,
                "confirmation_email_sent": registration.confirmation_email_sent_at is not None,
            }
        ),
        HTTPStatus.CREATED,
    )


@grinds_bp.delete("/<int:grind_id>/register")
@jwt_required()
def unregister(grind_id: int):
    try:
        grind_service.unregister(current_user, grind_id)
    except NotFound as exc:
        return jsonify({"message": exc.description}), HTTPStatus.NOT_FOUND
    return jsonify({"message": "unregistered", "grind_id": grind_id})


@grinds_bp.post("")
@jwt_required()
def create_grind():
    if not require_admin():
        return jsonify({"message": "Forbidden"}), HTTPStatus.FORBIDDEN
    payload = grind_schema.load(request.get_json() or {})
    grind = grind_service.create_grind(payload, created_by=current_user.id)
    return jsonify({"grind": grind_service.serialize_grind(grind)}), HTTPStatus.CREATED


@grinds_bp.patch("/<int:grind_id>")
@jwt_required()
def update_grind(grind_id: int):
    if not require_admin():
        return jsonify({"message": "Forbidden"}), HTTPStatus.FORBIDDEN
    grind = db.session.get(Grind, grind_id)
    if grind is None:
        return jsonify({"message": "Grind not found"}), HTTPStatus.NOT_FOUND
    payload = grind_schema.load(request.get_json() or {}, partial=True)
    grind, notified = grind_service.update_grind(grind, payload)
    count = grind_service.registration_counts([grind.id]).get(grind.id, 0)
    return jsonify({"grind": grind_service.serialize_grind(grind, count), "notified": notified})


@grinds_bp.get("/<int:grind_id>/registrations")
@jwt_required()
def list_registrations(grind_id: int):
    if not require_admin():
        return jsonify({"message": "Forbidden"}), HTTPStatus.FORBIDDEN
    grind = db.session.get(Grind, grind_id)
    if grind is None:
        return jsonify({"message": "Grind not found"}), HTTPStatus.NOT_FOUND
    return jsonify({"registrations": grind_service.list_registrations(grind)})
