"""Admin blueprint endpoints."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import current_user, jwt_required
from marshmallow import ValidationError
from werkzeug.exceptions import BadRequest, NotFound

from ..models.progress import QUESTION_TYPES
from ..schemas import QuestionUpdateSchema
from ..services import grind_service, question_admin_service, question_service
from ..utils import require_admin

admin_bp = Blueprint("admin_bp", __name__)

question_update_schema = QuestionUpdateSchema()


def _question_type() -> str | None:
    value = request.args.get("question_type", "normal")
    return value if value in QUESTION_TYPES else None


@admin_bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    return jsonify({"errors": err.messages}), HTTPStatus.BAD_REQUEST


@admin_bp.get("/ping")
def ping():
    return jsonify({"module": "admin", "status": "ok"})


@admin_bp.patch("/questions/<int:question_id>")
@jwt_required()
def update_question(question_id: int):
    if not require_admin():
        return jsonify({"message": "Forbidden"}), HTTPStatus.FORBIDDEN
    question_type = _question_type()
    if question_type is None:
        return jsonify({"message": "invalid_question_type"}), HTTPStatus.BAD_REQUEST
    payload = question_update_schema.load(request.get_json() or {})
    try:
        question, entry = question_admin_service.update_question(
            question_id, payload, current_user, question_type
        )
    except NotFound as exc:
        return jsonify({"message": exc.description}), HTTPStatus.NOT_FOUND
    except BadRequest as exc:
        return jsonify({"message": exc.description}), HTTPStatus.BAD_REQUEST
    return jsonify(
        {
            "question": question_service.serialize_question(question),
            "changed": entry is not None,
        }
    )


@admin_bp.get("/questions/<int:question_id>/audit")
@jwt_required()
def question_audit(question_id: int):
    if not require_admin():
        return jsonify({"message": "Forbidden"}), HTTPStatus.FORBIDDEN
    question_type = _question_type()
    if question_type is None:
        return jsonify({"message": "invalid_question_type"}), HTTPStatus.BAD_REQUEST
    try:
        history = question_admin_service.audit_history(question_id, question_type)
    except NotFound as exc:
        return jsonify({"message": exc.description}), HTTPStatus.NOT_FOUND
    return jsonify({"history": history})


@admin_bp.post("/grinds/send-reminders")
@jwt_required()
def send_grind_reminders():
    if not require_admin():
        return jsonify({"message": "Forbidden"}), HTTPStatus.FORBIDDEN
    return jsonify({"sent": grind_service.send_reminders()})


@admin_bp.post("/grinds/send-feedback-requests")
@jwt_required()
def send_grind_feedback_requests():
    if not require_admin():
        return jsonify({"message": "Forbidden"}), HTTPStatus.FORBIDDEN
    return jsonify({"sent": grind_service.send_feedback_requests()})
