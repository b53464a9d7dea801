"""Completion tracking and practice statistics."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import current_user, jwt_required
from marshmallow import ValidationError
from werkzeug.exceptions import BadRequest, NotFound

from ..schemas import CompletionSchema
from ..services import completion_service

completions_bp = Blueprint("completions_bp", __name__)
stats_bp = Blueprint("stats_bp", __name__)

completion_schema = CompletionSchema()


@completions_bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    return jsonify({"errors": err.messages}), HTTPStatus.BAD_REQUEST


@completions_bp.get("/ping")
def ping():
    return jsonify({"module": "completions", "status": "ok"})


@completions_bp.post("")
@jwt_required()
def add_completion():
    payload = completion_schema.load(request.get_json() or {})
    try:
        count = completion_service.add_completion(
            current_user.id, payload["question_id"], payload["question_type"]
        )
    except NotFound as exc:
        return jsonify({"message": exc.description}), HTTPStatus.NOT_FOUND
    return (
        jsonify({"question_id": payload["question_id"], "count": count}),
        HTTPStatus.CREATED,
    )


@completions_bp.delete("/latest")
@jwt_required()
def undo_latest():
    payload = completion_schema.load(request.get_json() or {})
    try:
        count = completion_service.undo_latest_completion(
            current_user.id, payload["question_id"], payload["question_type"]
        )
    except NotFound as exc:
        return jsonify({"message": exc.description}), HTTPStatus.NOT_FOUND
    return jsonify({"question_id": payload["question_id"], "count": count})


@completions_bp.get("/counts")
@jwt_required()
def counts():
    question_type = request.args.get("question_type", "normal")
    try:
        result = completion_service.completion_counts(current_user.id, question_type)
    except BadRequest as exc:
        return jsonify({"message": exc.description}), HTTPStatus.BAD_REQUEST
    return jsonify({"counts": {str(key): value for key, value in result.items()}})


@stats_bp.get("")
@jwt_required()
def user_stats():
    subject_id = request.args.get("subject_id", type=int)
    try:
        days_ago = completion_service.resolve_period(request.args.get("period"))
    except BadRequest as exc:
        return jsonify({"message": exc.description}), HTTPStatus.BAD_REQUEST
    stats = completion_service.get_user_stats(current_user.id, days_ago, subject_id)
    return jsonify({"period": request.args.get("period", "all"), "stats": stats})
