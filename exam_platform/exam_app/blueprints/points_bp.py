"""CAO points calculator."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import current_user, jwt_required
from marshmallow import ValidationError
from werkzeug.exceptions import BadRequest

from ..schemas import GradesUpdateSchema, PointsCalculateSchema
from ..services import points_service

points_bp = Blueprint("points_bp", __name__)

calculate_schema = PointsCalculateSchema()
grades_schema = GradesUpdateSchema()


@points_bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    return jsonify({"errors": err.messages}), HTTPStatus.BAD_REQUEST


@points_bp.get("/ping")
def ping():
    return jsonify({"module": "points", "status": "ok"})


@points_bp.get("")
@jwt_required()
def current_points():
    return jsonify(points_service.calculate_points(points_service.entries_for_user(current_user)))


@points_bp.post("/calculate")
@jwt_required()
def calculate():
    payload = calculate_schema.load(request.get_json() or {})
    entries = payload.get("entries")
    if entries is None:
        entries = points_service.entries_for_user(current_user)
    return jsonify(points_service.calculate_points(entries))


@points_bp.put("/grades")
@jwt_required()
def save_grades():
    payload = grades_schema.load(request.get_json() or {})
    try:
        entries = points_service.save_grades(current_user, payload["grades"])
    except BadRequest as exc:
        return jsonify({"message": exc.description}), HTTPStatus.BAD_REQUEST
    return jsonify(points_service.calculate_points(entries))
