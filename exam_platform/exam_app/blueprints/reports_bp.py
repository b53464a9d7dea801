"""Question issue reports: student submission and admin triage."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import current_user, jwt_required
from marshmallow import ValidationError
from werkzeug.exceptions import BadRequest, NotFound

from ..schemas import ReportCreateSchema, ReportUpdateSchema
from ..services import report_service
from ..utils import require_admin

reports_bp = Blueprint("reports_bp", __name__)

report_create_schema = ReportCreateSchema()
report_update_schema = ReportUpdateSchema()


@reports_bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    return jsonify({"errors": err.messages}), HTTPStatus.BAD_REQUEST


@reports_bp.get("/ping")
def ping():
    return jsonify({"module": "reports", "status": "ok"})


@reports_bp.post("")
@jwt_required()
def create_report():
    payload = report_create_schema.load(request.get_json() or {})
    try:
        report = report_service.create_report(current_user, payload)
    except NotFound as exc:
        return jsonify({"message": exc.description}), HTTPStatus.NOT_FOUND
    except BadRequest as exc:
        return jsonify({"message": exc.description}), HTTPStatus.BAD_REQUEST
    return jsonify({"report": report_service.serialize_report(report)}), HTTPStatus.CREATED


@reports_bp.get("")
@jwt_required()
def list_reports():
    if not require_admin():
        return jsonify({"message": "Forbidden"}), HTTPStatus.FORBIDDEN
    try:
        reports = report_service.list_reports(request.args.get("status") or None)
    except BadRequest as exc:
        return jsonify({"message": exc.description}), HTTPStatus.BAD_REQUEST
    return jsonify({"reports": [report_service.serialize_report(r) for r in reports]})


@reports_bp.get("/statistics")
@jwt_required()
def statistics():
    if not require_admin():
        return jsonify({"message": "Forbidden"}), HTTPStatus.FORBIDDEN
    return jsonify({"statistics": report_service.report_statistics()})


@reports_bp.patch("/<int:report_id>")
@jwt_required()
def update_report(report_id: int):
    if not require_admin():
        return jsonify({"message": "Forbidden"}), HTTPStatus.FORBIDDEN
    payload = report_update_schema.load(request.get_json() or {})
    try:
        report = report_service.update_report(report_id, payload, current_user)
    except NotFound as exc:
        return jsonify({"message": exc.description}), HTTPStatus.NOT_FOUND
    return jsonify({"report": report_service.serialize_report(report)})
