"""Account settings: display name, email, password and subject selection."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import current_user, jwt_required
from marshmallow import ValidationError
from werkzeug.exceptions import BadRequest

from ..schemas import (
    EmailChangeRequestSchema,
    EmailChangeVerifySchema,
    EmailResendSchema,
    NameUpdateSchema,
    PasswordChangeSchema,
    SubjectSelectionSchema,
)
from ..services import account_service

settings_bp = Blueprint("settings_bp", __name__)

name_schema = NameUpdateSchema()
email_request_schema = EmailChangeRequestSchema()
email_verify_schema = EmailChangeVerifySchema()
email_resend_schema = EmailResendSchema()
password_schema = PasswordChangeSchema()
subject_selection_schema = SubjectSelectionSchema()


@settings_bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    return jsonify({"errors": err.messages}), HTTPStatus.BAD_REQUEST


@settings_bp.errorhandler(BadRequest)
def handle_bad_request(exc: BadRequest):
    return jsonify({"message": exc.description}), HTTPStatus.BAD_REQUEST


@settings_bp.get("/ping")
def ping():
    return jsonify({"module": "settings", "status": "ok"})


@settings_bp.get("")
@jwt_required()
def get_settings():
    return jsonify({"user": account_service.serialize_user(current_user)})


@settings_bp.patch("/name")
@jwt_required()
def update_name():
    payload = name_schema.load(request.get_json() or {})
    profile = account_service.update_name(current_user, payload["name"])
    return jsonify({"message": "Name updated successfully", "name": profile.name})


@settings_bp.post("/email")
@jwt_required()
def request_email_change():
    payload = email_request_schema.load(request.get_json() or {})
    account_service.request_email_change(current_user, payload["new_email"], payload["password"])
    return jsonify({"message": "Verification code sent to your new email address"})


@settings_bp.post("/email/resend")
@jwt_required()
def resend_email_change():
    payload = email_resend_schema.load(request.get_json() or {})
    account_service.resend_email_change(current_user, payload["new_email"])
    return jsonify({"message": "Verification code resent"})


@settings_bp.post("/email/verify")
@jwt_required()
def verify_email_change():
    payload = email_verify_schema.load(request.get_json() or {})
    user = account_service.verify_email_change(current_user, payload["new_email"], payload["token"])
    return jsonify({"message": "Email updated successfully", "email": user.email})


@settings_bp.post("/password")
@jwt_required()
def change_password():
    payload = password_schema.load(request.get_json() or {})
    account_service.change_password(
        current_user,
        payload["current_password"],
        payload["new_password"],
        payload["confirm_password"],
    )
    return jsonify({"message": "Password updated successfully"})


@settings_bp.put("/subjects")
@jwt_required()
def update_subjects():
    payload = subject_selection_schema.load(request.get_json() or {})
    account_service.replace_subjects(current_user, payload["subject_ids"])
    return jsonify({"subjects": account_service.serialize_user_subjects(current_user)})
