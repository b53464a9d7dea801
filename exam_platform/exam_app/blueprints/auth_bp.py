"""Sign-up with emailed codes, login, the current user and password resets."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import current_user, jwt_required
from marshmallow import ValidationError
from werkzeug.exceptions import BadRequest

from ..models import User
from ..schemas import (
    LoginSchema,
    PasswordResetConfirmSchema,
    PasswordResetRequestSchema,
    RegisterSchema,
    VerificationRequestSchema,
)
from ..services import account_service, password_reset_service, verification_service
from ..utils import generate_access_token

auth_bp = Blueprint("auth_bp", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
code_request_schema = VerificationRequestSchema()
reset_request_schema = PasswordResetRequestSchema()
reset_confirm_schema = PasswordResetConfirmSchema()


def _session(user: User) -> dict:
    return {"access_token": generate_access_token(user), "user": account_service.serialize_user(user)}


@auth_bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    return jsonify({"errors": err.messages}), HTTPStatus.BAD_REQUEST


@auth_bp.errorhandler(BadRequest)
def handle_bad_request(exc: BadRequest):
    return jsonify({"message": exc.description}), HTTPStatus.BAD_REQUEST


@auth_bp.get("/ping")
def ping():
    return jsonify({"module": "auth", "status": "ok"})


@auth_bp.post("/register/request-code")
def request_register_code():
    payload = code_request_schema.load(request.get_json() or {})
    verification_service.request_signup_code(payload["email"].lower())
    return jsonify({"message": "sent"})


@auth_bp.post("/register")
def register():
    payload = register_schema.load(request.get_json() or {})
    email = payload["email"].lower()
    if User.query.filter_by(email=email).first():
        return jsonify({"message": "Email already registered"}), HTTPStatus.CONFLICT

    verification_service.consume_signup_code(email, payload["code"])
    user = account_service.create_student(email, payload["password"])
    current_app.logger.info("Registered student %s", user.id)
    return jsonify(_session(user)), HTTPStatus.CREATED


@auth_bp.post("/login")
def login():
    payload = login_schema.load(request.get_json() or {})
    user = account_service.authenticate(payload["email"], payload["password"])
    if user is None:
        return jsonify({"message": "Invalid email or password"}), HTTPStatus.UNAUTHORIZED
    if not user.is_email_verified:
        return jsonify({"error": "email_not_verified", "email": user.email}), HTTPStatus.FORBIDDEN
    if not user.is_active:
        return jsonify({"error": "account_disabled"}), HTTPStatus.FORBIDDEN
    return jsonify(_session(user))


@auth_bp.get("/me")
@jwt_required()
def me():
    return jsonify({"user": account_service.serialize_user(current_user)})


@auth_bp.post("/password/reset/request")
def password_reset_request():
    payload = reset_request_schema.load(request.get_json() or {})
    password_reset_service.request_password_reset(payload["email"])
    return jsonify({"message": "sent"})


@auth_bp.post("/password/reset/confirm")
def password_reset_confirm():
    payload = reset_confirm_schema.load(request.get_json() or {})
    user = password_reset_service.confirm_password_reset(payload["token"], payload["new_password"])
    return jsonify({"user": account_service.serialize_user(user)})
