"""Contact and grind feedback forms."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import current_user, jwt_required
from marshmallow import ValidationError
from werkzeug.exceptions import BadRequest

from ..extensions import limiter
from ..metrics import record_form_submission
from ..schemas import ContactSchema, FeedbackSchema, GeneralSettingsSchema
from ..services import settings_service, support_service
from ..services.mail_service import MailServiceError
from ..utils import optional_user, require_admin
from ..utils.client_ip import get_client_ip

support_bp = Blueprint("support_bp", __name__)

contact_schema = ContactSchema()
feedback_schema = FeedbackSchema()
settings_schema = GeneralSettingsSchema()


def _form_rate_limit() -> str:
    return current_app.config.get("FORM_RATE_LIMIT", "5 per hour")


def _deliver(form: str, sender, payload: dict):
    try:
        sender(optional_user(), payload)
    except BadRequest as exc:
        record_form_submission(form, "rejected")
        return jsonify({"message": exc.description}), HTTPStatus.BAD_REQUEST
    except MailServiceError:
        record_form_submission(form, "failed")
        return (
            jsonify({"message": "Failed to send message. Please try again later."}),
            HTTPStatus.INTERNAL_SERVER_ERROR,
        )
    record_form_submission(form, "sent")
    current_app.logger.info("Support form %s delivered from %s", form, get_client_ip())
    return jsonify({"message": "submitted"})


@support_bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    return jsonify({"errors": err.messages}), HTTPStatus.BAD_REQUEST


@support_bp.get("/ping")
def ping():
    return jsonify({"module": "support", "status": "ok"})


@support_bp.get("/categories")
def categories():
    return jsonify({"categories": list(support_service.CONTACT_CATEGORIES)})


@support_bp.post("/contact")
@limiter.limit(_form_rate_limit, key_func=get_client_ip)
def submit_contact():
    payload = contact_schema.load(request.get_json() or {})
    return _deliver("contact", support_service.send_contact_message, payload)


@support_bp.post("/feedback")
@limiter.limit(_form_rate_limit, key_func=get_client_ip)
def submit_feedback():
    payload = feedback_schema.load(request.get_json() or {})
    return _deliver("feedback", support_service.send_grind_feedback, payload)


@support_bp.get("/settings")
@jwt_required()
def get_settings():
    if not require_admin():
        return jsonify({"message": "Forbidden"}), HTTPStatus.FORBIDDEN
    return jsonify(
        {
            "settings": {"support_email": settings_service.support_recipient()},
            "last_change": settings_service.describe(settings_service.SUPPORT_EMAIL_KEY),
        }
    )


@support_bp.put("/settings")
@jwt_required()
def update_settings():
    if not require_admin():
        return jsonify({"message": "Forbidden"}), HTTPStatus.FORBIDDEN
    payload = settings_schema.load(request.get_json() or {})
    settings_service.set_setting(
        settings_service.SUPPORT_EMAIL_KEY,
        payload.get("support_email"),
        updated_by=current_user.id,
    )
    return jsonify({"settings": payload})
