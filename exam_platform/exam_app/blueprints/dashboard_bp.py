"""Dashboard bootstrap endpoint."""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_jwt_extended import current_user, jwt_required

from ..services import dashboard_service

dashboard_bp = Blueprint("dashboard_bp", __name__)


@dashboard_bp.get("/ping")
def ping():
    return jsonify({"module": "dashboard", "status": "ok"})


@dashboard_bp.get("")
@jwt_required()
def get_dashboard():
    return jsonify(dashboard_service.load_dashboard(current_user))
