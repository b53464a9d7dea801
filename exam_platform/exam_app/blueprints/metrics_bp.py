"""Prometheus scrape endpoint, switchable with ``METRICS_ENABLED``."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, Response, current_app, jsonify

from ..metrics import latest_metrics

metrics_bp = Blueprint("metrics_bp", __name__)


@metrics_bp.before_request
def metrics_switch():
    if not current_app.config.get("METRICS_ENABLED", True):
        return jsonify({"message": "Not found"}), HTTPStatus.NOT_FOUND
    return None


@metrics_bp.get("/metrics")
def scrape():
    body, content_type = latest_metrics()
    return Response(body, mimetype=content_type, headers={"Cache-Control": "no-store"})
