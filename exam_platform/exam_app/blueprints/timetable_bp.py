"""Personal exam timetable and calendar export."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, Response, jsonify, request
from flask_jwt_extended import current_user, jwt_required

from ..services import timetable_service

timetable_bp = Blueprint("timetable_bp", __name__)


def _user_subjects():
    return [link.subject for link in current_user.subjects if link.subject is not None]


@timetable_bp.get("/ping")
def ping():
    return jsonify({"module": "timetable", "status": "ok"})


@timetable_bp.get("")
@jwt_required()
def get_timetable():
    return jsonify(timetable_service.build_timetable(_user_subjects()))


@timetable_bp.get("/calendar.ics")
@jwt_required()
def download_calendar():
    """Export every exam for the user's subjects, or one exam with ``?exam_id=``."""

    slots = timetable_service.get_exams_for_subjects(_user_subjects())["exams"]
    exam_id = request.args.get("exam_id")
    filename = "leaving-cert-2026.ics"
    if exam_id:
        slots = [slot for slot in slots if slot.id == exam_id]
        if not slots:
            return jsonify({"message": "Exam not found"}), HTTPStatus.NOT_FOUND
        filename = f"{exam_id}.ics"
    return Response(
        timetable_service.build_ics(slots),
        mimetype="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
