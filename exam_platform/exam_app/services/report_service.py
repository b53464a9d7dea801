"""Student issue reports on questions and their admin triage."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import func
from werkzeug.exceptions import BadRequest, NotFound

from ..extensions import db
from ..models import AudioQuestion, Question, QuestionReport, User
from ..models.reports import REPORT_STATUSES, REPORT_TYPES
from .question_service import format_question_title


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_report(user: User, payload: dict) -> QuestionReport:
    question_type = payload.get("question_type", "normal")
    question_id = payload["question_id"]
    model = AudioQuestion if question_type == "audio" else Question
    if db.session.get(model, question_id) is None:
        raise NotFound("Question not found")

    target = QuestionReport.audio_question_id if question_type == "audio" else QuestionReport.question_id
    duplicate = QuestionReport.query.filter(
        QuestionReport.user_id == user.id,
        target == question_id,
        QuestionReport.report_type == payload["report_type"],
    ).first()
    if duplicate:
        raise BadRequest("You have already reported this issue for this question")

    report = QuestionReport(
        user_id=user.id,
        report_type=payload["report_type"],
        description=payload["description"].strip(),
    )
    if question_type == "audio":
        report.audio_question_id = question_id
    else:
        report.question_id = question_id
    db.session.add(report)
    db.session.commit()
    return report


def list_reports(status: str | None = None) -> list[QuestionReport]:
    query = QuestionReport.query
    if status:
        if status not in REPORT_STATUSES:
            raise BadRequest("invalid_status")
        query = query.filter(QuestionReport.status == status)
    return query.order_by(QuestionReport.created_at.desc(), QuestionReport.id.desc()).all()


def update_report(report_id: int, payload: dict, admin: User) -> QuestionReport:
    report = db.session.get(QuestionReport, report_id)
    if report is None:
        raise NotFound("Report not found")
    status = payload["status"]
    report.status = status
    if "admin_notes" in payload:
        report.admin_notes = payload["admin_notes"]
    if status in ("resolved", "dismissed"):
        report.resolved_by = admin.id
        report.resolved_at = _now()
    else:
        report.resolved_by = None
        report.resolved_at = None
    db.session.commit()
    return report


def report_statistics() -> dict:
    by_status = dict(
        db.session.query(QuestionReport.status, func.count(QuestionReport.id))
        .group_by(QuestionReport.status)
        .all()
    )
    by_type = dict(
        db.session.query(QuestionReport.report_type, func.count(QuestionReport.id))
        .group_by(QuestionReport.report_type)
        .all()
    )
    stats = {"total": sum(by_status.values())}
    for status in REPORT_STATUSES:
        stats[status] = by_status.get(status, 0)
    stats["by_type"] = {report_type: by_type.get(report_type, 0) for report_type in REPORT_TYPES}
    return stats


def serialize_report(report: QuestionReport) -> dict:
    if report.audio_question_id:
        question = db.session.get(AudioQuestion, report.audio_question_id)
        question_type, question_id = "audio", report.audio_question_id
    else:
        question = db.session.get(Question, report.question_id)
        question_type, question_id = "normal", report.question_id
    return {
        "id": report.id,
        "question_id": question_id,
        "question_type": question_type,
        "question_title": format_question_title(question) if question else None,
        "report_type": report.report_type,
        "description": report.description,
        "status": report.status,
        "admin_notes": report.admin_notes,
        "resolved_by": report.resolved_by,
        "resolved_at": report.resolved_at.isoformat() if report.resolved_at else None,
        "created_at": report.created_at.isoformat() if report.created_at else None,
        "reporter_email": report.reporter.email if report.reporter else None,
    }
