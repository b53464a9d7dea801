"""Subject catalogue endpoints."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify

from ..extensions import db
from ..models import Subject
from ..services import subject_service

subjects_bp = Blueprint("subjects_bp", __name__)


@subjects_bp.get("/ping")
def ping():
    return jsonify({"module": "subjects", "status": "ok"})


@subjects_bp.get("")
def list_subjects():
    subjects = subject_service.list_subjects()
    return jsonify({"subjects": [subject_service.serialize_subject(s) for s in subjects]})


@subjects_bp.get("/audio")
def list_audio_subjects():
    subjects = subject_service.list_subjects_with_audio()
    return jsonify({"subjects": [subject_service.serialize_subject(s) for s in subjects]})


@subjects_bp.get("/<int:subject_id>/topics")
def list_topics(subject_id: int):
    if db.session.get(Subject, subject_id) is None:
        return jsonify({"message": "Subject not found"}), HTTPStatus.NOT_FOUND
    topics = subject_service.list_topics(subject_id)
    return jsonify({"topics": [subject_service.serialize_topic(t) for t in topics]})


@subjects_bp.get("/<int:subject_id>/years")
def list_years(subject_id: int):
    if db.session.get(Subject, subject_id) is None:
        return jsonify({"message": "Subject not found"}), HTTPStatus.NOT_FOUND
    return jsonify({"years": subject_service.list_available_years(subject_id)})


@subjects_bp.get("/<string:slug>")
def get_subject(slug: str):
    subject = subject_service.get_subject_by_slug(slug)
    if subject is None:
        return jsonify({"message": "Subject not found"}), HTTPStatus.NOT_FOUND
    payload = subject_service.serialize_subject(subject)
    payload["topics"] = [subject_service.serialize_topic(t) for t in subject_service.list_topics(subject.id)]
    return jsonify({"subject": payload})
