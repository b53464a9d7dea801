"""Audio comprehension questions and transcript synchronisation."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from ..extensions import db
from ..models import AudioQuestion, Subject
from ..services import subject_service, transcript_service
from .questions_bp import detail_response, navigation_response, page_response

audio_bp = Blueprint("audio_bp", __name__)


def _float_arg(name: str) -> float | None:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except ValueError:
        return None


@audio_bp.get("/ping")
def ping():
    return jsonify({"module": "audio", "status": "ok"})


@audio_bp.get("/questions")
def list_questions():
    return page_response("audio")


@audio_bp.get("/questions/navigation")
def navigation():
    return navigation_response("audio")


@audio_bp.get("/questions/<int:question_id>")
def get_question(question_id: int):
    return detail_response("audio", question_id)


@audio_bp.get("/subjects/<int:subject_id>/topics")
def list_topics(subject_id: int):
    if db.session.get(Subject, subject_id) is None:
        return jsonify({"message": "Subject not found"}), HTTPStatus.NOT_FOUND
    topics = subject_service.list_audio_topics(subject_id)
    return jsonify({"topics": [subject_service.serialize_topic(t) for t in topics]})


@audio_bp.get("/questions/<int:question_id>/transcript")
def get_transcript(question_id: int):
    question = db.session.get(AudioQuestion, question_id)
    if question is None:
        return jsonify({"message": "Question not found"}), HTTPStatus.NOT_FOUND
    items = transcript_service.fetch_transcript(question.transcript_url)
    return jsonify({"items": items, "words": transcript_service.build_word_index(items)})


@audio_bp.get("/questions/<int:question_id>/transcript/position")
def transcript_position(question_id: int):
    question = db.session.get(AudioQuestion, question_id)
    if question is None:
        return jsonify({"message": "Question not found"}), HTTPStatus.NOT_FOUND
    position = _float_arg("t")
    if position is None:
        return jsonify({"errors": {"t": ["A numeric timestamp is required."]}}), HTTPStatus.BAD_REQUEST
    duration = _float_arg("duration")
    if duration is not None:
        position = transcript_service.clamp_seek(position, duration)
    words = transcript_service.build_word_index(transcript_service.fetch_transcript(question.transcript_url))
    return jsonify({"t": position, **transcript_service.locate(words, position)})
