"""Past-question browsing endpoints (written papers)."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import BadRequest

from ..services import completion_service, question_service
from ..utils import optional_user

questions_bp = Blueprint("questions_bp", __name__)


def _limit_arg() -> int | None:
    raw = request.args.get("limit")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def page_response(question_type: str):
    """Shared by the written and audio listings: one cursor page plus per-user counts."""

    model = question_service.QUESTION_MODELS[question_type]
    filters = question_service.parse_filter_params(request.args)
    try:
        page = question_service.search_questions(
            model,
            filters,
            cursor=request.args.get("cursor") or None,
            limit=_limit_arg(),
        )
    except BadRequest as exc:
        return jsonify({"message": exc.description}), HTTPStatus.BAD_REQUEST

    counts = {}
    user = optional_user()
    if user is not None and page["questions"]:
        counts = completion_service.completion_counts(
            user.id, question_type, [q.id for q in page["questions"]]
        )
    return jsonify(
        {
            "questions": [
                question_service.serialize_question(
                    q, counts.get(q.id, 0) if user is not None else None
                )
                for q in page["questions"]
            ],
            "next_cursor": page["next_cursor"],
            "total_count": page["total_count"],
            "filters": question_service.build_filter_query(filters),
        }
    )


def navigation_response(question_type: str):
    model = question_service.QUESTION_MODELS[question_type]
    filters = question_service.parse_filter_params(request.args)
    return jsonify(question_service.get_navigation_list(model, filters))


def detail_response(question_type: str, question_id: int):
    model = question_service.QUESTION_MODELS[question_type]
    question = question_service.get_question(model, question_id)
    if question is None:
        return jsonify({"message": "Question not found"}), HTTPStatus.NOT_FOUND
    count = None
    user = optional_user()
    if user is not None:
        count = completion_service.completion_counts(user.id, question_type, [question.id]).get(question.id, 0)
    return jsonify({"question": question_service.serialize_question(question, count)})


@questions_bp.get("/ping")
def ping():
    return jsonify({"module": "questions", "status": "ok"})


@questions_bp.get("")
def list_questions():
    return page_response("normal")


@questions_bp.get("/navigation")
def navigation():
    return navigation_response("normal")


@questions_bp.get("/<int:question_id>")
def get_question(question_id: int):
    return detail_response("normal", question_id)
