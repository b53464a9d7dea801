"""Past-question browsing: URL filters, keyset pagination and titles.

Both written (`Question`) and audio (`AudioQuestion`) questions share the same
filter and cursor machinery; callers pass the model to operate on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping
from urllib.parse import urlencode

from flask import current_app
from sqlalchemy import and_, or_

from ..extensions import db
from ..models import AudioQuestion, Question
from ..models.question import EXAM_TYPES
from ..utils.cursor_tokens import InvalidCursor, decode_cursor, encode_cursor

QUESTION_MODELS = {"normal": Question, "audio": AudioQuestion}


@dataclass
class QuestionFilters:
    subject_id: int | None = None
    search_term: str = ""
    topic_ids: list[int] = field(default_factory=list)
    years: list[int] = field(default_factory=list)
    exam_types: list[str] = field(default_factory=list)
    question_numbers: list[int] = field(default_factory=list)

    @property
    def search_terms(self) -> list[str]:
        return self.search_term.split()


def _split(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def _int_list(raw: str | None) -> list[int]:
    values: list[int] = []
    for part in _split(raw):
        try:
            number = int(part)
        except ValueError:
            continue
        if number:
            values.append(number)
    return values


def parse_filter_params(args: Mapping[str, str]) -> QuestionFilters:
    """Read shareable filter state from query parameters.

    ``q`` is the keyword search; ``topics``, ``years``, ``types`` and ``numbers``
    are comma lists. Non-numeric and zero years/numbers are dropped.
    """

    subject_id = args.get("subject_id")
    try:
        subject = int(subject_id) if subject_id else None
    except ValueError:
        subject = None
    return QuestionFilters(
        subject_id=subject,
        search_term=(args.get("q") or "").strip(),
        topic_ids=_int_list(args.get("topics")),
        years=_int_list(args.get("years")),
        exam_types=[value for value in _split(args.get("types")) if value in EXAM_TYPES],
        question_numbers=_int_list(args.get("numbers")),
    )


def build_filter_query(filters: QuestionFilters) -> str:
    """Inverse of ``parse_filter_params``; empty filters are omitted."""

    params: list[tuple[str, str]] = []
    if filters.subject_id:
        params.append(("subject_id", str(filters.subject_id)))
    if filters.search_term:
        params.append(("q", filters.search_term))
    if filters.topic_ids:
        params.append(("topics", ",".join(str(value) for value in filters.topic_ids)))
    if filters.years:
        params.append(("years", ",".join(str(value) for value in filters.years)))
    if filters.exam_types:
        params.append(("types", ",".join(filters.exam_types)))
    if filters.question_numbers:
        params.append(("numbers", ",".join(str(value) for value in filters.question_numbers)))
    return urlencode(params, safe=",")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _filtered_query(model, filters: QuestionFilters):
    query = model.query
    if filters.subject_id:
        query = query.filter(model.subject_id == filters.subject_id)
    if filters.years:
        query = query.filter(model.year.in_(filters.years))
    if filters.exam_types:
        query = query.filter(model.exam_type.in_(filters.exam_types))
    if filters.question_numbers:
        query = query.filter(model.question_number.in_(filters.question_numbers))
    if filters.topic_ids:
        topic_model = model.topics.property.mapper.class_
        query = query.filter(model.topics.any(topic_model.id.in_(filters.topic_ids)))
    search_column = model.full_text if model is Question else model.additional_info
    for term in filters.search_terms:
        query = query.filter(search_column.ilike(f"%{_escape_like(term)}%", escape="\\"))
    return query


def _page_size(limit: int | None) -> int:
    config = current_app.config
    size = config.get("QUESTION_PAGE_SIZE", 20) if limit is None else limit
    return max(1, min(int(size), int(config.get("QUESTION_PAGE_MAX", 50))))


def search_questions(
    model,
    filters: QuestionFilters,
    cursor: str | None = None,
    limit: int | None = None,
) -> dict:
    """Return one page ``{questions, next_cursor, total_count}`` of models.

    Rows are ordered by ``(sort_key, id)``; the cursor marks the last row served.
    """

    page_size = _page_size(limit)
    query = _filtered_query(model, filters)
    total_count = query.count()

    if cursor:
        position = decode_cursor(cursor)
        if position.get("kind") != model.__tablename__:
            raise InvalidCursor()
        query = query.filter(
            or_(
                model.sort_key > position["sort_key"],
                and_(model.sort_key == position["sort_key"], model.id > position["id"]),
            )
        )

    rows = query.order_by(model.sort_key, model.id).limit(page_size + 1).all()
    has_more = len(rows) > page_size
    rows = rows[:page_size]
    next_cursor = None
    if has_more and rows:
        last = rows[-1]
        next_cursor = encode_cursor(
            {"kind": model.__tablename__, "sort_key": last.sort_key, "id": last.id}
        )
    return {"questions": rows, "next_cursor": next_cursor, "total_count": total_count}


def iter_pages(model, filters: QuestionFilters, limit: int | None = None) -> Iterator[dict]:
    """Yield serialized pages by following ``next_cursor`` until exhausted."""

    cursor = None
    while True:
        page = search_questions(model, filters, cursor=cursor, limit=limit)
        yield {
            "questions": [serialize_question(item) for item in page["questions"]],
            "next_cursor": page["next_cursor"],
            "total_count": page["total_count"],
        }
        cursor = page["next_cursor"]
        if not cursor:
            return


def merge_pages(pages: Iterable[Mapping]) -> list[dict]:
    """Flatten pages into a list with at most one entry per question id.

    A repeated id keeps its first position but takes the most recent value.
    """

    merged: dict = {}
    for page in pages:
        for item in page.get("questions") or []:
            merged[item["id"]] = item
    return list(merged.values())


def get_navigation_list(model, filters: QuestionFilters) -> dict:
    rows = (
        _filtered_query(model, filters)
        .with_entities(
            model.id,
            model.year,
            model.paper_number,
            model.question_number,
            model.question_parts,
            model.exam_type,
            model.additional_info,
        )
        .order_by(model.sort_key, model.id)
        .all()
    )
    items = []
    for row in rows:
        item = {
            "id": row.id,
            "year": row.year,
            "paper_number": row.paper_number,
            "question_number": row.question_number,
            "question_parts": list(row.question_parts or []),
            "exam_type": row.exam_type,
        }
        item["title"] = format_question_title(row)
        items.append(item)
    return {"items": items, "total_count": len(items)}


def format_question_title(question) -> str:
    """Human title such as ``2023 - Paper 1 - Deferred - Question 4 - (a), (b)``."""

    title = f"{question.year}"
    if question.paper_number:
        title += f" - Paper {question.paper_number}"
    if question.exam_type == "deferred":
        title += " - Deferred"
    if question.question_number is not None:
        title += f" - Question {question.question_number}"
    parts = list(question.question_parts or [])
    if parts:
        title += " - " + ", ".join(f"({part})" for part in parts)
    if question.additional_info:
        title += f" - {question.additional_info}"
    return title


def get_question(model, question_id: int):
    return db.session.get(model, question_id)


def serialize_question(question, completion_count: int | None = None) -> dict:
    payload = {
        "id": question.id,
        "subject_id": question.subject_id,
        "year": question.year,
        "paper_number": question.paper_number,
        "question_number": question.question_number,
        "question_parts": list(question.question_parts or []),
        "exam_type": question.exam_type,
        "additional_info": question.additional_info,
        "title": format_question_title(question),
        "topics": [{"id": topic.id, "name": topic.name} for topic in question.topics],
    }
    if isinstance(question, AudioQuestion):
        payload["audio_url"] = question.audio_url
        payload["transcript_url"] = question.transcript_url
    else:
        payload.update(
            {
                "full_text": question.full_text,
                "question_image": _image(
                    question.question_image_url,
                    question.question_image_width,
                    question.question_image_height,
                ),
                "marking_scheme_image": _image(
                    question.marking_scheme_image_url,
                    question.marking_scheme_image_width,
                    question.marking_scheme_image_height,
                ),
            }
        )
    if completion_count is not None:
        payload["completion_count"] = completion_count
    return payload


def _image(url: str | None, width: int | None, height: int | None) -> dict | None:
    if not url:
        return None
    return {"url": url, "width": width, "height": height}
