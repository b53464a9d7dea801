"""Opaque pagination cursors signed with itsdangerous."""

from __future__ import annotations

from typing import Any, Dict

from flask import current_app
from itsdangerous import BadSignature, URLSafeTimedSerializer
from werkzeug.exceptions import BadRequest


class InvalidCursor(BadRequest):
    description = "invalid_cursor"


def _serializer() -> URLSafeTimedSerializer:
    config = current_app.config
    return URLSafeTimedSerializer(
        secret_key=config["CURSOR_SECRET"],
        salt=config.get("CURSOR_SALT", "question-cursor"),
    )


def encode_cursor(payload: Dict[str, Any]) -> str:
    """Return a signed, URL-safe token for the payload."""

    return _serializer().dumps(payload)


def decode_cursor(token: str) -> Dict[str, Any]:
    """Verify and return the cursor payload or raise ``InvalidCursor``.

    ``BadSignature`` also covers expired tokens (``SignatureExpired``).
    """

    max_age = int(current_app.config.get("CURSOR_TTL_SECONDS", 86400))
    try:
        payload = _serializer().loads(token, max_age=max_age)
    except BadSignature as exc:
        raise InvalidCursor() from exc
    if not isinstance(payload, dict) or "sort_key" not in payload or "id" not in payload:
        raise InvalidCursor()
    return payload
