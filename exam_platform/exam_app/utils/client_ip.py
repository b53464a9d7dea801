"""Client address resolution behind proxies."""

from __future__ import annotations

from flask import has_request_context, request


def get_client_ip() -> str:
    """Return the originating client IP for rate limiting.

    Uses the first hop of ``X-Forwarded-For`` when present, then ``X-Real-IP``.
    Callers with neither header share the ``"unknown"`` bucket.
    """

    if not has_request_context():
        return "unknown"
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = (request.headers.get("X-Real-IP") or "").strip()
    return real_ip or "unknown"
