"""Password hashing, token issuing and caller checks shared by the blueprints."""

from __future__ import annotations

from typing import Any, Dict

from flask_jwt_extended import (
    create_access_token,
    current_user,
    get_current_user,
    verify_jwt_in_request,
)
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from werkzeug.security import check_password_hash, generate_password_hash


def hash_password(plain_password: str) -> str:
    return generate_password_hash(plain_password)


def verify_password(plain_password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, plain_password)


def token_claims(user) -> Dict[str, Any]:
    """Claims copied into every access token; the database stays authoritative."""

    return {
        "role": user.role,
        "subscription_status": user.subscription_status or "none",
    }


def generate_access_token(user) -> str:
    return create_access_token(identity=str(user.id), additional_claims=token_claims(user))


def require_admin() -> bool:
    """True when the request's resolved user is an admin.

    Call inside ``@jwt_required()`` views; the caller answers 403 otherwise.
    """

    return current_user is not None and current_user.is_admin


def optional_user():
    """The signed-in user if a valid token came with the request, else None."""

    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError):
        return None
    return get_current_user()
