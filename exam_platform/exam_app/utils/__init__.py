"""Request-level helpers: credentials, caller lookup, client addresses and cursors."""

from .client_ip import get_client_ip
from .cursor_tokens import InvalidCursor, decode_cursor, encode_cursor
from .security import (
    generate_access_token,
    hash_password,
    optional_user,
    require_admin,
    token_claims,
    verify_password,
)

__all__ = [
    "InvalidCursor",
    "decode_cursor",
    "encode_cursor",
    "generate_access_token",
    "get_client_ip",
    "hash_password",
    "optional_user",
    "require_admin",
    "token_claims",
    "verify_password",
]
