"""Short-lived in-process cache for dashboard snapshots.

User-scoped entries are keyed ``("user", user_id, ...)`` so that one user's data
is never served to another and a single user's keys can be dropped together.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Hashable

from cachetools import TTLCache
from flask import current_app

_EXTENSION_KEY = "exam_user_cache"
_MISSING = object()


def user_key(user_id: int, *parts: Hashable) -> tuple:
    return ("user", int(user_id), *parts)


def _store() -> tuple[TTLCache, threading.RLock] | None:
    config = current_app.config
    ttl = int(config.get("DASHBOARD_CACHE_TTL", 30))
    if ttl <= 0:
        return None
    store = current_app.extensions.get(_EXTENSION_KEY)
    if store is None:
        store = (TTLCache(maxsize=int(config.get("DASHBOARD_CACHE_SIZE", 1024)), ttl=ttl), threading.RLock())
        current_app.extensions[_EXTENSION_KEY] = store
    return store


def get(key: tuple, default: Any = None) -> Any:
    store = _store()
    if store is None:
        return default
    cache, lock = store
    with lock:
        return cache.get(key, default)


def put(key: tuple, value: Any) -> None:
    store = _store()
    if store is None:
        return
    cache, lock = store
    with lock:
        cache[key] = value


def get_or_load(
    key: tuple,
    loader: Callable[[], Any],
    cacheable: Callable[[Any], bool] | None = None,
) -> Any:
    """Return the cached value for ``key`` or call ``loader``.

    A loaded value is stored unless ``cacheable`` rejects it.
    """

    cached = get(key, _MISSING)
    if cached is not _MISSING:
        return cached
    value = loader()
    if cacheable is None or cacheable(value):
        put(key, value)
    return value


def invalidate_user(user_id: int) -> int:
    """Drop every entry belonging to ``user_id``; returns how many were removed."""

    store = _store()
    if store is None:
        return 0
    cache, lock = store
    with lock:
        doomed = [key for key in list(cache.keys()) if key[:2] == ("user", int(user_id))]
        for key in doomed:
            cache.pop(key, None)
    return len(doomed)


def clear() -> None:
    store = _store()
    if store is None:
        return
    cache, lock = store
    with lock:
        cache.clear()
