from __future__ import annotations

import hashlib
import itertools
import json
import time
from typing import Any, Generic, TypeVar

_cache: dict[str, dict[str, Any]] = {}
_hits: int = 0
_misses: int = 0
_DEFAULT_TTL = 300  # 5 minutes

T = TypeVar("T")


def _make_key(request_dict: dict) -> str:
    normalized = json.dumps(request_dict, sort_keys=True, default=str)
    return hashlib.sha256(normalized.encode()).hexdigest()[:16]


def cache_get(request_dict: dict) -> Any | None:
    """Look up a cached response.

    Callers put the store and library revisions in *request_dict*, so any
    import, edit or like/dislike change produces a different key.
    """
    global _hits, _misses
    key = _make_key(request_dict)
    entry = _cache.get(key)
    if entry and time.time() - entry["created_at"] < _DEFAULT_TTL:
        _hits += 1
        return entry["value"]
    if entry:
        del _cache[key]
    _misses += 1
    return None


def cache_set(request_dict: dict, value: Any) -> None:
    now = time.time()
    # Prune expired entries; keys from older revisions are never read again.
    for stale in [k for k, e in _cache.items() if now - e["created_at"] >= _DEFAULT_TTL]:
        del _cache[stale]
    key = _make_key(request_dict)
    _cache[key] = {"value": value, "created_at": now}


def get_cache_stats() -> dict:
    total = _hits + _misses
    return {
        "size": len(_cache),
        "hits": _hits,
        "misses": _misses,
        "hit_rate": round(_hits / total * 100, 1) if total > 0 else 0.0,
    }


def clear_cache() -> None:
    global _hits, _misses
    _cache.clear()
    _hits = 0
    _misses = 0


class ResultHandle(Generic[T]):
    """Caller-owned holder for the latest results of a query.

    Matching and search calls are not serialized, so an older call can finish
    after a newer one. Each call takes a token from :meth:`begin`; only the
    most recent token may :meth:`publish`, and late answers are dropped.
    ``query`` and ``results`` always change together, on publish.
    """

    def __init__(self) -> None:
        self._tokens = itertools.count(1)
        self._latest = 0
        self._pending: Any = None
        self.query: Any = None
        self.results: list[T] = []

    def begin(self, query: Any) -> int:
        self._latest = next(self._tokens)
        self._pending = query
        return self._latest

    def is_current(self, token: int) -> bool:
        return token == self._latest

    def publish(self, token: int, results: list[T]) -> bool:
        if not self.is_current(token):
            return False
        self.query = self._pending
        self.results = results
        return True
