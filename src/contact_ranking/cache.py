"""In-memory TTL caches for search responses and classifier output.

Search responses are keyed by owner, normalized query text, goal and the
request's paging and filter parameters.  Last writer wins on concurrent
inserts.  Both caches hold at most ``max_entries`` items, evicting expired
entries first and then the oldest.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Generic, TypeVar

from src.contact_ranking.config import settings
from src.contact_ranking.models import SearchRequest, SearchResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


def normalize_query(query: str) -> str:
    return " ".join(query.lower().split())


def cache_key(request: SearchRequest, limit: int, threshold: float) -> str:
    goal_key = request.goal.model_dump_json() if request.goal else ""
    filters_key = request.filters.model_dump_json() if request.filters else ""
    weights_key = request.weights.model_dump_json() if request.weights else ""
    return "|".join((
        request.user_id,
        normalize_query(request.query),
        goal_key,
        filters_key,
        weights_key,
        str(limit),
        repr(threshold),
    ))


def _evict_oldest(entries: dict, max_entries: int) -> int:
    evicted = 0
    while len(entries) > max_entries:
        del entries[next(iter(entries))]
        evicted += 1
    return evicted


class SearchCache:
    def __init__(
        self,
        ttl_seconds: float | None = None,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = settings.cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self.max_entries = settings.cache_max_entries if max_entries is None else max_entries
        self._clock = clock
        self._entries: dict[str, tuple[float, str, SearchResponse]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> SearchResponse | None:
        """Return a private copy of the cached response, or None."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, _, response = entry
        if self._clock() > expires_at:
            with self._lock:
                self._entries.pop(key, None)
            return None
        logger.debug("Cache hit for %s", key[:80])
        return response.model_copy(deep=True)

    def set(self, key: str, user_id: str, response: SearchResponse) -> None:
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = (
                self._clock() + self.ttl, user_id, response.model_copy(deep=True),
            )
            if len(self._entries) > self.max_entries:
                self._sweep_locked()

    def _sweep_locked(self) -> None:
        now = self._clock()
        expired = [k for k, (exp, _, _) in self._entries.items() if now > exp]
        for k in expired:
            del self._entries[k]
        evicted = _evict_oldest(self._entries, self.max_entries)
        logger.debug(
            "Swept %d expired and %d oldest cache entries, %d remain",
            len(expired), evicted, len(self._entries),
        )

    def clear_user(self, user_id: str) -> None:
        with self._lock:
            stale = [k for k, (_, owner, _) in self._entries.items() if owner == user_id]
            for k in stale:
                del self._entries[k]
        logger.info("Cleared %d cached searches for user %s", len(stale), user_id)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class QueryMemo(Generic[T]):
    """Per-query memo for classifier results, keyed by normalized query text."""

    def __init__(
        self,
        ttl_seconds: float | None = None,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = settings.cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self.max_entries = settings.cache_max_entries if max_entries is None else max_entries
        self._clock = clock
        self._entries: dict[str, tuple[float, T]] = {}
        self._lock = threading.Lock()

    def get(self, query: str) -> T | None:
        key = normalize_query(query)
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() > expires_at:
            with self._lock:
                self._entries.pop(key, None)
            return None
        return value

    def set(self, query: str, value: T) -> None:
        key = normalize_query(query)
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = (self._clock() + self.ttl, value)
            if len(self._entries) > self.max_entries:
                now = self._clock()
                for k in [k for k, (exp, _) in self._entries.items() if now > exp]:
                    del self._entries[k]
                _evict_oldest(self._entries, self.max_entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
