"""Top-level orchestrator: ranks one user's contacts against a query.

Pipeline:
  1. Validate the request, check the response cache
  2. Resolve the weight vector (request override or synthesizer)
  3. Load the user's active contacts                    (store)
  4. Hard filters, explicit plus goal preferences       (deterministic)
  5. Preprocess the query once, score in batches        (deterministic)
  6. Threshold, stable sort, truncate
  7. Substring fallback over the plain index when nothing passed
"""

from __future__ import annotations

import asyncio
import logging

from src.contact_ranking.cache import SearchCache, cache_key
from src.contact_ranking.config import settings
from src.contact_ranking.errors import InvalidRequest, StoreUnavailable
from src.contact_ranking.models import (
    ContactVectorRecord,
    IndexedContact,
    ScoreBreakdown,
    ScoredResult,
    SearchRequest,
    SearchResponse,
    SearchStats,
    WeightVector,
    relevance_for,
)
from src.contact_ranking.scoring.filters import apply_filters, effective_filters
from src.contact_ranking.scoring.lexical import preprocess_query, score_record
from src.contact_ranking.store import ContactStore
from src.contact_ranking.weighting.synthesizer import WeightSynthesizer, default_synthesizer

logger = logging.getLogger(__name__)

FALLBACK_BASE_SCORE = 0.2
FALLBACK_DECAY = 0.01
FALLBACK_MIN_SCORE = 0.05


def fallback_score(rank: int) -> float:
    return max(FALLBACK_MIN_SCORE, FALLBACK_BASE_SCORE - FALLBACK_DECAY * rank)


def _fallback_result(entry: IndexedContact, rank: int) -> ScoredResult:
    return ScoredResult(
        connection_id=entry.id,
        connection=entry.payload or entry.model_dump(by_alias=True, exclude={"payload"}),
        score=fallback_score(rank),
        breakdown=ScoreBreakdown(location_score=0.1),
        relevance="low",
    )


class Ranker:
    def __init__(
        self,
        store: ContactStore,
        synthesizer: WeightSynthesizer | None = None,
        *,
        cache: SearchCache | None = None,
        batch_size: int | None = None,
        epsilon: float | None = None,
    ) -> None:
        self.store = store
        self.synthesizer = synthesizer or default_synthesizer()
        if cache is None and settings.cache_enabled:
            cache = SearchCache()
        self.cache = cache
        self.batch_size = batch_size or settings.batch_size
        self.epsilon = settings.aspect_epsilon if epsilon is None else epsilon

    @staticmethod
    def _validate(request: SearchRequest) -> None:
        if not request.query or not request.query.strip():
            raise InvalidRequest("Search query must not be blank")
        if not request.user_id or not request.user_id.strip():
            raise InvalidRequest("Search request must name the owning user")

    async def search(self, request: SearchRequest) -> SearchResponse:
        self._validate(request)
        limit = request.limit or settings.default_limit
        threshold = settings.default_threshold if request.threshold is None else request.threshold

        key = cache_key(request, limit, threshold)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        weights = request.weights or await self.synthesizer.synthesize(request.query, request.goal)

        try:
            candidates = await self.store.list_active_contacts(request.user_id)
        except Exception as exc:
            raise StoreUnavailable(
                f"Could not load contacts for user {request.user_id}: {exc}"
            ) from exc

        if not candidates:
            logger.info("No active contacts for user %s", request.user_id)
            return SearchResponse(weights=weights)

        filters = effective_filters(request.filters, request.goal)
        candidates = apply_filters(candidates, filters)

        results = await self._score_candidates(request.query, candidates, weights, threshold)
        results.sort(key=lambda r: r.score, reverse=True)
        results = results[:limit]

        fallback_used = False
        if not results and filters is None:
            results = await self._fallback(request, limit)
            fallback_used = bool(results)

        response = SearchResponse(
            results=results,
            weights=weights,
            total_candidates_considered=len(candidates),
            fallback_used=fallback_used,
        )
        logger.info(
            "Search for user %s: %d candidates, %d results (fallback=%s, strategy=%s)",
            request.user_id, len(candidates), len(results),
            "on" if fallback_used else "off",
            "override" if request.weights else self.synthesizer.strategy,
        )
        if self.cache is not None:
            self.cache.set(key, request.user_id, response)
        return response

    async def rank(self, request: SearchRequest) -> list[ScoredResult]:
        return (await self.search(request)).results

    async def _score_candidates(
        self,
        query: str,
        candidates: list[ContactVectorRecord],
        weights: WeightVector,
        threshold: float,
    ) -> list[ScoredResult]:
        prepared = preprocess_query(query)
        results: list[ScoredResult] = []
        for start in range(0, len(candidates), self.batch_size):
            if start:
                await asyncio.sleep(0)
            for record in candidates[start:start + self.batch_size]:
                scores = score_record(prepared, record, weights, self.epsilon)
                if scores.total < threshold:
                    continue
                results.append(ScoredResult(
                    connection_id=record.connection_id,
                    connection=record.original_connection,
                    score=scores.total,
                    breakdown=scores.to_breakdown(),
                    relevance=relevance_for(scores.total),
                ))
        return results

    async def _fallback(self, request: SearchRequest, limit: int) -> list[ScoredResult]:
        try:
            hits = await self.store.search_index(request.user_id, request.query)
        except Exception as exc:
            logger.warning("Fallback index search failed for user %s: %s", request.user_id, exc)
            return []
        return [_fallback_result(entry, rank) for rank, entry in enumerate(hits[:limit])]

    async def search_stats(self, user_id: str) -> SearchStats:
        try:
            records = await self.store.list_active_contacts(user_id)
        except Exception as exc:
            raise StoreUnavailable(f"Could not load contacts for user {user_id}: {exc}") from exc
        stamps = [r.last_updated for r in records if r.last_updated is not None]
        return SearchStats(
            total_connections=len(records),
            total_vectors=sum(len(r.embeddings) for r in records),
            last_updated=max(stamps) if stamps else None,
        )

    def invalidate_user(self, user_id: str) -> None:
        """Drop cached responses after the user's contacts change."""
        if self.cache is not None:
            self.cache.clear_user(user_id)


def run(
    request: SearchRequest,
    store: ContactStore,
    synthesizer: WeightSynthesizer | None = None,
) -> SearchResponse:
    """Blocking entry point for callers without an event loop."""
    return asyncio.run(Ranker(store, synthesizer).search(request))
