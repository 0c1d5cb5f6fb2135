"""Lexical overlap scoring between a query and one contact's aspect text.

Per aspect: substring hits of query terms (and naive stems) against the
joined aspect list, normalized by query length, plus a small bonus for
multiple hits.  Aspects are combined with the query's weight vector.
Stored embeddings are never read here.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict

from src.contact_ranking.config import settings
from src.contact_ranking.domain_model import IMPORTANT_TERMS, naive_stem
from src.contact_ranking.models import (
    ASPECTS,
    AspectScores,
    ContactVectorRecord,
    WeightVector,
    empty_aspect_map,
)

logger = logging.getLogger(__name__)

MIN_TERM_LENGTH = 3
MULTI_MATCH_BONUS = 0.1


class PreprocessedQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    terms: tuple[str, ...]
    important_terms: frozenset[str]
    stemmed_terms: tuple[str, ...]


class AspectMatch(NamedTuple):
    matches: int
    points: float


def preprocess_query(query: str) -> PreprocessedQuery:
    terms = tuple(t for t in query.lower().split() if len(t) >= MIN_TERM_LENGTH)
    return PreprocessedQuery(
        terms=terms,
        important_terms=frozenset(t for t in terms if t in IMPORTANT_TERMS),
        stemmed_terms=tuple(naive_stem(t) for t in terms),
    )


def match_terms(query: PreprocessedQuery, text: str) -> AspectMatch:
    matches = 0
    points = 0.0
    for term in query.terms:
        if term in text:
            points += 2.0 if term in query.important_terms else 1.0
            matches += 1
    for stemmed in query.stemmed_terms:
        if stemmed and stemmed in text and stemmed not in query.terms:
            points += 0.5
            matches += 1
    return AspectMatch(matches, points)


def text_similarity(query: PreprocessedQuery, texts: list[str]) -> float:
    """Overlap score of ``query`` against one aspect's text list, in [0, 1]."""
    if not texts or not query.terms:
        return 0.0
    text = " ".join(texts).lower()
    hit = match_terms(query, text)
    base = hit.matches / len(query.terms)
    bonus = MULTI_MATCH_BONUS * (hit.matches - 1) if hit.matches > 1 else 0.0
    return min(1.0, base + bonus)


def score_record(
    query: PreprocessedQuery,
    record: ContactVectorRecord,
    weights: WeightVector,
    epsilon: float | None = None,
) -> AspectScores:
    eps = settings.aspect_epsilon if epsilon is None else epsilon
    per_aspect = empty_aspect_map()

    for aspect in ASPECTS:
        if weights.get(aspect) <= eps:
            continue
        try:
            per_aspect[aspect] = text_similarity(query, record.aspect_texts(aspect))
        except (TypeError, AttributeError, ValueError) as exc:
            logger.warning(
                "Malformed %s data on %s (%s); scoring aspect as 0",
                aspect, record.connection_id, exc,
            )
            per_aspect[aspect] = 0.0

    weighted_sum = 0.0
    weight_total = 0.0
    for aspect in ASPECTS:
        weight = weights.get(aspect)
        if weight > eps:
            weighted_sum += per_aspect[aspect] * weight
            weight_total += weight

    total = weighted_sum / weight_total if weight_total > 0 else 0.0
    total = min(max(total, 0.0), 1.0)
    logger.debug(
        "Lexical %s: skills=%.2f exp=%.2f company=%.2f loc=%.2f edu=%.2f -> %.3f",
        record.connection_id, per_aspect["skills"], per_aspect["experience"],
        per_aspect["company"], per_aspect["location"], per_aspect["education"], total,
    )
    return AspectScores(per_aspect=per_aspect, total=total)


# ---------------------------------------------------------------------------
# Per-call adapters for callers that score one contact at a time
# ---------------------------------------------------------------------------

def score_contact_detailed(
    query: str, record: ContactVectorRecord, weights: WeightVector,
) -> AspectScores:
    return score_record(preprocess_query(query), record, weights)


def score_contact(query: str, record: ContactVectorRecord, weights: WeightVector) -> float:
    return score_contact_detailed(query, record, weights).total
