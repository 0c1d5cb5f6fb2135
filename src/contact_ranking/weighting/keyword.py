"""Keyword-only weighting: the cheap strategy, no classifier calls.

Each query word votes for every aspect whose indicator list contains it
(or is contained by it).  Votes replace 80% of the base table.
"""

from __future__ import annotations

from src.contact_ranking.domain_model import (
    KEYWORD_BASE_WEIGHTS,
    KEYWORD_GOAL_ADJUSTMENTS,
    WEIGHT_INDICATORS,
)
from src.contact_ranking.models import ASPECTS, Aspect, Goal, WeightVector

MATCH_SHARE = 0.8
BASE_SHARE = 0.2


def count_indicator_matches(query: str) -> dict[Aspect, int]:
    matches: dict[Aspect, int] = {a: 0 for a in ASPECTS}
    for word in query.lower().split():
        for aspect, keywords in WEIGHT_INDICATORS.items():
            if any(word in kw or kw in word for kw in keywords):
                matches[aspect] += 1
    return matches


def keyword_weights(query: str, goal: Goal | None = None) -> WeightVector:
    weights = dict(KEYWORD_BASE_WEIGHTS)
    matches = count_indicator_matches(query)
    total_matches = sum(matches.values())

    if total_matches > 0:
        for aspect in ASPECTS:
            weights[aspect] = (
                matches[aspect] / total_matches * MATCH_SHARE
                + KEYWORD_BASE_WEIGHTS[aspect] * BASE_SHARE
            )

    if goal is not None:
        for aspect, adjustment in KEYWORD_GOAL_ADJUSTMENTS[goal.type].items():
            weights[aspect] *= adjustment

    return WeightVector(**weights)
