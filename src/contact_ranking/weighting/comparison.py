"""Side-by-side comparison of keyword and smart weighting for a query."""

from __future__ import annotations

import logging

from src.contact_ranking.models import ASPECTS, Goal, WeightComparison
from src.contact_ranking.weighting.keyword import keyword_weights
from src.contact_ranking.weighting.synthesizer import WeightSynthesizer, default_synthesizer

logger = logging.getLogger(__name__)


async def compare_strategies(
    query: str,
    goal: Goal | None = None,
    *,
    synthesizer: WeightSynthesizer | None = None,
) -> WeightComparison:
    synthesizer = synthesizer or default_synthesizer()
    smart_synthesizer = WeightSynthesizer(
        synthesizer.intent_classifier,
        synthesizer.pattern_classifier,
        strategy="smart",
        timeout=synthesizer.timeout,
        mix=synthesizer.mix,
    )

    kw = keyword_weights(query, goal)
    smart = await smart_synthesizer.synthesize(query, goal)
    analysis = await smart_synthesizer.resolve_intent(query)

    comparison = WeightComparison(
        query=query,
        keyword_weights=kw,
        smart_weights=smart,
        analysis=analysis,
        differences={a: smart.get(a) - kw.get(a) for a in ASPECTS},
    )
    aspect, diff = comparison.biggest_difference()
    logger.info(
        "Weighting comparison for %r: primary=%s biggest shift %s %+.1f%%",
        query[:60], analysis.primary_intent, aspect, diff * 100,
    )
    return comparison
