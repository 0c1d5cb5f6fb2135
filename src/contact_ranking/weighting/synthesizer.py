"""Weight synthesizer: turns a query (and optional goal) into a WeightVector.

Smart strategy pipeline:
  1. Intent analysis      (external classifier, heuristic fallback)
  2. Pattern vector       (external classifier, heuristic fallback)
  3. Query context        (local, no calls)
  4. Mix: 0.6 intent + 0.3 pattern + 0.1 context, per aspect
  5. Goal multipliers, urgency and specificity boosts
  6. Normalize

Steps 1 and 2 run concurrently, each under its own timeout.  Classifier
failures never escape this module.
"""

from __future__ import annotations

import asyncio
import logging

from src.contact_ranking.config import MixWeights, WeightingStrategy, settings
from src.contact_ranking.domain_model import (
    SMART_GOAL_MULTIPLIERS,
    SPECIFIC_PRIMARY_BOOST,
    STATIC_DEFAULT_WEIGHTS,
    URGENT_BOOST,
    analyze_context,
    heuristic_intent,
    heuristic_patterns,
)
from src.contact_ranking.extraction.intent_classifier import (
    IntentClassifier,
    PatternClassifier,
    default_classifiers,
    parse_patterns,
)
from src.contact_ranking.models import (
    ASPECTS,
    Aspect,
    Goal,
    GoalType,
    IntentAnalysis,
    QueryContext,
    WeightVector,
)
from src.contact_ranking.weighting.keyword import keyword_weights

logger = logging.getLogger(__name__)

PRIMARY_INTENT_SHARE = 0.8
OTHER_INTENT_SHARE = 0.1
SPECIFIC_CONTEXT_SHARE = 0.2
DEFAULT_CONTEXT_SHARE = 0.1


def combine_signals(
    analysis: IntentAnalysis,
    patterns: dict[Aspect, float],
    context: QueryContext,
    mix: MixWeights | None = None,
) -> dict[Aspect, float]:
    """Raw (unnormalized) weight per aspect from the three signal sources."""
    mix = mix or settings.mix_weights
    # Same for every aspect: rescales the vector, never reorders it.
    context_share = (
        SPECIFIC_CONTEXT_SHARE if context.specificity == "specific" else DEFAULT_CONTEXT_SHARE
    )
    raw: dict[Aspect, float] = {}
    for aspect in ASPECTS:
        intent_share = (
            PRIMARY_INTENT_SHARE if aspect == analysis.primary_intent else OTHER_INTENT_SHARE
        )
        raw[aspect] = (
            mix.intent * intent_share
            + mix.pattern * patterns.get(aspect, 0.0)
            + mix.context * context_share
        )
    return raw


def apply_goal_adjustments(
    raw: dict[Aspect, float],
    goal_type: GoalType,
    analysis: IntentAnalysis,
) -> dict[Aspect, float]:
    """Apply the goal's multiplier table plus urgency/specificity boosts.

    Returns unnormalized weights.
    """
    adjusted = dict(raw)
    for aspect, multiplier in SMART_GOAL_MULTIPLIERS[goal_type].items():
        adjusted[aspect] *= multiplier

    if analysis.urgency == "high":
        adjusted["skills"] *= URGENT_BOOST
        adjusted["experience"] *= URGENT_BOOST

    if analysis.specificity == "specific":
        adjusted[analysis.primary_intent] *= SPECIFIC_PRIMARY_BOOST

    return adjusted


class WeightSynthesizer:
    def __init__(
        self,
        intent_classifier: IntentClassifier | None = None,
        pattern_classifier: PatternClassifier | None = None,
        *,
        strategy: WeightingStrategy | None = None,
        timeout: float | None = None,
        mix: MixWeights | None = None,
    ) -> None:
        self.intent_classifier = intent_classifier
        self.pattern_classifier = pattern_classifier
        self.strategy = strategy or settings.weighting_strategy
        self.timeout = timeout or settings.classifier_timeout_seconds
        self.mix = mix or settings.mix_weights

    async def resolve_intent(self, query: str) -> IntentAnalysis:
        if self.intent_classifier is None:
            return heuristic_intent(query)
        try:
            analysis = await asyncio.wait_for(
                self.intent_classifier.classify_intent(query), timeout=self.timeout,
            )
            return IntentAnalysis.model_validate(analysis)
        except asyncio.TimeoutError:
            logger.warning(
                "Intent classifier timed out after %.1fs; using local heuristic",
                self.timeout,
            )
        except Exception as exc:
            logger.warning("Intent classifier unavailable (%s); using local heuristic", exc)
        return heuristic_intent(query)

    async def resolve_patterns(self, query: str) -> dict[Aspect, float]:
        if self.pattern_classifier is None:
            return heuristic_patterns(query)
        try:
            raw = await asyncio.wait_for(
                self.pattern_classifier.detect_patterns(query), timeout=self.timeout,
            )
            return parse_patterns(raw)
        except asyncio.TimeoutError:
            logger.warning(
                "Pattern classifier timed out after %.1fs; using keyword fallback",
                self.timeout,
            )
        except Exception as exc:
            logger.warning("Pattern classifier unavailable (%s); using keyword fallback", exc)
        return heuristic_patterns(query)

    async def synthesize(self, query: str, goal: Goal | None = None) -> WeightVector:
        if self.strategy == "keyword":
            return keyword_weights(query, goal)
        if self.strategy == "static":
            return WeightVector(**STATIC_DEFAULT_WEIGHTS)

        analysis, patterns = await asyncio.gather(
            self.resolve_intent(query), self.resolve_patterns(query),
        )
        context = analyze_context(query)

        raw = combine_signals(analysis, patterns, context, self.mix)
        if goal is not None:
            raw = apply_goal_adjustments(raw, goal.type, analysis)

        weights = WeightVector(**raw)
        logger.debug(
            "Synthesized weights for %r: primary=%s goal=%s top=%s",
            query[:60], analysis.primary_intent,
            goal.type if goal else "none", weights.top_aspect(),
        )
        return weights


_default: WeightSynthesizer | None = None


def default_synthesizer() -> WeightSynthesizer:
    global _default
    if _default is None:
        _default = WeightSynthesizer(*default_classifiers())
    return _default


async def synthesize_weights(
    query: str,
    goal: Goal | None = None,
    *,
    synthesizer: WeightSynthesizer | None = None,
) -> WeightVector:
    """Always returns a normalized WeightVector."""
    return await (synthesizer or default_synthesizer()).synthesize(query, goal)
