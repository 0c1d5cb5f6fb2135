"""Intent and pattern classification for search queries.

Two independent capabilities feed the weight synthesizer:
  - IntentClassifier: primary/secondary aspect, urgency, specificity
  - PatternClassifier: a raw 0..1 score per aspect

LLM-backed implementations call Claude Haiku and raise ClassifierUnavailable
on unusable output.  Heuristic implementations never fail and are what the
synthesizer falls back to.
"""

from __future__ import annotations

import logging
import math
from typing import Protocol

from anthropic import AsyncAnthropic
from pydantic import ValidationError

from src.contact_ranking.cache import QueryMemo
from src.contact_ranking.domain_model import heuristic_intent, heuristic_patterns
from src.contact_ranking.errors import ClassifierUnavailable
from src.contact_ranking.llm import call_llm_json, make_client
from src.contact_ranking.models import ASPECTS, Aspect, IntentAnalysis

logger = logging.getLogger(__name__)


class IntentClassifier(Protocol):
    async def classify_intent(self, query: str) -> IntentAnalysis: ...


class PatternClassifier(Protocol):
    async def detect_patterns(self, query: str) -> dict[Aspect, float]: ...


_ASPECT_GUIDE = """\
- skills: Technical abilities, technologies, tools, programming languages
- experience: Work history, seniority, roles, years of experience
- company: Organizations, industries, business context, company types
- location: Geographic location, remote work, regional preferences
- network: Connections, relationships, referrals, networking
- goal: Career aspirations, interests, objectives, motivations
- education: Academic background, degrees, institutions, learning
"""

_INTENT_PROMPT = f"""\
You are an expert at analyzing professional networking queries and understanding user intent.

Identify the primary and secondary intents across these categories:
{_ASPECT_GUIDE}
Also analyze:
- urgency: high/medium/low based on language intensity
- specificity: specific/general/vague based on query detail

Return ONLY a valid JSON object:
{{
  "primaryIntent": "skills|experience|company|location|network|goal|education",
  "secondaryIntents": [
    {{"intent": "experience", "confidence": 0.8}},
    {{"intent": "company", "confidence": 0.6}}
  ],
  "context": "Brief explanation of the analysis",
  "urgency": "high|medium|low",
  "specificity": "specific|general|vague"
}}
"""

_PATTERN_PROMPT = f"""\
You are an expert at analyzing professional networking queries for semantic patterns.

For each aspect below, give a confidence from 0.0 to 1.0 for how strongly it is
mentioned or implied:
{_ASPECT_GUIDE}
RULES:
- Detect ANY location mentioned (cities, countries, regions) without relying on predefined lists.
- Understand context (e.g. "worked in Tokyo" vs "Tokyo Olympics").
- Consider implicit mentions (e.g. "Silicon Valley" implies location).
- Return ONLY valid JSON, no markdown fences:
{{"patterns": {{"skills": 0.0, "experience": 0.0, "company": 0.0, "location": 0.0,
               "network": 0.0, "goal": 0.0, "education": 0.0}}}}
"""


def _is_number(value: object) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(float(value))
    )


def parse_patterns(raw: object) -> dict[Aspect, float]:
    """Coerce a classifier payload into a full aspect map clamped to [0, 1]."""
    if not isinstance(raw, dict):
        raise ClassifierUnavailable(f"Pattern payload is {type(raw).__name__}, not a mapping")
    if not any(_is_number(raw.get(a)) for a in ASPECTS):
        raise ClassifierUnavailable("Pattern payload has no numeric aspect scores")
    patterns: dict[Aspect, float] = {}
    for aspect in ASPECTS:
        value = raw.get(aspect)
        patterns[aspect] = min(max(float(value), 0.0), 1.0) if _is_number(value) else 0.0
    return patterns


class LLMIntentClassifier:
    def __init__(self, client: AsyncAnthropic, cache: QueryMemo | None = None) -> None:
        self.client = client
        self._cache: QueryMemo[IntentAnalysis] = cache if cache is not None else QueryMemo()

    async def classify_intent(self, query: str) -> IntentAnalysis:
        cached = self._cache.get(query)
        if cached is not None:
            return cached

        result = await call_llm_json(
            self.client,
            _INTENT_PROMPT,
            f'Analyze this professional networking query: "{query}"',
        )
        if not result:
            raise ClassifierUnavailable("Empty intent analysis")
        try:
            analysis = IntentAnalysis.model_validate(result)
        except ValidationError as exc:
            raise ClassifierUnavailable(f"Malformed intent analysis: {exc}") from exc

        self._cache.set(query, analysis)
        logger.info(
            "Classified intent for %r: primary=%s urgency=%s specificity=%s",
            query[:60], analysis.primary_intent, analysis.urgency, analysis.specificity,
        )
        return analysis

    def clear_cache(self) -> None:
        self._cache.clear()


class LLMPatternClassifier:
    def __init__(self, client: AsyncAnthropic, cache: QueryMemo | None = None) -> None:
        self.client = client
        self._cache: QueryMemo[dict[Aspect, float]] = (
            cache if cache is not None else QueryMemo()
        )

    async def detect_patterns(self, query: str) -> dict[Aspect, float]:
        cached = self._cache.get(query)
        if cached is not None:
            return dict(cached)

        result = await call_llm_json(
            self.client,
            _PATTERN_PROMPT,
            f'Analyze this professional networking query for semantic patterns: "{query}"',
        )
        raw = result.get("patterns", result) if result else None
        if not isinstance(raw, dict) or not raw:
            raise ClassifierUnavailable("Empty pattern analysis")
        patterns = parse_patterns(raw)
        self._cache.set(query, patterns)
        return dict(patterns)

    def clear_cache(self) -> None:
        self._cache.clear()


class HeuristicIntentClassifier:
    async def classify_intent(self, query: str) -> IntentAnalysis:
        return heuristic_intent(query)


class HeuristicPatternClassifier:
    async def detect_patterns(self, query: str) -> dict[Aspect, float]:
        return heuristic_patterns(query)


def default_classifiers(
    client: AsyncAnthropic | None = None,
) -> tuple[IntentClassifier | None, PatternClassifier | None]:
    """LLM classifiers when a client can be built, otherwise (None, None)."""
    client = client or make_client()
    if client is None:
        logger.info("No Anthropic API key configured; using local classifiers only")
        return None, None
    return LLMIntentClassifier(client), LLMPatternClassifier(client)
