"""Tests for weight synthesis: runs without LLM / API calls."""

from __future__ import annotations

import asyncio

import pytest

from src.contact_ranking.config import MixWeights
from src.contact_ranking.errors import ClassifierUnavailable
from src.contact_ranking.models import (
    ASPECTS,
    Goal,
    IntentAnalysis,
    QueryContext,
    WeightVector,
    empty_aspect_map,
)
from src.contact_ranking.weighting.comparison import compare_strategies
from src.contact_ranking.weighting.keyword import count_indicator_matches, keyword_weights
from src.contact_ranking.weighting.synthesizer import (
    WeightSynthesizer,
    apply_goal_adjustments,
    combine_signals,
    synthesize_weights,
)


class FixedIntent:
    def __init__(self, analysis: IntentAnalysis) -> None:
        self.analysis = analysis
        self.calls = 0

    async def classify_intent(self, query: str) -> IntentAnalysis:
        self.calls += 1
        return self.analysis


class FixedPatterns:
    def __init__(self, patterns: dict) -> None:
        self.patterns = patterns

    async def detect_patterns(self, query: str) -> dict:
        return dict(self.patterns)


class BrokenIntent:
    async def classify_intent(self, query: str) -> IntentAnalysis:
        raise ClassifierUnavailable("service down")


class BrokenPatterns:
    async def detect_patterns(self, query: str) -> dict:
        raise RuntimeError("connection reset")


class SlowIntent:
    async def classify_intent(self, query: str) -> IntentAnalysis:
        await asyncio.sleep(10)
        return IntentAnalysis(primary_intent="network")


class SlowPatterns:
    async def detect_patterns(self, query: str) -> dict:
        await asyncio.sleep(10)
        return empty_aspect_map()


class RawPatterns:
    def __init__(self, payload: object) -> None:
        self.payload = payload

    async def detect_patterns(self, query: str):
        return self.payload


def _patterns(**values: float) -> dict:
    patterns = empty_aspect_map()
    patterns.update(values)
    return patterns


class TestCombineSignals:
    def test_primary_intent_dominates(self):
        raw = combine_signals(
            IntentAnalysis(primary_intent="skills"), empty_aspect_map(), QueryContext(),
        )
        assert raw["skills"] == pytest.approx(0.6 * 0.8 + 0.1 * 0.1)
        assert raw["company"] == pytest.approx(0.6 * 0.1 + 0.1 * 0.1)

    def test_pattern_contribution(self):
        raw = combine_signals(
            IntentAnalysis(primary_intent="skills"),
            _patterns(location=1.0),
            QueryContext(),
        )
        assert raw["location"] == pytest.approx(0.6 * 0.1 + 0.3 * 1.0 + 0.1 * 0.1)

    def test_specific_context_rescales_uniformly(self):
        general = combine_signals(
            IntentAnalysis(), empty_aspect_map(), QueryContext(specificity="general"),
        )
        specific = combine_signals(
            IntentAnalysis(), empty_aspect_map(), QueryContext(specificity="specific"),
        )
        for aspect in ASPECTS:
            assert specific[aspect] - general[aspect] == pytest.approx(0.1 * 0.1)

    def test_custom_mix(self):
        raw = combine_signals(
            IntentAnalysis(primary_intent="goal"),
            empty_aspect_map(),
            QueryContext(),
            MixWeights(intent=1.0, pattern=0.0, context=0.0),
        )
        assert raw["goal"] == pytest.approx(0.8)
        assert raw["skills"] == pytest.approx(0.1)


class TestGoalAdjustments:
    def test_skill_development_multiplies_skills(self):
        base = {a: 0.3 for a in ASPECTS}
        adjusted = apply_goal_adjustments(base, "skill_development", IntentAnalysis())
        assert adjusted["skills"] == pytest.approx(0.3 * 1.8)
        assert adjusted["skills"] > base["skills"]
        assert all(adjusted["skills"] > v for a, v in adjusted.items() if a != "skills")
        assert WeightVector(**adjusted).top_aspect() == "skills"

    def test_general_leaves_weights(self):
        base = {a: 0.3 for a in ASPECTS}
        assert apply_goal_adjustments(base, "general", IntentAnalysis()) == base

    def test_urgency_boost(self):
        base = {a: 1.0 for a in ASPECTS}
        adjusted = apply_goal_adjustments(base, "general", IntentAnalysis(urgency="high"))
        assert adjusted["skills"] == pytest.approx(1.2)
        assert adjusted["experience"] == pytest.approx(1.2)
        assert adjusted["company"] == 1.0

    def test_specific_boosts_primary(self):
        base = {a: 1.0 for a in ASPECTS}
        analysis = IntentAnalysis(primary_intent="location", specificity="specific")
        adjusted = apply_goal_adjustments(base, "general", analysis)
        assert adjusted["location"] == pytest.approx(1.3)

    def test_input_not_mutated(self):
        base = {a: 0.3 for a in ASPECTS}
        apply_goal_adjustments(base, "job_search", IntentAnalysis())
        assert base["experience"] == 0.3


class TestKeywordStrategy:
    def test_counts_indicator_matches(self):
        matches = count_indicator_matches("senior python engineer")
        assert matches["experience"] >= 1
        assert matches["skills"] >= 1

    def test_no_matches_uses_base_table(self):
        w = keyword_weights("zzz qqq")
        assert w.skills == pytest.approx(0.20)
        assert w.location == pytest.approx(0.15)

    def test_normalized_with_goal(self):
        w = keyword_weights("react developer", Goal(type="skill_development"))
        assert sum(w.as_dict().values()) == pytest.approx(1.0)
        assert w.top_aspect() == "skills"


class TestWeightSynthesizer:
    @pytest.mark.asyncio
    async def test_normalization_for_many_queries(self):
        synth = WeightSynthesizer(strategy="smart")
        queries = ["", "need help", "urgent senior engineer in austin", "mba alumni mentor"]
        goals = [None, Goal(type="mentorship"), Goal(type="startup_building")]
        for query in queries:
            for goal in goals:
                w = await synth.synthesize(query, goal)
                values = w.as_dict().values()
                assert sum(values) == pytest.approx(1.0, abs=1e-9)
                assert all(v >= 0.0 for v in values)

    @pytest.mark.asyncio
    async def test_deterministic_with_stubs(self):
        intent = FixedIntent(IntentAnalysis(primary_intent="company", urgency="high"))
        patterns = FixedPatterns(_patterns(company=0.9, network=0.4))
        synth = WeightSynthesizer(intent, patterns, strategy="smart")
        goal = Goal(type="job_search")
        first = await synth.synthesize("fintech founders", goal)
        second = await synth.synthesize("fintech founders", goal)
        assert first.as_dict() == second.as_dict()
        assert first.top_aspect() == "company"

    @pytest.mark.asyncio
    async def test_need_help_general_goal_without_classifiers(self):
        w = await synthesize_weights(
            "need help", Goal(type="general"),
            synthesizer=WeightSynthesizer(strategy="smart"),
        )
        assert sum(w.as_dict().values()) == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_failing_classifiers_fall_back(self):
        synth = WeightSynthesizer(BrokenIntent(), BrokenPatterns(), strategy="smart")
        fallback = WeightSynthesizer(strategy="smart")
        broken = await synth.synthesize("senior react developer")
        local = await fallback.synthesize("senior react developer")
        assert broken.as_dict() == local.as_dict()

    @pytest.mark.asyncio
    async def test_timeouts_fall_back_independently(self):
        patterns = FixedPatterns(_patterns(education=1.0))
        synth = WeightSynthesizer(SlowIntent(), patterns, strategy="smart", timeout=0.05)
        w = await asyncio.wait_for(synth.synthesize("phd researchers"), timeout=2)
        # Intent falls back to the heuristic; the pattern stub still counts.
        analysis = await synth.resolve_intent("phd researchers")
        assert analysis.primary_intent == "skills"
        assert w.education > w.company

    @pytest.mark.asyncio
    async def test_slow_patterns_time_out(self):
        synth = WeightSynthesizer(None, SlowPatterns(), strategy="smart", timeout=0.05)
        patterns = await asyncio.wait_for(synth.resolve_patterns("remote"), timeout=2)
        assert patterns["location"] == 0.3

    @pytest.mark.asyncio
    async def test_out_of_range_patterns_are_clamped(self):
        synth = WeightSynthesizer(
            None, RawPatterns({"skills": -2.0, "company": 5.0}), strategy="smart",
        )
        patterns = await synth.resolve_patterns("anything")
        assert patterns["skills"] == 0.0
        assert patterns["company"] == 1.0
        weights = await synth.synthesize("anything")
        assert sum(weights.as_dict().values()) == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_unusable_patterns_fall_back(self):
        for payload in ({"skills": float("nan")}, {"skills": float("inf")}, None, [0.3]):
            synth = WeightSynthesizer(None, RawPatterns(payload), strategy="smart")
            patterns = await synth.resolve_patterns("remote")
            assert patterns["location"] == 0.3
            weights = await synth.synthesize("remote")
            assert all(v >= 0.0 for v in weights.as_dict().values())

    @pytest.mark.asyncio
    async def test_malformed_intent_falls_back(self):
        class RawIntent:
            async def classify_intent(self, query: str):
                return {"primaryIntent": "charisma"}

        synth = WeightSynthesizer(RawIntent(), None, strategy="smart")
        analysis = await synth.resolve_intent("senior react developer")
        assert analysis.primary_intent == "experience"

    @pytest.mark.asyncio
    async def test_nan_mixed_with_valid_scores(self):
        payload = {"skills": float("nan"), "education": 0.8}
        synth = WeightSynthesizer(None, RawPatterns(payload), strategy="smart")
        patterns = await synth.resolve_patterns("phd")
        assert patterns["skills"] == 0.0
        assert patterns["education"] == 0.8

    @pytest.mark.asyncio
    async def test_keyword_strategy(self):
        synth = WeightSynthesizer(strategy="keyword")
        w = await synth.synthesize("react developer")
        assert w == keyword_weights("react developer")

    @pytest.mark.asyncio
    async def test_static_strategy_ignores_query(self):
        synth = WeightSynthesizer(strategy="static")
        a = await synth.synthesize("react developer")
        b = await synth.synthesize("phd in economics", Goal(type="mentorship"))
        assert a == b
        assert a.skills == pytest.approx(0.25)

    @pytest.mark.asyncio
    async def test_goal_shifts_weights(self):
        synth = WeightSynthesizer(strategy="smart")
        plain = await synth.synthesize("python")
        learning = await synth.synthesize("python", Goal(type="skill_development"))
        assert learning.education > plain.education


class TestCompareStrategies:
    @pytest.mark.asyncio
    async def test_differences(self):
        synth = WeightSynthesizer(strategy="keyword")
        comparison = await compare_strategies("senior react developer", synthesizer=synth)
        for aspect in ASPECTS:
            expected = comparison.smart_weights.get(aspect) - comparison.keyword_weights.get(aspect)
            assert comparison.differences[aspect] == pytest.approx(expected)
        assert comparison.analysis.primary_intent == "experience"
        aspect, _ = comparison.biggest_difference()
        assert aspect in ASPECTS
