"""Unit tests for the deterministic domain model."""

import pytest

from src.contact_ranking.domain_model import (
    KEYWORD_BASE_WEIGHTS,
    KEYWORD_GOAL_ADJUSTMENTS,
    SMART_GOAL_MULTIPLIERS,
    STATIC_DEFAULT_WEIGHTS,
    WEIGHT_INDICATORS,
    analyze_context,
    heuristic_intent,
    heuristic_patterns,
    naive_stem,
)
from src.contact_ranking.models import ASPECTS, CORE_ASPECTS


class TestTables:
    def test_indicators_cover_core_aspects(self):
        assert set(WEIGHT_INDICATORS) == set(CORE_ASPECTS)

    def test_keyword_base_sums_to_one(self):
        assert sum(KEYWORD_BASE_WEIGHTS.values()) == pytest.approx(1.0)

    def test_static_defaults_sum_to_one(self):
        assert sum(STATIC_DEFAULT_WEIGHTS.values()) == pytest.approx(1.0)
        assert STATIC_DEFAULT_WEIGHTS["summary"] == 0.0

    def test_every_goal_type_has_a_table(self):
        goal_types = {
            "job_search", "startup_building", "mentorship",
            "industry_networking", "skill_development", "general",
        }
        assert set(SMART_GOAL_MULTIPLIERS) == goal_types
        assert set(KEYWORD_GOAL_ADJUSTMENTS) == goal_types

    def test_general_goal_has_no_multipliers(self):
        assert SMART_GOAL_MULTIPLIERS["general"] == {}
        assert KEYWORD_GOAL_ADJUSTMENTS["general"] == {}

    def test_multipliers_only_boost(self):
        for table in SMART_GOAL_MULTIPLIERS.values():
            assert all(m > 1.0 for m in table.values())


class TestNaiveStem:
    def test_strips_ing(self):
        assert naive_stem("engineering") == "engineer"

    def test_strips_er(self):
        assert naive_stem("developer") == "develop"

    def test_strips_ly(self):
        assert naive_stem("quickly") == "quick"

    def test_no_suffix_unchanged(self):
        assert naive_stem("python") == "python"

    def test_only_first_matching_suffix(self):
        # "ing" is checked before "er", so one suffix comes off.
        assert naive_stem("engineering") != "engine"


class TestAnalyzeContext:
    def test_default_is_low_and_general(self):
        ctx = analyze_context("python developer")
        assert ctx.urgency == "low"
        assert ctx.specificity == "general"
        assert ctx.time_sensitive is False

    def test_high_urgency(self):
        ctx = analyze_context("need a designer asap")
        assert ctx.urgency == "high"
        assert ctx.time_sensitive is True

    def test_medium_urgency(self):
        assert analyze_context("hire someone soon").urgency == "medium"

    def test_later_level_overrides(self):
        # Both a high and a low indicator: low is checked last and wins.
        assert analyze_context("urgent but no rush").urgency == "low"

    def test_specific(self):
        assert analyze_context("exactly a rust engineer").specificity == "specific"

    def test_vague(self):
        assert analyze_context("maybe someone in design").specificity == "vague"

    def test_specific_beats_vague(self):
        assert analyze_context("maybe specifically a cto").specificity == "specific"

    def test_complexity_thresholds(self):
        assert analyze_context("one two three four").complexity == "simple"
        assert analyze_context("one two three four five").complexity == "moderate"
        assert analyze_context(" ".join(["w"] * 9)).complexity == "moderate"
        assert analyze_context(" ".join(["w"] * 10)).complexity == "complex"


class TestHeuristicIntent:
    def test_location_first(self):
        assert heuristic_intent("remote python developer").primary_intent == "location"

    def test_location_takes_precedence_over_experience(self):
        assert heuristic_intent("senior engineer in berlin").primary_intent == "location"

    def test_experience(self):
        assert heuristic_intent("senior react developer").primary_intent == "experience"

    def test_company(self):
        assert heuristic_intent("startup founders").primary_intent == "company"

    def test_default_skills(self):
        analysis = heuristic_intent("need help")
        assert analysis.primary_intent == "skills"
        assert analysis.urgency == "medium"
        assert analysis.specificity == "general"

    def test_secondary_intents(self):
        analysis = heuristic_intent("anything")
        assert [(s.intent, s.confidence) for s in analysis.secondary_intents] == [
            ("skills", 0.6), ("experience", 0.4),
        ]

    def test_urgent_and_specific_labels(self):
        analysis = heuristic_intent("urgent: a specific kotlin contractor")
        assert analysis.urgency == "high"
        assert analysis.specificity == "specific"


class TestHeuristicPatterns:
    def test_full_aspect_map(self):
        assert set(heuristic_patterns("")) == set(ASPECTS)

    def test_increments(self):
        p = heuristic_patterns("senior engineer at a startup")
        assert p["experience"] == 0.3
        assert p["company"] == 0.3
        assert p["skills"] == 0.0

    def test_summary_increment(self):
        assert heuristic_patterns("tell me about them")["summary"] == 0.2

    def test_no_triggers_all_zero(self):
        assert all(v == 0.0 for v in heuristic_patterns("xyz").values())
