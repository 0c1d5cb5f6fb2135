"""Deterministic domain model: keyword tables and call-free heuristics.

Four layers, no LLM calls, fully unit-testable:
  1. Aspect indicator vocabulary and fixed weight tables
  2. Goal multipliers
  3. Contextual analysis of the raw query (urgency, specificity, complexity)
  4. Local stand-ins for the intent and pattern classifiers
"""

from __future__ import annotations

from src.contact_ranking.models import (
    Aspect,
    GoalType,
    IntentAnalysis,
    QueryContext,
    SecondaryIntent,
    Specificity,
    Urgency,
    empty_aspect_map,
)

# ---------------------------------------------------------------------------
# Layer 1: Aspect vocabulary and fixed weight tables
# ---------------------------------------------------------------------------

WEIGHT_INDICATORS: dict[Aspect, tuple[str, ...]] = {
    "skills": (
        "skill", "technology", "programming", "coding", "development", "engineering",
        "python", "javascript", "react", "node", "aws", "cloud", "database",
        "frontend", "backend", "fullstack", "mobile", "ai", "machine learning",
        "data science", "analytics", "design", "ui", "ux",
    ),
    "experience": (
        "experience", "senior", "lead", "manager", "director", "vp", "cto", "ceo",
        "years", "expert", "specialist", "architect", "consultant", "freelance",
        "contract", "full-time", "part-time", "remote", "hybrid",
    ),
    "company": (
        "company", "startup", "enterprise", "fortune", "tech", "fintech", "healthtech",
        "edtech", "saas", "b2b", "b2c", "unicorn", "ipo", "funding", "series",
        "google", "microsoft", "apple", "amazon", "meta", "netflix",
    ),
    "location": (
        "location", "remote", "hybrid", "onsite", "san francisco", "new york",
        "seattle", "austin", "boston", "chicago", "los angeles", "miami",
        "europe", "asia", "canada", "uk", "germany", "france",
    ),
    "network": (
        "connection", "network", "referral", "mutual", "alumni", "colleague",
        "mentor", "mentee", "advisor", "investor", "founder", "co-founder",
    ),
    "goal": (
        "career", "growth", "opportunity", "challenge", "impact", "mission",
        "passion", "interest", "aspiration", "dream", "goal", "objective",
    ),
    "education": (
        "education", "university", "college", "degree", "masters", "phd", "mba",
        "bachelor", "graduate", "alumni", "harvard", "stanford", "mit", "berkeley",
        "computer science", "engineering", "business", "economics",
    ),
}

KEYWORD_BASE_WEIGHTS: dict[Aspect, float] = {
    "skills": 0.20,
    "experience": 0.20,
    "company": 0.20,
    "location": 0.15,
    "network": 0.15,
    "goal": 0.05,
    "education": 0.05,
    "summary": 0.0,
}

STATIC_DEFAULT_WEIGHTS: dict[Aspect, float] = {
    "skills": 0.25,
    "experience": 0.20,
    "company": 0.15,
    "location": 0.15,
    "network": 0.10,
    "goal": 0.10,
    "education": 0.05,
    "summary": 0.0,
}

# Query terms that score double when they match a candidate's aspect text.
IMPORTANT_TERMS: frozenset[str] = frozenset({
    "engineer", "developer", "senior", "lead", "manager", "director",
    "austin", "texas", "remote", "startup", "ai", "ml", "python",
    "react", "javascript",
})

STEM_SUFFIXES: tuple[str, ...] = ("ing", "ed", "er", "ly")


def naive_stem(term: str) -> str:
    for suffix in STEM_SUFFIXES:
        if term.endswith(suffix):
            return term[: -len(suffix)]
    return term


# ---------------------------------------------------------------------------
# Layer 2: Goal multipliers
# ---------------------------------------------------------------------------

SMART_GOAL_MULTIPLIERS: dict[GoalType, dict[Aspect, float]] = {
    "job_search": {"experience": 1.4, "company": 1.3, "skills": 1.2},
    "startup_building": {"skills": 1.5, "network": 1.4, "company": 1.3},
    "mentorship": {"experience": 1.6, "goal": 1.5, "skills": 1.1},
    "industry_networking": {"company": 1.6, "location": 1.3, "network": 1.2},
    "skill_development": {"skills": 1.8, "education": 1.5, "experience": 1.2},
    "general": {},
}

KEYWORD_GOAL_ADJUSTMENTS: dict[GoalType, dict[Aspect, float]] = {
    "job_search": {"experience": 1.5, "company": 1.3, "skills": 1.2},
    "startup_building": {"skills": 1.4, "network": 1.3, "company": 1.2},
    "mentorship": {"experience": 1.6, "goal": 1.4, "skills": 1.1},
    "industry_networking": {"company": 1.6, "location": 1.3, "network": 1.2},
    "skill_development": {"skills": 1.8, "education": 1.4, "experience": 1.2},
    "general": {},
}

URGENT_BOOST = 1.2
SPECIFIC_PRIMARY_BOOST = 1.3


# ---------------------------------------------------------------------------
# Layer 3: Contextual analysis
# ---------------------------------------------------------------------------

URGENCY_INDICATORS: dict[Urgency, tuple[str, ...]] = {
    "high": ("urgent", "asap", "immediately", "critical", "emergency", "desperate"),
    "medium": ("soon", "quickly", "timely", "priority"),
    "low": ("eventually", "sometime", "when possible", "no rush"),
}

SPECIFIC_INDICATORS: tuple[str, ...] = (
    "exactly", "specifically", "precisely", "particular", "specific",
)
VAGUE_INDICATORS: tuple[str, ...] = (
    "maybe", "perhaps", "possibly", "kind of", "sort of", "general",
)


def analyze_context(query: str) -> QueryContext:
    query_lower = query.lower()

    # Later levels override earlier ones.
    urgency: Urgency = "low"
    for level, indicators in URGENCY_INDICATORS.items():
        if any(ind in query_lower for ind in indicators):
            urgency = level

    specificity: Specificity = "general"
    if any(ind in query_lower for ind in SPECIFIC_INDICATORS):
        specificity = "specific"
    elif any(ind in query_lower for ind in VAGUE_INDICATORS):
        specificity = "vague"

    word_count = len(query.split())
    if word_count < 5:
        complexity = "simple"
    elif word_count < 10:
        complexity = "moderate"
    else:
        complexity = "complex"

    return QueryContext(
        urgency=urgency,
        specificity=specificity,
        time_sensitive=urgency != "low",
        complexity=complexity,
    )


# ---------------------------------------------------------------------------
# Layer 4: Local classifier stand-ins
# ---------------------------------------------------------------------------

_INTENT_TRIGGERS: tuple[tuple[Aspect, tuple[str, ...], float], ...] = (
    ("location", ("remote", "location", "in "), 0.9),
    ("experience", ("senior", "experience", "years"), 0.9),
    ("company", ("startup", "company", "business"), 0.85),
    ("skills", ("skill", "technology", "help"), 0.8),
)

_PATTERN_TRIGGERS: dict[Aspect, tuple[tuple[str, ...], float]] = {
    "skills": (("skill", "technology", "help"), 0.3),
    "experience": (("senior", "experience", "years"), 0.3),
    "company": (("startup", "company", "business"), 0.3),
    "location": (("remote", "location", "in "), 0.3),
    "network": (("network", "connection", "alumni"), 0.3),
    "goal": (("goal", "career", "opportunity"), 0.3),
    "education": (("education", "degree", "university"), 0.3),
    "summary": (("summary", "about"), 0.2),
}


def heuristic_intent(query: str) -> IntentAnalysis:
    """Guess a primary aspect and coarse labels from keyword families."""
    query_lower = query.lower()
    primary: Aspect = "skills"
    confidence = 0.8
    for aspect, triggers, conf in _INTENT_TRIGGERS:
        if any(t in query_lower for t in triggers):
            primary, confidence = aspect, conf
            break

    return IntentAnalysis(
        primary_intent=primary,
        secondary_intents=[
            SecondaryIntent(intent="skills", confidence=0.6),
            SecondaryIntent(intent="experience", confidence=0.4),
        ],
        context=f"Query focuses on {primary} with {confidence * 100:.0f}% confidence",
        urgency="high" if "urgent" in query_lower else "medium",
        specificity="specific" if "specific" in query_lower else "general",
    )


def heuristic_patterns(query: str) -> dict[Aspect, float]:
    query_lower = query.lower()
    patterns = empty_aspect_map()
    for aspect, (triggers, increment) in _PATTERN_TRIGGERS.items():
        if any(t in query_lower for t in triggers):
            patterns[aspect] = increment
    return patterns
