"""Pydantic v2 data models: the data contracts flowing through the system."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Aspect vocabulary
# ---------------------------------------------------------------------------

Aspect = Literal[
    "skills",
    "experience",
    "company",
    "location",
    "network",
    "goal",
    "education",
    "summary",
]

ASPECTS: tuple[Aspect, ...] = (
    "skills",
    "experience",
    "company",
    "location",
    "network",
    "goal",
    "education",
    "summary",
)

# The seven aspects every classifier reports on; summary is optional.
CORE_ASPECTS: tuple[Aspect, ...] = ASPECTS[:7]

# Record field holding the matchable text list for each aspect.
ASPECT_FIELDS: dict[Aspect, str] = {
    "skills": "skills",
    "experience": "experience",
    "company": "companies",
    "location": "locations",
    "network": "network",
    "goal": "goals",
    "education": "education",
    "summary": "summaries",
}

GoalType = Literal[
    "job_search",
    "startup_building",
    "mentorship",
    "industry_networking",
    "skill_development",
    "general",
]

Urgency = Literal["high", "medium", "low"]
Specificity = Literal["specific", "general", "vague"]
Complexity = Literal["simple", "moderate", "complex"]
Relevance = Literal["high", "medium", "low"]
ExperienceLevel = Literal["entry", "mid", "senior", "executive"]

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def empty_aspect_map() -> dict[Aspect, float]:
    return {a: 0.0 for a in ASPECTS}


def relevance_for(score: float) -> Relevance:
    if score > 0.7:
        return "high"
    if score > 0.5:
        return "medium"
    return "low"


# ---------------------------------------------------------------------------
# Weights
# ---------------------------------------------------------------------------

class WeightVector(BaseModel):
    """Per-aspect importance distribution for one query.

    Construction always normalizes: whatever non-negative raw weights are
    passed in, the stored values sum to 1.0.  Instances are frozen.
    """

    model_config = ConfigDict(frozen=True)

    skills: float = Field(default=0.0, ge=0.0)
    experience: float = Field(default=0.0, ge=0.0)
    company: float = Field(default=0.0, ge=0.0)
    location: float = Field(default=0.0, ge=0.0)
    network: float = Field(default=0.0, ge=0.0)
    goal: float = Field(default=0.0, ge=0.0)
    education: float = Field(default=0.0, ge=0.0)
    summary: float = Field(default=0.0, ge=0.0)

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        unknown = set(data) - set(ASPECTS)
        if unknown:
            raise ValueError(f"Unknown aspects: {', '.join(sorted(unknown))}")
        raw = {a: float(data.get(a) or 0.0) for a in ASPECTS}
        if any(v < 0.0 for v in raw.values()):
            raise ValueError("Aspect weights must be non-negative")
        total = sum(raw.values())
        if total <= 0.0:
            raise ValueError("At least one aspect weight must be positive")
        return {a: v / total for a, v in raw.items()}

    def get(self, aspect: Aspect) -> float:
        return getattr(self, aspect)

    def as_dict(self) -> dict[Aspect, float]:
        return {a: getattr(self, a) for a in ASPECTS}

    def top_aspect(self) -> Aspect:
        weights = self.as_dict()
        return max(ASPECTS, key=lambda a: weights[a])


# ---------------------------------------------------------------------------
# Goals and query analysis
# ---------------------------------------------------------------------------

class GoalPreferences(BaseModel):
    """Constraints used for hard filtering only, never for scoring."""

    model_config = _CAMEL

    location: list[str] = Field(default_factory=list)
    industry: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    experience_level: ExperienceLevel | None = None


class Goal(BaseModel):
    type: GoalType = "general"
    description: str = ""
    keywords: list[str] = Field(default_factory=list)
    preferences: GoalPreferences = Field(default_factory=GoalPreferences)


class GoalClassification(BaseModel):
    goal: Goal
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    reasoning: str = ""


class SecondaryIntent(BaseModel):
    intent: Aspect
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class IntentAnalysis(BaseModel):
    model_config = _CAMEL

    primary_intent: Aspect = "skills"
    secondary_intents: list[SecondaryIntent] = Field(default_factory=list)
    context: str = ""
    urgency: Urgency = "medium"
    specificity: Specificity = "general"


class QueryContext(BaseModel):
    """Cheap, call-free analysis of the raw query text."""

    urgency: Urgency = "low"
    specificity: Specificity = "general"
    time_sensitive: bool = False
    complexity: Complexity = "simple"


# ---------------------------------------------------------------------------
# Stored contacts
# ---------------------------------------------------------------------------

class AspectEmbedding(BaseModel):
    vector: list[float]
    dimension: int = 0
    model: str = ""
    timestamp: datetime | None = None

    @model_validator(mode="after")
    def _check_dimension(self) -> AspectEmbedding:
        if not self.dimension:
            self.dimension = len(self.vector)
        elif self.dimension != len(self.vector):
            raise ValueError(
                f"Embedding dimension {self.dimension} does not match "
                f"vector length {len(self.vector)}"
            )
        return self


class ContactVectorRecord(BaseModel):
    """One contact as indexed for a single owning user.

    ``embeddings`` are stored for other consumers; the ranker matches only
    against the per-aspect string lists.
    """

    model_config = _CAMEL

    connection_id: str
    user_id: str
    original_connection: dict[str, Any] = Field(default_factory=dict)
    embeddings: dict[Aspect, AspectEmbedding] = Field(default_factory=dict)

    skills: list[str] = Field(default_factory=list)
    experience: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("experience", "jobTitles", "job_titles"),
    )
    companies: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    industries: list[str] = Field(default_factory=list)
    network: list[str] = Field(default_factory=list)
    goals: list[str] = Field(default_factory=list)
    education: list[str] = Field(default_factory=list)
    summaries: list[str] = Field(default_factory=list)

    last_updated: datetime | None = None
    is_active: bool = True

    @model_validator(mode="before")
    @classmethod
    def _collect_aspect_vectors(cls, data: Any) -> Any:
        # Stored documents carry one "<aspect>Vector" key per embedding.
        if not isinstance(data, dict):
            return data
        vector_keys = [f"{a}Vector" for a in ASPECTS if f"{a}Vector" in data]
        if not vector_keys:
            return data
        data = dict(data)
        embeddings = dict(data.get("embeddings") or {})
        for key in vector_keys:
            embeddings.setdefault(key[: -len("Vector")], data.pop(key))
        data["embeddings"] = embeddings
        return data

    def aspect_texts(self, aspect: Aspect) -> list[str]:
        texts = getattr(self, ASPECT_FIELDS[aspect])
        if aspect == "experience" and not texts:
            # Older records carry no titles; companies and skills stand in.
            return self.companies + self.skills
        return texts

    def flag(self, name: str) -> bool | None:
        flags = self.original_connection.get("flags") or {}
        value = flags.get(name) if isinstance(flags, dict) else None
        return value if isinstance(value, bool) else None


class IndexedContact(BaseModel):
    """Plain-text index entry used by the fallback substring search."""

    model_config = _CAMEL

    id: str
    user_id: str
    name: str
    company: str | None = None
    position: str | None = None
    location: str | None = None
    industry: str | None = None
    headline: str | None = None
    skills: list[str] = Field(default_factory=list)
    is_open_to_work: bool | None = None
    is_hiring: bool | None = None
    payload: dict[str, Any] = Field(default_factory=dict)

    def searchable_fields(self) -> list[str]:
        fields = [self.name, self.company, self.position, self.location, self.headline]
        return [f.lower() for f in fields if f] + [s.lower() for s in self.skills]


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class SearchFilters(BaseModel):
    model_config = _CAMEL

    skills: list[str] = Field(default_factory=list)
    companies: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    industries: list[str] = Field(default_factory=list)
    is_hiring: bool | None = None
    is_open_to_work: bool | None = None

    def is_empty(self) -> bool:
        return not (
            self.skills or self.companies or self.locations or self.industries
            or self.is_hiring is not None or self.is_open_to_work is not None
        )


class SearchRequest(BaseModel):
    model_config = _CAMEL

    query: str
    user_id: str
    weights: WeightVector | None = None
    goal: Goal | None = None
    filters: SearchFilters | None = None
    limit: int | None = Field(default=None, ge=1)
    threshold: float | None = Field(default=None, ge=0.0, le=1.0)


# ---------------------------------------------------------------------------
# Scoring / output types
# ---------------------------------------------------------------------------

class AspectScores(BaseModel):
    per_aspect: dict[Aspect, float] = Field(default_factory=empty_aspect_map)
    total: float = 0.0

    def to_breakdown(self) -> ScoreBreakdown:
        return ScoreBreakdown(
            skills_score=self.per_aspect.get("skills", 0.0),
            experience_score=self.per_aspect.get("experience", 0.0),
            company_score=self.per_aspect.get("company", 0.0),
            location_score=self.per_aspect.get("location", 0.0),
            network_score=self.per_aspect.get("network", 0.0),
            goal_score=self.per_aspect.get("goal", 0.0),
            education_score=self.per_aspect.get("education", 0.0),
            summary_score=self.per_aspect.get("summary", 0.0),
        )


class ScoreBreakdown(BaseModel):
    model_config = _CAMEL

    skills_score: float = 0.0
    experience_score: float = 0.0
    company_score: float = 0.0
    location_score: float = 0.0
    network_score: float = 0.0
    goal_score: float = 0.0
    education_score: float = 0.0
    summary_score: float | None = None


class ScoredResult(BaseModel):
    model_config = _CAMEL

    connection_id: str
    connection: dict[str, Any] = Field(default_factory=dict)
    score: float = Field(ge=0.0, le=1.0)
    breakdown: ScoreBreakdown = Field(default_factory=ScoreBreakdown)
    relevance: Relevance = "low"


class SearchResponse(BaseModel):
    model_config = _CAMEL

    results: list[ScoredResult] = Field(default_factory=list)
    weights: WeightVector
    total_candidates_considered: int = 0
    fallback_used: bool = False


class SearchStats(BaseModel):
    model_config = _CAMEL

    total_connections: int = 0
    total_vectors: int = 0
    last_updated: datetime | None = None


class WeightComparison(BaseModel):
    query: str
    keyword_weights: WeightVector
    smart_weights: WeightVector
    analysis: IntentAnalysis
    differences: dict[Aspect, float] = Field(default_factory=empty_aspect_map)

    def biggest_difference(self) -> tuple[Aspect, float]:
        aspect = max(ASPECTS, key=lambda a: abs(self.differences[a]))
        return aspect, self.differences[aspect]
