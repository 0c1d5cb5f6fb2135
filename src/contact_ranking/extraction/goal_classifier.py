"""Goal classification: map a free-text networking message onto a Goal."""

from __future__ import annotations

import logging

from anthropic import AsyncAnthropic
from pydantic import ValidationError

from src.contact_ranking.llm import call_llm_json
from src.contact_ranking.models import Goal, GoalClassification

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = """\
You are an expert at classifying professional networking goals from chat messages.

Classify the user's primary goal into one of these categories:
1. job_search - Looking for job opportunities, career transitions, employment
2. startup_building - Building startups, finding co-founders, entrepreneurship
3. mentorship - Seeking guidance, advice, mentorship relationships
4. skill_development - Learning new skills, professional development
5. industry_networking - Industry connections, professional networking
6. general - General networking, casual connections

Return ONLY a valid JSON object:
{
  "goal": {
    "type": "goal_category",
    "description": "Goal description",
    "keywords": ["keyword1", "keyword2"],
    "preferences": {"location": [], "industry": [], "skills": []}
  },
  "confidence": 0.0-1.0,
  "reasoning": "Brief explanation of classification"
}
"""


def fallback_classification(reason: str) -> GoalClassification:
    return GoalClassification(
        goal=Goal(type="general", description="General networking"),
        confidence=0.5,
        reasoning=reason,
    )


async def classify_goal(
    message: str, client: AsyncAnthropic | None = None,
) -> GoalClassification:
    """Classify ``message``; never raises for classifier problems."""
    if client is None:
        return fallback_classification("LLM not configured")

    try:
        result = await call_llm_json(
            client,
            _SYSTEM_PROMPT,
            f'Classify the goal in this professional networking message: "{message}"',
        )
    except Exception as exc:
        logger.warning("Goal classification failed (%s); using general goal", exc)
        return fallback_classification("Goal classification failed")

    if not result or "goal" not in result:
        logger.warning("Empty goal classification for %r", message[:60])
        return fallback_classification("Fallback classification due to parsing error")

    try:
        return GoalClassification.model_validate(result)
    except ValidationError as exc:
        logger.warning("Malformed goal classification: %s", exc)
        return fallback_classification("Fallback classification due to parsing error")
