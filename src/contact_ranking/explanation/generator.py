"""Match reasoning: a scored result and its breakdown to a short rationale.

One or two sentences per result, generated on demand for results the caller
chooses to display. Template sentences stand in when no LLM is configured or
the call fails.
"""

from __future__ import annotations

import logging

from anthropic import AsyncAnthropic

from src.contact_ranking.llm import call_llm_text
from src.contact_ranking.models import ScoredResult

logger = logging.getLogger(__name__)

MEANINGFUL_SCORE = 0.2
STRONG_SCORE = 0.4
MAX_SKILLS = 8
MAX_SUMMARY_CHARS = 200

_SYSTEM_PROMPT = """\
You are an expert networking assistant that explains why specific professional
connections are relevant to search queries.

Generate a concise, personalized explanation (1-2 sentences) of why this
connection matches the user's search. Focus on the most compelling reasons
based on the scoring breakdown.

RULES:
- Be specific and mention concrete details from the profile.
- Highlight the strongest matching aspects (highest scores).
- Use natural, conversational language.
- Avoid generic statements like "good match" or "relevant experience".
- Never fabricate facts not present in the profile data.
- Focus on actionable networking value.
"""


def _percent(score: float) -> int:
    return round(score * 100)


def unconfigured_reasoning(query: str, result: ScoredResult) -> str:
    return (
        f'This connection matches your search for "{query}" with a '
        f"{_percent(result.score)}% overall score. Configure an Anthropic API key "
        f"for detailed AI-generated reasoning."
    )


def failed_reasoning(result: ScoredResult) -> str:
    return (
        f"This connection matches your search with a {_percent(result.score)}% "
        f"score based on profile analysis."
    )


def _breakdown_scores(result: ScoredResult) -> dict[str, float]:
    dumped = result.breakdown.model_dump()
    return {
        name.removesuffix("_score"): score
        for name, score in dumped.items()
        if score is not None
    }


def _build_user_message(query: str, result: ScoredResult) -> str:
    conn = result.connection
    name = conn.get("name") or conn.get("firstName") or "this connection"
    skills = conn.get("skills") or []
    summary = str(conn.get("summary") or conn.get("about") or "")

    scores = _breakdown_scores(result)
    meaningful = ", ".join(
        f"{name_}: {_percent(s)}%" for name_, s in scores.items() if s > MEANINGFUL_SCORE
    )
    strongest = ", ".join(name_ for name_, s in scores.items() if s > STRONG_SCORE)
    matched = ", ".join(name_ for name_, s in scores.items() if s > 0)

    parts = [
        f'SEARCH QUERY: "{query}"',
        "",
        "CONNECTION PROFILE:",
        f"  Name: {name}",
        f"  Position: {conn.get('position') or ''}",
        f"  Company: {conn.get('company') or ''}",
        f"  Location: {conn.get('location') or ''}",
        f"  Skills: {', '.join(str(s) for s in skills[:MAX_SKILLS])}",
        f"  Summary: {summary[:MAX_SUMMARY_CHARS]}",
        "",
        "MATCH ANALYSIS:",
        f"  Overall score: {_percent(result.score)}%",
        f"  Score breakdown: {meaningful or 'none above 20%'}",
        f"  Strongest aspects: {strongest or 'none'}",
        f"  Matched aspects: {matched or 'none'}",
    ]
    return "\n".join(parts)


async def generate_match_reasoning(
    query: str,
    result: ScoredResult,
    client: AsyncAnthropic | None = None,
) -> str:
    """Explain why ``result`` matched ``query``; never raises for LLM problems."""
    if client is None:
        return unconfigured_reasoning(query, result)

    try:
        text = await call_llm_text(client, _SYSTEM_PROMPT, _build_user_message(query, result))
    except Exception as exc:
        logger.warning(
            "Match reasoning failed for %s (%s); using template", result.connection_id, exc,
        )
        return failed_reasoning(result)

    if not text:
        logger.warning("Empty match reasoning for %s", result.connection_id)
        return failed_reasoning(result)
    return text
