"""Centralized helper for Anthropic LLM calls."""

from __future__ import annotations

import json
import logging
import re

from anthropic import AsyncAnthropic

from src.contact_ranking.config import settings

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)```", re.DOTALL)


def _strip_fences(text: str) -> str:
    m = _FENCE_RE.search(text)
    return m.group(1).strip() if m else text.strip()


def make_client() -> AsyncAnthropic | None:
    """Build a client from settings, or None when no API key is configured."""
    if not settings.anthropic_api_key:
        return None
    return AsyncAnthropic(api_key=settings.anthropic_api_key)


async def call_llm_json(
    client: AsyncAnthropic,
    system: str,
    user: str,
    *,
    fast: bool = True,
) -> dict:
    model = settings.anthropic_fast_model if fast else settings.anthropic_model
    resp = await client.messages.create(
        model=model,
        max_tokens=1024,
        temperature=0.1,
        system=system,
        messages=[{"role": "user", "content": user}],
    )
    raw = resp.content[0].text
    cleaned = _strip_fences(raw)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        logger.warning("LLM returned non-JSON (%s model): %s", model, raw[:200])
        return {}
    return parsed if isinstance(parsed, dict) else {}


async def call_llm_text(
    client: AsyncAnthropic,
    system: str,
    user: str,
    *,
    fast: bool = False,
) -> str:
    model = settings.anthropic_fast_model if fast else settings.anthropic_model
    resp = await client.messages.create(
        model=model,
        max_tokens=1024,
        system=system,
        messages=[{"role": "user", "content": user}],
    )
    return resp.content[0].text.strip()
