"""Hard filters applied before scoring.

Categories are ANDed; values within a category are ORed.  Matching is a
case-insensitive substring test of each filter value against the
contact's values for that category.
"""

from __future__ import annotations

from src.contact_ranking.models import (
    ContactVectorRecord,
    Goal,
    SearchFilters,
)


def _any_substring(wanted: list[str], values: list[str]) -> bool:
    lowered = [v.lower() for v in values]
    return any(w.lower() in v for w in wanted for v in lowered)


def effective_filters(
    filters: SearchFilters | None, goal: Goal | None,
) -> SearchFilters | None:
    """Fill empty filter categories from the goal's preferences.

    Returns None when nothing constrains the candidate set.
    """
    if filters is not None and filters.is_empty():
        filters = None
    if goal is None:
        return filters
    prefs = goal.preferences
    base = filters or SearchFilters()
    merged = base.model_copy(update={
        "skills": base.skills or prefs.skills,
        "locations": base.locations or prefs.location,
        "industries": base.industries or prefs.industry,
    })
    return None if merged.is_empty() else merged


def matches_filters(record: ContactVectorRecord, filters: SearchFilters) -> bool:
    if filters.skills and not _any_substring(filters.skills, record.skills):
        return False
    if filters.companies and not _any_substring(filters.companies, record.companies):
        return False
    if filters.locations and not _any_substring(filters.locations, record.locations):
        return False
    if filters.industries and not _any_substring(filters.industries, record.industries):
        return False
    if filters.is_hiring is not None and record.flag("isHiring") is not filters.is_hiring:
        return False
    if (
        filters.is_open_to_work is not None
        and record.flag("isOpenToWork") is not filters.is_open_to_work
    ):
        return False
    return True


def apply_filters(
    records: list[ContactVectorRecord], filters: SearchFilters | None,
) -> list[ContactVectorRecord]:
    if filters is None or filters.is_empty():
        return list(records)
    return [r for r in records if matches_filters(r, filters)]
