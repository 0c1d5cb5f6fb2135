"""Error taxonomy for the ranking pipeline."""

from __future__ import annotations


class ContactRankingError(Exception):
    """Base class for every error raised by this package."""


class ClassifierUnavailable(ContactRankingError):
    """An external intent/pattern/goal classifier could not produce a result.

    Always recovered locally; callers of the ranker never see it.
    """


class StoreUnavailable(ContactRankingError):
    """Reading the candidate set failed.  Fatal for the request."""

    retryable = True


class InvalidRequest(ContactRankingError, ValueError):
    """The request is missing its query text or user identifier."""
