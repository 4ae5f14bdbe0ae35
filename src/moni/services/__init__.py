"""Application-facing services built on the API clients."""

from .insight_service import NO_ANSWER, DocumentSearchResult, InsightService

__all__ = ["NO_ANSWER", "DocumentSearchResult", "InsightService"]
