"""Application use cases."""

from marketsearch.application.use_cases.search import PredictiveSearchService

__all__ = ["PredictiveSearchService"]
