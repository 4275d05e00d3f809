"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the search use case. The shared store
client, rate limit gate, metrics and thumbnail resolver are created once
in the app lifespan and kept on app.state; repositories and the service
are built per request from them. Routes depend only on these
dependencies, not on infrastructure directly.

When the store is not configured (app.state.store is None), the service
is built without repositories and degrades to empty results.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from marketsearch.application.services.result_normalizer import ResultNormalizer
from marketsearch.application.use_cases.search import PredictiveSearchService
from marketsearch.core.config import Settings, get_settings
from marketsearch.core.constants import (
    CHANNEL_GENERAL_SEARCH,
    CHANNEL_PREDICTIVE_SEARCH,
)
from marketsearch.core.limiter import UNKNOWN_CALLER
from marketsearch.infrastructure.persistence.repositories import (
    CreatorSearchRepository,
    ListingSearchRepository,
)


def get_app_settings() -> Settings:
    """Settings dependency (overridable in tests via app.dependency_overrides)."""
    return get_settings()


def get_client_address(request: Request) -> str:
    """Caller address resolved by ClientAddressMiddleware."""
    return getattr(request.state, "client_address", None) or UNKNOWN_CALLER


def get_search_service(
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> PredictiveSearchService:
    """Build PredictiveSearchService from the lifespan-owned collaborators."""
    state = request.app.state
    store = getattr(state, "store", None)
    metrics = getattr(state, "search_metrics", None)
    listings_repo = (
        ListingSearchRepository(store, metrics=metrics, debug=settings.debug)
        if store is not None
        else None
    )
    creators_repo = (
        CreatorSearchRepository(store, metrics=metrics, debug=settings.debug)
        if store is not None
        else None
    )
    return PredictiveSearchService(
        listings_repo=listings_repo,
        creators_repo=creators_repo,
        gate=state.rate_limit_gate,
        budgets={
            CHANNEL_PREDICTIVE_SEARCH: settings.predictive_search_budget,
            CHANNEL_GENERAL_SEARCH: settings.general_search_budget,
        },
        normalizer=ResultNormalizer(
            thumbnail_resolver=getattr(state, "thumbnail_resolver", None),
            metrics=metrics,
        ),
        metrics=metrics,
        deadline_seconds=settings.search_deadline_seconds,
    )
