"""Search API: predictive and general search over listings and creators.

Query parameters are taken as raw strings and normalized by the service,
so malformed input yields an empty result rather than a 422.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from marketsearch.api.v1.dependencies import get_client_address, get_search_service
from marketsearch.application.use_cases.search import PredictiveSearchService
from marketsearch.core.constants import CHANNEL_GENERAL_SEARCH, CHANNEL_PREDICTIVE_SEARCH
from marketsearch.schemas.search import PredictiveSearchResponse

router = APIRouter()

_RESPONSE_OPTIONS = {
    "response_model": PredictiveSearchResponse,
    "response_model_exclude_none": True,
}


@router.get("/predictive", **_RESPONSE_OPTIONS)
async def predictive_search(
    search_svc: Annotated[PredictiveSearchService, Depends(get_search_service)],
    client_address: Annotated[str, Depends(get_client_address)],
    q: Annotated[str | None, Query(description="Search term")] = None,
    limit: Annotated[str | None, Query(description="Max items per category (1-50)")] = None,
) -> PredictiveSearchResponse:
    """Type-ahead search across creators and live listings."""
    response = await search_svc.search(
        q, limit, caller_address=client_address, channel=CHANNEL_PREDICTIVE_SEARCH
    )
    return PredictiveSearchResponse.from_dto(response)


@router.get("", **_RESPONSE_OPTIONS)
async def search(
    search_svc: Annotated[PredictiveSearchService, Depends(get_search_service)],
    client_address: Annotated[str, Depends(get_client_address)],
    q: Annotated[str | None, Query(description="Search term")] = None,
    limit: Annotated[str | None, Query(description="Max items per category (1-50)")] = None,
) -> PredictiveSearchResponse:
    """General search; same sources as predictive, stricter rate budget."""
    response = await search_svc.search(
        q, limit, caller_address=client_address, channel=CHANNEL_GENERAL_SEARCH
    )
    return PredictiveSearchResponse.from_dto(response)
