"""Application ports (Protocols) implemented by infrastructure."""

from marketsearch.application.interfaces.repositories import (
    ICreatorSearchRepository,
    IListingSearchRepository,
)
from marketsearch.application.interfaces.services import (
    IRateLimitGate,
    IStoreClient,
    IThumbnailResolver,
    RateLimitDecision,
)

__all__ = [
    "ICreatorSearchRepository",
    "IListingSearchRepository",
    "IRateLimitGate",
    "IStoreClient",
    "IThumbnailResolver",
    "RateLimitDecision",
]
