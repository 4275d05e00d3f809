"""Search source repositories (backend-agnostic; they read through IStoreClient)."""

from marketsearch.infrastructure.persistence.repositories.creator_search_repo import (
    CreatorSearchRepository,
)
from marketsearch.infrastructure.persistence.repositories.listing_search_repo import (
    ListingSearchRepository,
)

__all__ = ["CreatorSearchRepository", "ListingSearchRepository"]
