"""Application DTOs: store rows, store queries and search results."""

from marketsearch.application.dtos.rows import (
    CreatorRow,
    CreatorSummaryRow,
    ListingPhotoRow,
    ListingRow,
    ListingSearchRows,
)
from marketsearch.application.dtos.search import (
    CreatorItem,
    CreatorSummary,
    Money,
    PredictiveSearchResult,
    ProductImage,
    ProductItem,
    SearchCategory,
    SearchResponse,
    SourceResultItem,
)
from marketsearch.application.dtos.store_query import OrderBy, StoreQuery

__all__ = [
    "CreatorRow",
    "CreatorSummaryRow",
    "ListingPhotoRow",
    "ListingRow",
    "ListingSearchRows",
    "CreatorItem",
    "CreatorSummary",
    "Money",
    "PredictiveSearchResult",
    "ProductImage",
    "ProductItem",
    "SearchCategory",
    "SearchResponse",
    "SourceResultItem",
    "OrderBy",
    "StoreQuery",
]
