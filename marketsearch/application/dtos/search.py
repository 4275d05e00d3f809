"""DTOs for predictive search results (no dependency on the store or HTTP layer).

A result item is the sum type ProductItem | CreatorItem. Article,
collection, page, and query-suggestion categories exist in the response
shape but are typed as empty tuples: this surface never produces them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class SearchCategory(str, Enum):
    """Result categories, in rendering order."""

    CREATORS = "creators"
    PRODUCTS = "products"
    ARTICLES = "articles"
    COLLECTIONS = "collections"
    PAGES = "pages"
    QUERIES = "queries"


@dataclass(frozen=True)
class Money:
    amount: str  # decimal string with two places, e.g. "12.50"
    currency_code: str


@dataclass(frozen=True)
class ProductImage:
    url: str
    alt_text: str
    width: int
    height: int


@dataclass(frozen=True)
class CreatorSummary:
    """Creator shown on a product card."""

    id: str
    display_name: str
    handle: str


@dataclass(frozen=True)
class ProductItem:
    """Marketplace listing rendered as a product."""

    id: str
    title: str
    handle: str  # listing id; products are addressed by id
    price: Money
    image: ProductImage | None = None
    creator: CreatorSummary | None = None


@dataclass(frozen=True)
class CreatorItem:
    """Creator profile result. handle has passed the URL-segment safety check."""

    id: str
    handle: str
    display_name: str
    bio: str | None = None
    profile_image_url: str | None = None
    verification_status: str | None = None


SourceResultItem = Union[ProductItem, CreatorItem]


@dataclass(frozen=True)
class PredictiveSearchResult:
    """Items by category; total is always derived from the buckets."""

    creators: tuple[CreatorItem, ...] = ()
    products: tuple[ProductItem, ...] = ()
    articles: tuple[()] = ()
    collections: tuple[()] = ()
    pages: tuple[()] = ()
    queries: tuple[()] = ()

    @classmethod
    def empty(cls) -> PredictiveSearchResult:
        return cls()

    @property
    def items(self) -> dict[SearchCategory, tuple[SourceResultItem, ...]]:
        return {category: getattr(self, category.value) for category in SearchCategory}

    @property
    def total(self) -> int:
        return sum(len(bucket) for bucket in self.items.values())

    @property
    def is_empty(self) -> bool:
        return self.total == 0


@dataclass(frozen=True)
class SearchResponse:
    """Envelope returned to the presentation layer: normalized term + result."""

    term: str
    result: PredictiveSearchResult = field(default_factory=PredictiveSearchResult)
