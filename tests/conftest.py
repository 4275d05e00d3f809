"""Pytest configuration and fixtures for marketsearch.

The store is replaced by StubStore, which records every StoreQuery it
receives and returns canned rows per table, so tests can assert both
results and the exact number and shape of store calls. HTTP tests run
against create_app() through httpx ASGITransport with app.state wired
by hand (ASGITransport does not run the lifespan).
"""

import asyncio
from collections.abc import Callable
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from marketsearch.api.v1.dependencies import get_app_settings
from marketsearch.application.dtos.store_query import StoreQuery
from marketsearch.application.services.result_normalizer import ResultNormalizer
from marketsearch.application.use_cases.search import PredictiveSearchService
from marketsearch.core.config import Settings, get_settings
from marketsearch.core.constants import CHANNEL_GENERAL_SEARCH, CHANNEL_PREDICTIVE_SEARCH
from marketsearch.core.limiter import RateLimitGate
from marketsearch.infrastructure.persistence.repositories import (
    CreatorSearchRepository,
    ListingSearchRepository,
)
from marketsearch.infrastructure.storage.thumbnails import PublicBucketThumbnailResolver
from marketsearch.main import create_app
from marketsearch.shared.telemetry.metrics import SearchMetrics

LISTING_1 = "0b5e7a4e-3c1d-4f7a-9a51-6f2d8e1c0a01"
LISTING_2 = "0b5e7a4e-3c1d-4f7a-9a51-6f2d8e1c0a02"
CREATOR_1 = "7d1c2b3a-4e5f-4a6b-8c7d-9e0f1a2b3c01"
CREATOR_2 = "7d1c2b3a-4e5f-4a6b-8c7d-9e0f1a2b3c02"

PUBLIC_BASE_URL = "https://store.test/storage/v1/object/public"


class StubStore:
    """Query-counting store double.

    Args:
        tables: Rows returned per table name (returned as-is, no filtering).
        errors: Exception raised per table name instead of returning rows.
        hang: When True every select waits forever (deadline tests).
    """

    def __init__(
        self,
        tables: dict[str, list[dict[str, Any]]] | None = None,
        errors: dict[str, Exception] | None = None,
        hang: bool = False,
    ) -> None:
        self.tables = tables or {}
        self.errors = errors or {}
        self.hang = hang
        self.queries: list[StoreQuery] = []

    async def select(self, query: StoreQuery) -> list[dict[str, Any]]:
        self.queries.append(query)
        if self.hang:
            await asyncio.Event().wait()
        if query.table in self.errors:
            raise self.errors[query.table]
        return [dict(row) for row in self.tables.get(query.table, [])]

    def calls(self, table: str | None = None) -> int:
        if table is None:
            return len(self.queries)
        return sum(1 for q in self.queries if q.table == table)

    def queries_for(self, table: str) -> list[StoreQuery]:
        return [q for q in self.queries if q.table == table]


def listing_row(
    listing_id: str = LISTING_1,
    title: str | None = "Vintage Jacket",
    price_cents: int | None = 1250,
    creator_id: str | None = CREATOR_1,
    created_at: str = "2024-05-01T10:00:00+00:00",
) -> dict[str, Any]:
    return {
        "id": listing_id,
        "title": title,
        "story": "Worn once.",
        "price_cents": price_cents,
        "creator_id": creator_id,
        "created_at": created_at,
    }


def creator_row(
    creator_id: str = CREATOR_1,
    handle: str = "jane_doe",
    display_name: str | None = "Jane Doe",
    bio: str | None = None,
) -> dict[str, Any]:
    return {
        "id": creator_id,
        "handle": handle,
        "display_name": display_name,
        "bio": bio,
        "profile_image_url": None,
        "verification_status": "verified",
    }


@pytest.fixture
def metrics() -> SearchMetrics:
    """Fresh metrics per test (the process-wide instance would leak counts)."""
    return SearchMetrics()


@pytest.fixture
def thumbnail_resolver() -> PublicBucketThumbnailResolver:
    return PublicBucketThumbnailResolver(PUBLIC_BASE_URL, "listing-photos")


@pytest.fixture
def test_settings() -> Settings:
    """Settings independent of the environment and any .env file."""
    return Settings(
        _env_file=None,
        store_url="https://store.test",
        store_service_key="test-service-key",
        search_deadline_seconds=1.0,
        predictive_search_rate_limit="60/60",
        general_search_rate_limit="30/60",
    )


@pytest.fixture
def make_service(
    metrics: SearchMetrics, thumbnail_resolver: PublicBucketThumbnailResolver
) -> Callable[..., PredictiveSearchService]:
    """Factory: PredictiveSearchService over real repositories and a given store."""

    def _make(
        store: Any,
        gate: Any = None,
        deadline_seconds: float = 1.0,
        predictive_budget: str = "60/60",
        general_budget: str = "30/60",
    ) -> PredictiveSearchService:
        settings = Settings(
            _env_file=None,
            predictive_search_rate_limit=predictive_budget,
            general_search_rate_limit=general_budget,
        )
        return PredictiveSearchService(
            listings_repo=ListingSearchRepository(store, metrics=metrics),
            creators_repo=CreatorSearchRepository(store, metrics=metrics),
            gate=gate or RateLimitGate(),
            budgets={
                CHANNEL_PREDICTIVE_SEARCH: settings.predictive_search_budget,
                CHANNEL_GENERAL_SEARCH: settings.general_search_budget,
            },
            normalizer=ResultNormalizer(thumbnail_resolver=thumbnail_resolver, metrics=metrics),
            metrics=metrics,
            deadline_seconds=deadline_seconds,
        )

    return _make


@pytest.fixture
def stub_store() -> StubStore:
    """Store with two live listings, one creator summary and one reference photo."""
    return StubStore(
        tables={
            "listings": [
                listing_row(LISTING_2, title="Vintage Jacket, blue"),
                listing_row(LISTING_1, title="Vintage Jacket", created_at="2024-04-01T10:00:00+00:00"),
            ],
            "listing_photos": [
                {"listing_id": LISTING_1, "storage_path": f"{LISTING_1}/front.jpg"},
                {"listing_id": LISTING_1, "storage_path": f"{LISTING_1}/back.jpg"},
            ],
            "creators": [],
        }
    )


@pytest.fixture
def app(test_settings: Settings, stub_store: StubStore, metrics: SearchMetrics, thumbnail_resolver):
    """FastAPI app with lifespan-owned state replaced by test doubles."""
    application = create_app()
    application.state.store = stub_store
    application.state.rate_limit_gate = RateLimitGate()
    application.state.search_metrics = metrics
    application.state.thumbnail_resolver = thumbnail_resolver
    application.dependency_overrides[get_app_settings] = lambda: test_settings
    return application


@pytest.fixture
async def client(app) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def clear_settings_cache():
    """Clear cached settings before and after a test that changes env vars."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
