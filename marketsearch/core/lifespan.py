"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no
business logic here, only wiring of infrastructure (store client,
rate limit gate, thumbnail resolver, telemetry, SQL engine dispose).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from marketsearch.core.config import get_settings
from marketsearch.core.limiter import RateLimitGate
from marketsearch.infrastructure.storage.thumbnails import create_thumbnail_resolver
from marketsearch.infrastructure.store_factory import StoreFactory
from marketsearch.shared.telemetry.metrics import get_search_metrics
from marketsearch.shared.telemetry.telemetry import (
    get_telemetry,
    set_telemetry,
    setup_from_settings,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: telemetry (if enabled), rate limit gate, store backend
    (HTTP client or SQL engine), thumbnail resolver. Shutdown order: HTTP
    client close, SQL engine dispose, telemetry shutdown.
    """
    settings = get_settings()

    # ---- Startup ----
    telemetry = setup_from_settings(settings)
    if telemetry is not None:
        telemetry.instrument_fastapi(app)

    app.state.search_metrics = get_search_metrics()
    app.state.rate_limit_gate = RateLimitGate(settings.rate_limit_storage_uri)
    app.state.thumbnail_resolver = create_thumbnail_resolver(settings)
    app.state.http_client = None
    app.state.db_engine = None
    app.state.store = None

    if not settings.store_configured:
        logger.error(
            "Search store not configured (backend=%s): set STORE_URL and "
            "STORE_SERVICE_KEY, or STORE_BACKEND=postgres and DATABASE_URL. "
            "Search will return empty results.",
            settings.store_backend,
        )
    elif settings.store_backend == "postgres":
        from marketsearch.infrastructure.persistence.database import (
            create_engine_from_settings,
        )

        engine = create_engine_from_settings(settings)
        app.state.db_engine = engine
        if telemetry is not None:
            telemetry.instrument_sqlalchemy(engine)
        app.state.store = StoreFactory.create_store_client(settings, engine=engine)
        logger.info("SQL store backend initialized")
    else:
        # Shared HTTP client for store reads (connection reuse).
        app.state.http_client = httpx.AsyncClient(timeout=settings.store_timeout_seconds)
        app.state.store = StoreFactory.create_store_client(
            settings, http=app.state.http_client
        )
        logger.info("PostgREST store backend initialized")

    yield

    # ---- Shutdown ----
    if app.state.http_client is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("Store HTTP client closed")

    if app.state.db_engine is not None:
        await app.state.db_engine.dispose()
        app.state.db_engine = None
        logger.info("Database engine disposed")

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)
