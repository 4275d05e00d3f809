"""Persistence: async engine and session factory for the 'postgres' store backend.

When store_backend is 'postgrest', no SQL engine is created; reads go
over HTTP through marketsearch.infrastructure.postgrest instead. The
engine is owned by the app lifespan, which disposes it on shutdown.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from marketsearch.domain.exceptions import StoreNotConfiguredError

if TYPE_CHECKING:
    from marketsearch.core.config import Settings

logger = logging.getLogger(__name__)


def create_engine_from_settings(settings: "Settings") -> AsyncEngine:
    """Create the async engine for DATABASE_URL.

    Raises:
        StoreNotConfiguredError: If the backend is not 'postgres' or the URL is unset.
    """
    if settings.store_backend != "postgres" or not settings.database_url:
        raise StoreNotConfiguredError("postgres")
    connect_args: dict[str, Any] = {}
    if "asyncpg" in settings.database_url:
        # Store reads must not outlive the request deadline by much.
        connect_args["command_timeout"] = settings.store_timeout_seconds
    return create_async_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_pre_ping=True,
        pool_recycle=3600,
        connect_args=connect_args,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Read-only session factory; sessions never commit."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
