"""Store client factory: creates the PostgREST or SQL backend from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from marketsearch.application.interfaces.services import IStoreClient
from marketsearch.domain.exceptions import StoreNotConfiguredError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from marketsearch.core.config import Settings


class StoreFactory:
    """Factory for store client instances based on configuration."""

    @staticmethod
    def create_store_client(
        settings: "Settings",
        http: httpx.AsyncClient | None = None,
        engine: "AsyncEngine | None" = None,
    ) -> IStoreClient:
        """Create the store client for settings.store_backend.

        Args:
            settings: Application settings.
            http: Shared HTTP client (required for 'postgrest').
            engine: Async engine (required for 'postgres').

        Returns:
            PostgRESTClient or SqlStoreClient.

        Raises:
            StoreNotConfiguredError: Backend selected but not configured.
        """
        backend = settings.store_backend
        if not settings.store_configured:
            raise StoreNotConfiguredError(backend)
        if backend == "postgrest":
            if http is None:
                raise StoreNotConfiguredError(backend)
            from marketsearch.infrastructure.postgrest.client import PostgRESTClient

            return PostgRESTClient(
                http,
                base_url=settings.store_url,
                service_key=settings.store_service_key.get_secret_value(),
            )
        if engine is None:
            raise StoreNotConfiguredError(backend)
        from marketsearch.infrastructure.persistence.database import create_session_factory
        from marketsearch.infrastructure.persistence.sql_store import SqlStoreClient

        return SqlStoreClient(create_session_factory(engine))
