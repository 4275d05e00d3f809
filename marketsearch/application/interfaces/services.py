"""Service interfaces (ports) for the application layer.

Protocols define contracts for the collaborators the search aggregator
consumes: the relational store, the thumbnail resolver, and the rate
limit gate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from marketsearch.application.dtos.store_query import StoreQuery
    from marketsearch.core.config import RateLimitBudget


class IStoreClient(Protocol):
    """Protocol for the relational store (filter-grammar reads)."""

    async def select(self, query: "StoreQuery") -> list[dict[str, Any]]:
        """Run one read and return rows as mappings. Raises StoreError on failure."""
        ...


class IThumbnailResolver(Protocol):
    """Protocol for resolving a storage path to a public URL."""

    def get_public_url(self, storage_path: str) -> str | None:
        """Return a public URL for the object, or None if it cannot be resolved."""
        ...


@dataclass(frozen=True)
class RateLimitDecision:
    """Result of one admission check."""

    allowed: bool
    remaining: int | None = None


class IRateLimitGate(Protocol):
    """Protocol for sliding-window admission control keyed by caller."""

    async def check(self, key: str, budget: "RateLimitBudget") -> RateLimitDecision:
        """Count one request against key and report whether it is admitted."""
        ...
