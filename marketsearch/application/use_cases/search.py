"""Predictive search use case: gate, validate, fan out, normalize, aggregate.

The only component aware of concurrency. Both sources run as asyncio
tasks under one shared deadline and one advisory cancellation flag.
Every expected failure is absorbed here; callers always receive a
well-formed SearchResponse, empty when the request was rate limited,
invalid, timed out, or the store is not configured.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from marketsearch.application.dtos.rows import CreatorRow, ListingSearchRows
from marketsearch.application.dtos.search import PredictiveSearchResult, SearchResponse
from marketsearch.application.interfaces.repositories import (
    ICreatorSearchRepository,
    IListingSearchRepository,
)
from marketsearch.application.interfaces.services import IRateLimitGate
from marketsearch.application.services.cancellation import CancellationFlag
from marketsearch.application.services.result_normalizer import ResultNormalizer
from marketsearch.application.services.search_input import (
    normalize_search_input,
    to_search_term,
)
from marketsearch.core.config import RateLimitBudget
from marketsearch.core.constants import (
    CHANNEL_PREDICTIVE_SEARCH,
    CREATORS_TABLE,
    DEFAULT_SEARCH_DEADLINE_SECONDS,
    LISTINGS_TABLE,
)
from marketsearch.core.limiter import rate_limit_key
from marketsearch.domain.exceptions import RateLimitedError, SearchTimeoutError
from marketsearch.domain.value_objects.search import ResultLimit, SearchTerm
from marketsearch.shared.telemetry.metrics import (
    OUTCOME_INVALID_INPUT,
    OUTCOME_NOT_CONFIGURED,
    OUTCOME_OK,
    OUTCOME_RATE_LIMITED,
    OUTCOME_TIMEOUT,
    SearchMetrics,
)
from marketsearch.shared.telemetry.tracing import add_span_attributes, traced
from marketsearch.shared.utils.sanitization import sanitize_log_message

logger = logging.getLogger(__name__)


class PredictiveSearchService:
    """Aggregates listings and creators for one raw search request."""

    def __init__(
        self,
        listings_repo: IListingSearchRepository | None,
        creators_repo: ICreatorSearchRepository | None,
        gate: IRateLimitGate,
        budgets: Mapping[str, RateLimitBudget],
        normalizer: ResultNormalizer | None = None,
        metrics: SearchMetrics | None = None,
        deadline_seconds: float = DEFAULT_SEARCH_DEADLINE_SECONDS,
    ) -> None:
        """Initialize the service.

        Args:
            listings_repo: Listings source; None when the store is not configured.
            creators_repo: Creators source; None when the store is not configured.
            gate: Rate limit gate.
            budgets: Budget per channel name.
            normalizer: Row-to-item normalizer (defaults to one without thumbnails).
            metrics: Outcome and drop counters.
            deadline_seconds: Shared deadline for both source queries.
        """
        self.listings_repo = listings_repo
        self.creators_repo = creators_repo
        self.gate = gate
        self.budgets = budgets
        self.metrics = metrics
        self.normalizer = normalizer or ResultNormalizer(metrics=metrics)
        self.deadline_seconds = deadline_seconds

    def _outcome(self, channel: str, outcome: str) -> None:
        add_span_attributes(**{"search.outcome": outcome})
        if self.metrics is not None:
            self.metrics.record_outcome(channel, outcome)

    async def _admit(self, channel: str, caller_address: str | None) -> None:
        """Raise RateLimitedError when the caller is over the channel budget."""
        decision = await self.gate.check(
            rate_limit_key(channel, caller_address), self.budgets[channel]
        )
        if not decision.allowed:
            raise RateLimitedError(channel)

    @traced("search.predictive")
    async def search(
        self,
        raw_term: Any,
        raw_limit: Any = None,
        caller_address: str | None = None,
        channel: str = CHANNEL_PREDICTIVE_SEARCH,
    ) -> SearchResponse:
        """Run one search request end to end. Never raises for expected failures.

        Args:
            raw_term: Untrusted `q` parameter (any value, may be None).
            raw_limit: Untrusted `limit` parameter (digit string or None).
            caller_address: Sanitized caller address for the rate limit key.
            channel: Rate limit channel ('search-predictive' or 'search').

        Returns:
            SearchResponse with the normalized term and the aggregated result.
        """
        query = normalize_search_input(raw_term, raw_limit)
        empty = SearchResponse(term=query.term, result=PredictiveSearchResult.empty())
        add_span_attributes(**{"search.channel": channel, "search.limit": int(query.limit)})

        try:
            await self._admit(channel, caller_address)
        except RateLimitedError:
            self._outcome(channel, OUTCOME_RATE_LIMITED)
            return empty

        term = to_search_term(query.term)
        if term is None:
            self._outcome(channel, OUTCOME_INVALID_INPUT)
            return empty

        if self.listings_repo is None or self.creators_repo is None:
            logger.error("Search store is not configured; returning empty results")
            self._outcome(channel, OUTCOME_NOT_CONFIGURED)
            return empty

        try:
            listing_rows, creator_rows = await self._fan_out(term, query.limit)
        except SearchTimeoutError:
            logger.warning("Search deadline of %.1fs exceeded", self.deadline_seconds)
            self._outcome(channel, OUTCOME_TIMEOUT)
            return empty

        result = self.normalizer.aggregate(listing_rows, creator_rows)
        self._outcome(channel, OUTCOME_OK)
        add_span_attributes(**{"search.total": result.total})
        return SearchResponse(term=query.term, result=result)

    async def _fan_out(
        self, term: SearchTerm, limit: ResultLimit
    ) -> tuple[ListingSearchRows | None, list[CreatorRow] | None]:
        """Run both sources concurrently under the shared deadline.

        Returns per-source rows; a source that failed yields None (an empty
        category).

        Raises:
            SearchTimeoutError: If the deadline fired before both finished.
        """
        cancel = CancellationFlag()
        listings_task = asyncio.create_task(self.listings_repo.search(term, limit, cancel))
        creators_task = asyncio.create_task(self.creators_repo.search(term, limit, cancel))
        tasks = (listings_task, creators_task)

        _done, pending = await asyncio.wait(tasks, timeout=self.deadline_seconds)
        if pending:
            cancel.set()
            for task in pending:
                task.cancel()
                _detach(task)
            raise SearchTimeoutError("fan-out")

        return (
            self._task_result(listings_task, LISTINGS_TABLE),
            self._task_result(creators_task, CREATORS_TABLE),
        )

    @staticmethod
    def _task_result(task: asyncio.Task, source: str) -> Any:
        """Return the task's result, or None (logged) if it raised."""
        exc = task.exception()
        if exc is None:
            return task.result()
        logger.error(
            "Search source %s failed: %s: %s",
            source,
            type(exc).__name__,
            sanitize_log_message(exc),
        )
        return None


# Cancelled tasks left running past the deadline; referenced until they unwind.
_detached: set[asyncio.Task] = set()


def _detach(task: asyncio.Task) -> None:
    """Keep a cancelled task alive and log whatever it ends with."""
    _detached.add(task)
    task.add_done_callback(_reap)


def _reap(task: asyncio.Task) -> None:
    _detached.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug(
            "Search source failed after the deadline: %s: %s",
            type(exc).__name__,
            sanitize_log_message(exc),
        )
