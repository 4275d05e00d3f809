"""Base search repository: store access, text filter, and error degradation."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from marketsearch.application.dtos.store_query import StoreQuery
from marketsearch.application.interfaces.services import IStoreClient
from marketsearch.application.services.cancellation import (
    CancellationFlag,
    raise_if_cancelled,
)
from marketsearch.application.services.filter_builder import (
    SafeFilterBuilder,
    text_search_intents,
)
from marketsearch.domain.exceptions import MalformedRowError, StoreError
from marketsearch.domain.value_objects.filters import FilterResult
from marketsearch.domain.value_objects.search import SearchTerm
from marketsearch.shared.telemetry.metrics import DROP_MALFORMED_ROW, SearchMetrics
from marketsearch.shared.utils.sanitization import sanitize_log_message

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT")


class StoreSearchRepository:
    """Shared plumbing for the listings and creators sources.

    Subclasses set `source` and build their own StoreQuery; reads go
    through _read(), which checks the cancellation flag before and
    after the store call, drops malformed rows one by one, and lets
    StoreError propagate for the caller to degrade.
    """

    source: str = "store"

    def __init__(
        self,
        store: IStoreClient,
        metrics: SearchMetrics | None = None,
        debug: bool = False,
    ) -> None:
        self.store = store
        self.metrics = metrics
        self.debug = debug
        self.filters = SafeFilterBuilder(self.source, metrics)

    def text_filter(self, columns: tuple[str, ...], term: SearchTerm) -> FilterResult:
        """Case-insensitive substring match of term over columns (OR)."""
        return self.filters.build_or_filter(text_search_intents(columns, term.value))

    async def _read(
        self,
        query: StoreQuery,
        parse: Callable[[Mapping[str, Any]], RowT],
        cancel: CancellationFlag | None,
    ) -> list[RowT]:
        """Run one store read and parse its rows.

        A row that fails to parse is dropped and counted under the queried
        table; the rest of the read is kept.

        Raises:
            StoreError: If the store call failed.
            SearchTimeoutError: If cancel was set before or after the call.
        """
        raise_if_cancelled(cancel, self.source)
        raw_rows = await self.store.select(query)
        raise_if_cancelled(cancel, self.source)
        rows: list[RowT] = []
        for raw in raw_rows:
            try:
                rows.append(parse(raw))
            except MalformedRowError as e:
                logger.debug("Dropping row from %s: %s", query.table, sanitize_log_message(e.message))
                self._dropped(query.table, DROP_MALFORMED_ROW)
        return rows

    def _dropped(self, table: str, reason: str) -> None:
        if self.metrics is not None:
            self.metrics.record_dropped(table, reason)

    def _log_store_error(self, what: str, exc: StoreError) -> None:
        """Log a store failure: capped, single line; raw store text only in debug."""
        if self.debug:
            logger.error("%s %s failed: %s", self.source, what, sanitize_log_message(exc.message))
        else:
            logger.error(
                "%s %s failed: %s %s",
                self.source,
                what,
                exc.error_code,
                sanitize_log_message(exc.details),
            )
