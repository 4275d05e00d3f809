"""Creator search repository."""

from __future__ import annotations

from marketsearch.application.dtos.rows import CreatorRow
from marketsearch.application.dtos.store_query import OrderBy, StoreQuery
from marketsearch.application.services.cancellation import CancellationFlag
from marketsearch.core.constants import CREATOR_SEARCH_COLUMNS, CREATORS_TABLE
from marketsearch.domain.exceptions import StoreError
from marketsearch.domain.value_objects.search import ResultLimit, SearchTerm
from marketsearch.infrastructure.persistence.repositories.base import StoreSearchRepository
from marketsearch.shared.telemetry.tracing import traced


class CreatorSearchRepository(StoreSearchRepository):
    """Searches creator profiles by handle and display name, newest first."""

    source = CREATORS_TABLE

    @traced("creators.search")
    async def search(
        self,
        term: SearchTerm,
        limit: ResultLimit,
        cancel: CancellationFlag | None = None,
    ) -> list[CreatorRow]:
        or_filter = self.text_filter(CREATOR_SEARCH_COLUMNS, term)
        if not or_filter:
            return []
        query = StoreQuery(
            table=CREATORS_TABLE,
            columns=CreatorRow.COLUMNS,
            or_filter=or_filter,
            order=OrderBy("created_at", descending=True),
            limit=int(limit),
        )
        try:
            return await self._read(query, CreatorRow.from_mapping, cancel)
        except StoreError as e:
            self._log_store_error("query", e)
            return []
