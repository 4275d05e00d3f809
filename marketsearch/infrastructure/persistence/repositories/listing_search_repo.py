"""Listing search repository: live listings plus thumbnails and creator summaries."""

from __future__ import annotations

import asyncio
import logging

from marketsearch.application.dtos.rows import (
    CreatorSummaryRow,
    ListingPhotoRow,
    ListingRow,
    ListingSearchRows,
)
from marketsearch.application.dtos.store_query import OrderBy, StoreQuery
from marketsearch.application.services.cancellation import CancellationFlag
from marketsearch.core.constants import (
    CREATORS_TABLE,
    LISTING_PHOTOS_TABLE,
    LISTING_PUBLIC_STATUS,
    LISTING_SEARCH_COLUMNS,
    LISTINGS_TABLE,
    REFERENCE_PHOTO_TYPE,
)
from marketsearch.domain.exceptions import StoreError
from marketsearch.domain.value_objects.filters import FilterClause
from marketsearch.domain.value_objects.search import ResultLimit, SearchTerm
from marketsearch.infrastructure.persistence.repositories.base import StoreSearchRepository
from marketsearch.shared.telemetry.metrics import DROP_INVALID_UUID
from marketsearch.shared.telemetry.tracing import traced
from marketsearch.shared.utils.sanitization import is_valid_uuid

logger = logging.getLogger(__name__)

_LIVE_FILTER = FilterClause(column="status", operator="eq", value=LISTING_PUBLIC_STATUS)
_REFERENCE_PHOTO_FILTER = FilterClause(
    column="photo_type", operator="eq", value=REFERENCE_PHOTO_TYPE
)


class ListingSearchRepository(StoreSearchRepository):
    """Searches live listings by title and story, newest first."""

    source = LISTINGS_TABLE

    @traced("listings.search")
    async def search(
        self,
        term: SearchTerm,
        limit: ResultLimit,
        cancel: CancellationFlag | None = None,
    ) -> ListingSearchRows:
        """Return matching listings with their secondary lookups.

        A failed listings read yields empty rows. A failed photo or creator
        lookup only leaves that lookup empty; the listings are kept.

        Raises:
            SearchTimeoutError: If cancel was set before or after a store call.
        """
        or_filter = self.text_filter(LISTING_SEARCH_COLUMNS, term)
        if not or_filter:
            return ListingSearchRows()
        query = StoreQuery(
            table=LISTINGS_TABLE,
            columns=ListingRow.COLUMNS,
            or_filter=or_filter,
            filters=(_LIVE_FILTER,),
            order=OrderBy("created_at", descending=True),
            limit=int(limit),
        )
        try:
            listings = await self._read(query, ListingRow.from_mapping, cancel)
        except StoreError as e:
            self._log_store_error("query", e)
            return ListingSearchRows()
        if not listings:
            return ListingSearchRows()

        thumbnails, creators = await asyncio.gather(
            self._thumbnails(listings, cancel),
            self._creator_summaries(listings, cancel),
        )
        return ListingSearchRows(
            listings=tuple(listings),
            thumbnails=thumbnails,
            creators=creators,
        )

    async def _thumbnails(
        self,
        listings: list[ListingRow],
        cancel: CancellationFlag | None,
    ) -> dict[str, ListingPhotoRow] | None:
        """First reference photo per listing (oldest first); None if the lookup failed."""
        in_clause = self.filters.build_in_clause(
            "listing_id", (row.id for row in listings), is_valid_uuid, DROP_INVALID_UUID
        )
        if in_clause is None:
            return {}
        query = StoreQuery(
            table=LISTING_PHOTOS_TABLE,
            columns=ListingPhotoRow.COLUMNS,
            filters=(_REFERENCE_PHOTO_FILTER,),
            in_filters=(in_clause,),
            order=OrderBy("created_at"),
        )
        try:
            photos = await self._read(query, ListingPhotoRow.from_mapping, cancel)
        except StoreError as e:
            self._log_store_error("photo lookup", e)
            return None
        thumbnails: dict[str, ListingPhotoRow] = {}
        for photo in photos:
            thumbnails.setdefault(photo.listing_id, photo)
        return thumbnails

    async def _creator_summaries(
        self,
        listings: list[ListingRow],
        cancel: CancellationFlag | None,
    ) -> dict[str, CreatorSummaryRow] | None:
        """Creator summaries keyed by id; None if the lookup failed."""
        creator_ids = [row.creator_id for row in listings if row.creator_id is not None]
        in_clause = self.filters.build_in_clause(
            "id", creator_ids, is_valid_uuid, DROP_INVALID_UUID
        )
        if in_clause is None:
            return {}
        query = StoreQuery(
            table=CREATORS_TABLE,
            columns=CreatorSummaryRow.COLUMNS,
            in_filters=(in_clause,),
        )
        try:
            summaries = await self._read(query, CreatorSummaryRow.from_mapping, cancel)
        except StoreError as e:
            self._log_store_error("creator lookup", e)
            return None
        return {summary.id: summary for summary in summaries}
