"""Repository interfaces (ports) for the two search sources."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from marketsearch.application.dtos.rows import CreatorRow, ListingSearchRows
    from marketsearch.application.services.cancellation import CancellationFlag
    from marketsearch.domain.value_objects.search import ResultLimit, SearchTerm


class IListingSearchRepository(Protocol):
    """Protocol for searching publicly visible listings."""

    async def search(
        self,
        term: "SearchTerm",
        limit: "ResultLimit",
        cancel: "CancellationFlag | None" = None,
    ) -> "ListingSearchRows":
        """Return matching listings (newest first) with thumbnails and creator summaries.

        Store errors degrade to empty rows; a fired cancellation raises SearchTimeoutError.
        """
        ...


class ICreatorSearchRepository(Protocol):
    """Protocol for searching creator profiles."""

    async def search(
        self,
        term: "SearchTerm",
        limit: "ResultLimit",
        cancel: "CancellationFlag | None" = None,
    ) -> list["CreatorRow"]:
        """Return matching creators (newest first).

        Store errors degrade to []; a fired cancellation raises SearchTimeoutError.
        """
        ...
