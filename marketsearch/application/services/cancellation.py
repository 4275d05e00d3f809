"""Advisory cancellation shared by the concurrent search sources.

The store clients cannot interrupt a query already in flight, so
cancellation is a flag checked before and after each store call, never
during. A source that finds it set treats its call as timed out; a call
that was already past its store await runs to completion and its result
is discarded by the orchestrator.
"""

import asyncio

from marketsearch.domain.exceptions import SearchTimeoutError


class CancellationFlag:
    """One-way flag: once set it stays set for the rest of the request."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def set(self) -> None:
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    def raise_if_set(self, source: str) -> None:
        """Raise SearchTimeoutError for source if cancellation was signalled."""
        if self._event.is_set():
            raise SearchTimeoutError(source)


def raise_if_cancelled(cancel: CancellationFlag | None, source: str) -> None:
    """Check an optional flag; no-op when the caller passed none."""
    if cancel is not None:
        cancel.raise_if_set(source)
