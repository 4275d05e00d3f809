"""Domain exceptions for the search aggregator.

Defines the error taxonomy of a search request. Inside the aggregator
every kind is absorbed and converted into a smaller or empty result;
the presentation layer maps anything that escapes elsewhere to HTTP
responses in exception handlers.
"""

from typing import Any


class MarketSearchException(Exception):
    """Base exception for all marketsearch errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, source).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-safe representation for error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class InvalidSearchInputError(MarketSearchException):
    """Raised when a search term is too short or contains unsafe characters."""

    def __init__(self, reason: str) -> None:
        """Initialize with the validation outcome.

        Args:
            reason: 'too_short' or 'unsafe'.
        """
        super().__init__(
            f"Invalid search term: {reason}",
            "INVALID_SEARCH_INPUT",
            {"reason": reason},
        )


class RateLimitedError(MarketSearchException):
    """Raised when the caller exceeded the channel's request budget."""

    def __init__(self, channel: str) -> None:
        super().__init__(
            "Too many search requests",
            "RATE_LIMITED",
            {"channel": channel},
        )


class StoreError(MarketSearchException):
    """Raised when the relational store rejects or fails a query."""

    def __init__(
        self,
        message: str,
        table: str | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize with store context.

        Args:
            message: Description of the failure (may carry store text; sanitize before logging).
            table: Optional table the query targeted.
            status_code: Optional HTTP status returned by the store.
        """
        details: dict[str, Any] = {}
        if table:
            details["table"] = table
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, "STORE_ERROR", details)


class MalformedRowError(StoreError):
    """Raised when a store row is missing a required field or has the wrong shape."""

    def __init__(self, table: str, field: str) -> None:
        super().__init__(f"Malformed row from {table}: bad field {field!r}", table=table)
        self.details["field"] = field


class SearchTimeoutError(MarketSearchException):
    """Raised when a source query observes the shared deadline has fired."""

    def __init__(self, source: str) -> None:
        super().__init__(
            f"Search source timed out: {source}",
            "SEARCH_TIMEOUT",
            {"source": source},
        )


class PartialDataInconsistencyError(MarketSearchException):
    """Raised when a row references a record the secondary lookup did not return."""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(
            f"Referenced {entity} not found: {entity_id}",
            "PARTIAL_DATA_INCONSISTENCY",
            {"entity": entity, "entity_id": entity_id},
        )


class StoreNotConfiguredError(MarketSearchException):
    """Raised when a store client is requested but the backend is not configured."""

    def __init__(self, backend: str) -> None:
        super().__init__(
            f"Store backend '{backend}' is not configured",
            "STORE_NOT_CONFIGURED",
            {"backend": backend},
        )
