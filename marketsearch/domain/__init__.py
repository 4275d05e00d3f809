"""Domain layer: value objects and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from marketsearch.domain.exceptions import (
    InvalidSearchInputError,
    MalformedRowError,
    MarketSearchException,
    PartialDataInconsistencyError,
    RateLimitedError,
    SearchTimeoutError,
    StoreError,
    StoreNotConfiguredError,
)
from marketsearch.domain.value_objects import (
    NO_FILTER,
    FilterClause,
    OrFilterExpression,
    ResultLimit,
    SearchTerm,
    TermValidation,
)

__all__ = [
    # Exceptions
    "InvalidSearchInputError",
    "MalformedRowError",
    "MarketSearchException",
    "PartialDataInconsistencyError",
    "RateLimitedError",
    "SearchTimeoutError",
    "StoreError",
    "StoreNotConfiguredError",
    # Value objects
    "NO_FILTER",
    "FilterClause",
    "OrFilterExpression",
    "ResultLimit",
    "SearchTerm",
    "TermValidation",
]
