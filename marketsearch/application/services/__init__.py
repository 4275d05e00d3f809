"""Application services: input normalization, safe filters, result shaping."""

from marketsearch.application.services.cancellation import CancellationFlag
from marketsearch.application.services.filter_builder import (
    ClauseIntent,
    SafeFilterBuilder,
    build_or_filter,
    escape_like,
)
from marketsearch.application.services.result_normalizer import ResultNormalizer
from marketsearch.application.services.search_input import (
    NormalizedQuery,
    normalize_search_input,
    validate_term,
)

__all__ = [
    "CancellationFlag",
    "ClauseIntent",
    "NormalizedQuery",
    "ResultNormalizer",
    "SafeFilterBuilder",
    "build_or_filter",
    "escape_like",
    "normalize_search_input",
    "validate_term",
]
