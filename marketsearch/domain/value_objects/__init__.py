"""Domain value objects: search input and filter-grammar types."""

from marketsearch.domain.value_objects.filters import (
    NO_FILTER,
    FilterClause,
    FilterResult,
    InListClause,
    OrFilterExpression,
)
from marketsearch.domain.value_objects.search import (
    ResultLimit,
    SearchTerm,
    TermValidation,
    classify_term,
)

__all__ = [
    "NO_FILTER",
    "FilterClause",
    "FilterResult",
    "InListClause",
    "OrFilterExpression",
    "ResultLimit",
    "SearchTerm",
    "TermValidation",
    "classify_term",
]
