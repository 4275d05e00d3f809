"""Search input value objects.

Value objects are immutable types that represent domain concepts with
self-validation. A SearchTerm can only exist for text that passed the
safe-pattern check, so holding one is proof the term may be used to
build filter clauses.
"""

import re
from dataclasses import dataclass
from enum import Enum

from marketsearch.core.constants import (
    DEFAULT_RESULT_LIMIT,
    MAX_RESULT_LIMIT,
    MAX_TERM_LENGTH,
    MIN_RESULT_LIMIT,
    MIN_TERM_LENGTH,
)
from marketsearch.domain.exceptions import InvalidSearchInputError

# Letters, digits, whitespace, and - _ ' . , only.
SAFE_TERM_RE = re.compile(r"^[a-zA-Z0-9\s\-_'.,]+$")
CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")


class TermValidation(str, Enum):
    """Outcome of checking a normalized term against the safe pattern."""

    VALID = "valid"
    TOO_SHORT = "too_short"
    UNSAFE = "unsafe"


def classify_term(value: str) -> TermValidation:
    """Classify a normalized term. Length is checked before character safety."""
    if len(value) < MIN_TERM_LENGTH:
        return TermValidation.TOO_SHORT
    if len(value) > MAX_TERM_LENGTH or CONTROL_CHARS_RE.search(value):
        return TermValidation.UNSAFE
    if not SAFE_TERM_RE.fullmatch(value):
        return TermValidation.UNSAFE
    return TermValidation.VALID


@dataclass(frozen=True)
class SearchTerm:
    """Validated search term: 2-200 chars from the safe allow-list."""

    value: str

    def __post_init__(self) -> None:
        outcome = classify_term(self.value)
        if outcome is not TermValidation.VALID:
            raise InvalidSearchInputError(outcome.value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ResultLimit:
    """Number of rows each source may return, clamped to [1, 50]."""

    value: int = DEFAULT_RESULT_LIMIT

    def __post_init__(self) -> None:
        if not MIN_RESULT_LIMIT <= self.value <= MAX_RESULT_LIMIT:
            raise ValueError(
                f"Result limit must be between {MIN_RESULT_LIMIT} and {MAX_RESULT_LIMIT}"
            )

    @classmethod
    def clamped(cls, value: int) -> "ResultLimit":
        """Build a limit from any integer by clamping into range."""
        return cls(min(max(MIN_RESULT_LIMIT, value), MAX_RESULT_LIMIT))

    def __int__(self) -> int:
        return self.value
