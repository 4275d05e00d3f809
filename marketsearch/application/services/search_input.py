"""Input normalizer and pattern validator for raw search parameters.

Normalization always succeeds and degrades to safe defaults; validation
decides whether the normalized term may be used at all.
"""

import re
from dataclasses import dataclass

from marketsearch.core.constants import DEFAULT_RESULT_LIMIT, MAX_TERM_LENGTH
from marketsearch.domain.value_objects.search import (
    ResultLimit,
    SearchTerm,
    TermValidation,
    classify_term,
)
from marketsearch.shared.utils.sanitization import InputSanitizer

_DIGITS_RE = re.compile(r"\d+", re.ASCII)


@dataclass(frozen=True)
class NormalizedQuery:
    """Normalized raw parameters: term may be empty or unsafe; limit is in range."""

    term: str
    limit: ResultLimit


def normalize_term(raw_term: object) -> str:
    """Coerce to str, trim, truncate to 200 chars, then strip control characters."""
    if raw_term is None:
        return ""
    term = str(raw_term).strip()[:MAX_TERM_LENGTH]
    return InputSanitizer.strip_control_chars(term)


def normalize_limit(raw_limit: object) -> ResultLimit:
    """Accept only an all-digit string (or non-negative int); default 10; clamp to [1, 50]."""
    if isinstance(raw_limit, bool):
        return ResultLimit(DEFAULT_RESULT_LIMIT)
    if isinstance(raw_limit, int):
        return ResultLimit.clamped(raw_limit) if raw_limit >= 0 else ResultLimit(DEFAULT_RESULT_LIMIT)
    if isinstance(raw_limit, str) and _DIGITS_RE.fullmatch(raw_limit):
        return ResultLimit.clamped(int(raw_limit))
    return ResultLimit(DEFAULT_RESULT_LIMIT)


def normalize_search_input(raw_term: object, raw_limit: object = None) -> NormalizedQuery:
    """Normalize the raw `q` and `limit` parameters. Never raises."""
    return NormalizedQuery(term=normalize_term(raw_term), limit=normalize_limit(raw_limit))


def validate_term(term: str) -> TermValidation:
    """Return VALID, TOO_SHORT (under 2 chars, including empty) or UNSAFE."""
    return classify_term(term)


def to_search_term(term: str) -> SearchTerm | None:
    """Return a SearchTerm for a valid normalized term, else None."""
    if validate_term(term) is not TermValidation.VALID:
        return None
    return SearchTerm(term)
