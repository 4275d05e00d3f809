"""Safe filter builder for the store's `column.operator.value` grammar.

Turns clause intents carrying raw user text into an OrFilterExpression.
Every value is escaped or stripped before it reaches a clause; a clause
that cannot be made safe is dropped, never passed through unescaped. If
nothing survives the result is NO_FILTER, which callers must read as
"do not query", not "match everything".
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from marketsearch.domain.value_objects.filters import (
    ALLOWED_OPERATORS,
    COLUMN_RE,
    NO_FILTER,
    PATTERN_OPERATORS,
    WILDCARD,
    FilterClause,
    FilterResult,
    InListClause,
    OrFilterExpression,
)
from marketsearch.shared.telemetry.metrics import DROP_INVALID_CLAUSE, SearchMetrics
from marketsearch.shared.utils.sanitization import InputSanitizer

logger = logging.getLogger(__name__)

# Grammar-reserved characters that must never appear inside a value:
# ',' separates clauses, '(' ')' group, '"' quotes, '*' is the wildcard.
_RESERVED_RE = re.compile(r'[,()"*]')


@dataclass(frozen=True)
class ClauseIntent:
    """A clause the caller wants, before validation and escaping."""

    column: str
    operator: str
    raw_value: str


def escape_like(value: str) -> str:
    """Escape LIKE metacharacters: backslash first, then '%' and '_'."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _sanitize_value(operator: str, raw_value: str) -> str | None:
    """Return the grammar-safe value for operator, or None if nothing usable remains."""
    value = _RESERVED_RE.sub("", InputSanitizer.strip_control_chars(raw_value))
    if not value.strip():
        return None
    if operator in PATTERN_OPERATORS:
        return f"{WILDCARD}{escape_like(value)}{WILDCARD}"
    return value


def build_clause(intent: ClauseIntent) -> FilterClause | None:
    """Validate and escape one intent. Returns None when it must be dropped."""
    if not isinstance(intent.column, str) or not COLUMN_RE.fullmatch(intent.column):
        return None
    if intent.operator not in ALLOWED_OPERATORS:
        return None
    if not isinstance(intent.raw_value, str):
        return None
    value = _sanitize_value(intent.operator, intent.raw_value)
    if value is None:
        return None
    return FilterClause(column=intent.column, operator=intent.operator, value=value)


class SafeFilterBuilder:
    """Builds OR expressions and IN lists, counting every dropped clause or value."""

    def __init__(self, source: str, metrics: SearchMetrics | None = None) -> None:
        """Initialize for one search source.

        Args:
            source: Source label used on drop counters (e.g. 'listings').
            metrics: Optional counter hook; drops are only logged without it.
        """
        self.source = source
        self.metrics = metrics

    def _dropped(self, reason: str, count: int = 1) -> None:
        logger.debug("Dropped %d filter part(s) for %s: %s", count, self.source, reason)
        if self.metrics is not None:
            self.metrics.record_dropped(self.source, reason, count)

    def build_or_filter(self, intents: Sequence[ClauseIntent]) -> FilterResult:
        """Build a comma-joined OR expression from intents.

        Returns NO_FILTER for an empty list or when no clause survives.
        """
        if not intents:
            return NO_FILTER
        clauses: list[FilterClause] = []
        for intent in intents:
            clause = build_clause(intent)
            if clause is None:
                self._dropped(DROP_INVALID_CLAUSE)
                continue
            clauses.append(clause)
        if not clauses:
            return NO_FILTER
        return OrFilterExpression(tuple(clauses))

    def build_in_clause(
        self,
        column: str,
        values: Iterable[object],
        is_valid: Callable[[object], bool],
        drop_reason: str,
    ) -> InListClause | None:
        """Build `column IN (...)` from values passing is_valid; duplicates collapse.

        Invalid values are dropped and counted under drop_reason. Returns
        None when no value survives (callers skip the lookup).
        """
        kept: dict[str, None] = {}
        dropped = 0
        for value in values:
            if is_valid(value):
                kept[str(value)] = None
            else:
                dropped += 1
        if dropped:
            self._dropped(drop_reason, dropped)
        if not kept:
            return None
        return InListClause(column=column, values=tuple(kept))


def build_or_filter(intents: Sequence[ClauseIntent]) -> FilterResult:
    """Build an OR expression without drop accounting."""
    return SafeFilterBuilder(source="default").build_or_filter(intents)


def text_search_intents(columns: Iterable[str], term: str, operator: str = "ilike") -> list[ClauseIntent]:
    """One pattern-match intent per column for the same term."""
    return [ClauseIntent(column=column, operator=operator, raw_value=term) for column in columns]
