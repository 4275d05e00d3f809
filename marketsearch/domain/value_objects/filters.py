"""Filter-grammar value objects.

The store speaks a `column.operator.value` grammar where clauses joined
by commas are OR-ed together. These types only ever hold already
validated and escaped parts; building them from raw input is the job of
marketsearch.application.services.filter_builder.
"""

import re
from dataclasses import dataclass
from typing import Final

COLUMN_RE = re.compile(r"^[a-zA-Z0-9_.]+$")

PATTERN_OPERATORS: Final = frozenset({"like", "ilike"})
ALLOWED_OPERATORS: Final = frozenset(
    {"eq", "neq", "gt", "gte", "lt", "lte", "in", "is"} | PATTERN_OPERATORS
)

CLAUSE_SEP = ","
PART_SEP = "."
# URL-safe wildcard marker; the store maps it to SQL '%'.
WILDCARD = "*"


@dataclass(frozen=True)
class FilterClause:
    """A single validated `column.operator.value` clause."""

    column: str
    operator: str
    value: str

    def __post_init__(self) -> None:
        if not COLUMN_RE.fullmatch(self.column):
            raise ValueError(f"Invalid filter column: {self.column!r}")
        if self.operator not in ALLOWED_OPERATORS:
            raise ValueError(f"Invalid filter operator: {self.operator!r}")
        if not self.value or CLAUSE_SEP in self.value:
            raise ValueError("Filter value must be non-empty and contain no clause separator")

    @property
    def is_pattern(self) -> bool:
        return self.operator in PATTERN_OPERATORS

    def render(self) -> str:
        return f"{self.column}{PART_SEP}{self.operator}{PART_SEP}{self.value}"


@dataclass(frozen=True)
class OrFilterExpression:
    """Non-empty sequence of clauses, rendered comma-joined (logical OR)."""

    clauses: tuple[FilterClause, ...]

    def __post_init__(self) -> None:
        if not self.clauses:
            raise ValueError("OrFilterExpression requires at least one clause")

    def render(self) -> str:
        return CLAUSE_SEP.join(c.render() for c in self.clauses)

    def __str__(self) -> str:
        return self.render()

    def __bool__(self) -> bool:
        return True


_IN_VALUE_RE = re.compile(r"[a-zA-Z0-9_-]+")


@dataclass(frozen=True)
class InListClause:
    """`column IN (v1, v2, ...)` over pre-validated identifiers.

    Values are restricted to letters, digits, '_' and '-' so the rendered
    list `(a,b,c)` can never be broken out of.
    """

    column: str
    values: tuple[str, ...]

    def __post_init__(self) -> None:
        if not COLUMN_RE.fullmatch(self.column):
            raise ValueError(f"Invalid filter column: {self.column!r}")
        if not self.values:
            raise ValueError("InListClause requires at least one value")
        for value in self.values:
            if not _IN_VALUE_RE.fullmatch(value):
                raise ValueError("InListClause values must be plain identifiers")

    def render_value(self) -> str:
        return f"in.({CLAUSE_SEP.join(self.values)})"


class _NoFilter:
    """Sentinel: the builder refused to emit a filter. Never query with it."""

    _instance: "_NoFilter | None" = None

    def __new__(cls) -> "_NoFilter":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_FILTER"


NO_FILTER: Final = _NoFilter()

FilterResult = OrFilterExpression | _NoFilter
