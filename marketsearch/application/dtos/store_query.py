"""Store read request (filter grammar + ordering + limit), independent of backend."""

from __future__ import annotations

from dataclasses import dataclass

from marketsearch.domain.value_objects.filters import (
    FilterClause,
    InListClause,
    OrFilterExpression,
)


@dataclass(frozen=True)
class OrderBy:
    column: str
    descending: bool = False

    def render(self) -> str:
        return f"{self.column}.{'desc' if self.descending else 'asc'}"


@dataclass(frozen=True)
class StoreQuery:
    """One filtered, ordered, limited read against a single table.

    Clauses in `filters` and `in_filters` are AND-ed; `or_filter` (when
    set) is AND-ed with them as one OR group. All hold validated, escaped
    values only.
    """

    table: str
    columns: tuple[str, ...]
    or_filter: OrFilterExpression | None = None
    filters: tuple[FilterClause, ...] = ()
    in_filters: tuple[InListClause, ...] = ()
    order: OrderBy | None = None
    limit: int | None = None
