"""SQL store client: runs StoreQuery reads through SQLAlchemy Core.

Filter clauses arrive already validated and escaped for the PostgREST
grammar. Here they are translated into bound-parameter expressions:
pattern clauses become `ILIKE :p ESCAPE '\\'` with the grammar wildcard
mapped back to '%', so the LIKE escaping done by the filter builder
carries over unchanged.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import and_, column, or_, select, table
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.elements import ColumnElement

from marketsearch.application.dtos.store_query import StoreQuery
from marketsearch.domain.exceptions import StoreError
from marketsearch.domain.value_objects.filters import WILDCARD, FilterClause

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"

_IS_VALUES: dict[str, bool | None] = {"null": None, "true": True, "false": False}


def _column(name: str) -> ColumnElement[Any]:
    if "." in name:
        # Embedded-resource paths only exist in the HTTP grammar.
        raise StoreError(f"Unsupported column path for SQL backend: {name!r}")
    return column(name)


def clause_to_sql(clause: FilterClause) -> ColumnElement[bool]:
    """Translate one validated clause into a SQLAlchemy boolean expression."""
    col = _column(clause.column)
    op = clause.operator
    value = clause.value
    if op == "ilike":
        return col.ilike(value.replace(WILDCARD, "%"), escape=LIKE_ESCAPE)
    if op == "like":
        return col.like(value.replace(WILDCARD, "%"), escape=LIKE_ESCAPE)
    if op == "eq":
        return col == value
    if op == "neq":
        return col != value
    if op == "gt":
        return col > value
    if op == "gte":
        return col >= value
    if op == "lt":
        return col < value
    if op == "lte":
        return col <= value
    if op == "in":
        return col.in_(value.strip("()").split(","))
    if op == "is":
        if value.lower() not in _IS_VALUES:
            raise StoreError(f"Unsupported 'is' value: {value!r}")
        return col.is_(_IS_VALUES[value.lower()])
    raise StoreError(f"Unsupported operator: {op!r}")


def build_select(query: StoreQuery):
    """Build the SELECT statement for a StoreQuery."""
    tbl = table(query.table, *(column(c) for c in query.columns))
    stmt = select(*(tbl.c[c] for c in query.columns)).select_from(tbl)
    conditions: list[ColumnElement[bool]] = []
    if query.or_filter is not None:
        conditions.append(or_(*(clause_to_sql(c) for c in query.or_filter.clauses)))
    conditions.extend(clause_to_sql(c) for c in query.filters)
    for in_clause in query.in_filters:
        conditions.append(_column(in_clause.column).in_(list(in_clause.values)))
    if conditions:
        stmt = stmt.where(and_(*conditions))
    if query.order is not None:
        order_col = _column(query.order.column)
        stmt = stmt.order_by(order_col.desc() if query.order.descending else order_col.asc())
    if query.limit is not None:
        stmt = stmt.limit(query.limit)
    return stmt


def _to_plain(value: Any) -> Any:
    """Driver types to the JSON-ish shapes the HTTP store returns."""
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


class SqlStoreClient:
    """Read-only store client over an async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def select(self, query: StoreQuery) -> list[dict[str, Any]]:
        """Run one read. Raises StoreError on any database failure."""
        stmt = build_select(query)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = result.mappings().all()
        except SQLAlchemyError as e:
            raise StoreError(f"Database query failed: {e}", table=query.table) from e
        logger.debug("SQL read %s returned %d row(s)", query.table, len(rows))
        return [{key: _to_plain(val) for key, val in row.items()} for row in rows]
