"""Count-only query interface over the tenant data store.

The KPI engine only ever needs "how many rows match these filters", so the
store is reduced to that one operation. ``SqlAlchemyCountStore`` is the
PostgreSQL implementation; tests use an in-memory store with the same
filter semantics.
"""
import uuid
from dataclasses import dataclass
from typing import Any, Literal, Protocol

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from boerenkompas.models import Document, Export, Task

FilterOp = Literal["eq", "in", "not_null", "lt", "lte", "gte"]


@dataclass(frozen=True)
class Filter:
    column: str
    op: FilterOp
    value: Any = None


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def in_(column: str, values) -> Filter:
    return Filter(column, "in", tuple(values))


def not_null(column: str) -> Filter:
    return Filter(column, "not_null")


def lt(column: str, value: Any) -> Filter:
    return Filter(column, "lt", value)


def lte(column: str, value: Any) -> Filter:
    return Filter(column, "lte", value)


def gte(column: str, value: Any) -> Filter:
    return Filter(column, "gte", value)


@dataclass(frozen=True)
class CountQuery:
    """A named count over one collection. ``name`` identifies it in logs."""

    name: str
    collection: str
    filters: tuple[Filter, ...]

    @classmethod
    def for_tenant(cls, name: str, collection: str, tenant_id, *filters: Filter) -> "CountQuery":
        return cls(name=name, collection=collection, filters=(eq("tenant_id", tenant_id), *filters))

    @property
    def tenant_id(self):
        for f in self.filters:
            if f.column == "tenant_id" and f.op == "eq":
                return f.value
        return None


class CountStore(Protocol):
    async def count(self, query: CountQuery) -> int:
        ...


COLLECTIONS = {
    "documents": Document,
    "tasks": Task,
    "exports": Export,
}


def _clause(column, f: Filter):
    if f.op == "eq":
        return column == f.value
    if f.op == "in":
        return column.in_(f.value)
    if f.op == "not_null":
        return column.isnot(None)
    if f.op == "lt":
        return column < f.value
    if f.op == "lte":
        return column <= f.value
    if f.op == "gte":
        return column >= f.value
    raise ValueError(f"Unsupported filter op: {f.op}")


def build_count_statement(query: CountQuery) -> Select:
    """Translate a CountQuery into ``SELECT count(*) ... WHERE ...``.

    Raises ValueError for unknown collections or queries without a tenant filter.
    """
    model = COLLECTIONS.get(query.collection)
    if model is None:
        raise ValueError(f"Unknown collection: {query.collection}")
    if query.tenant_id is None:
        raise ValueError(f"Count query '{query.name}' is not tenant-scoped")

    stmt = select(func.count()).select_from(model)
    for f in query.filters:
        if f.column == "tenant_id" and isinstance(f.value, str):
            f = Filter(f.column, f.op, uuid.UUID(f.value))
        stmt = stmt.where(_clause(getattr(model, f.column), f))
    return stmt


class SqlAlchemyCountStore:
    """Runs each count in its own session so callers may gather them concurrently."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def count(self, query: CountQuery) -> int:
        stmt = build_count_statement(query)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar_one()
