"""Shared fixtures: an in-memory count store with the same filter semantics
as the SQL store, plus a few row builders."""
import os
import uuid
from datetime import datetime, timezone

import pytest


def pytest_configure(config):
    """Switch settings to the test profile before the app modules are imported.

    The rate limiter is disabled under APP_ENV=test.
    """
    os.environ.setdefault("APP_ENV", "test")


TENANT_A = uuid.UUID("00000000-1111-2222-3333-444444444444")
TENANT_B = uuid.UUID("99999999-1111-2222-3333-444444444444")

# 2024-01-15 10:00 UTC; the previous month crosses the year boundary.
FIXED_NOW = datetime(2024, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


class InMemoryCountStore:
    """Evaluates CountQuery filters over plain dict rows.

    ``fail`` holds query names that should raise, to simulate store errors.
    """

    def __init__(self, rows: dict[str, list[dict]] | None = None, fail: set[str] | None = None):
        self.rows = {"documents": [], "tasks": [], "exports": []}
        for collection, items in (rows or {}).items():
            self.rows[collection].extend(items)
        self.fail = set(fail or ())
        self.queries = []

    def add(self, collection: str, **row) -> None:
        self.rows[collection].append(row)

    @staticmethod
    def _matches(row: dict, f) -> bool:
        value = row.get(f.column)
        if f.op == "eq":
            return value == f.value
        if f.op == "in":
            return value in f.value
        if f.op == "not_null":
            return value is not None
        if value is None:
            return False
        if f.op == "lt":
            return value < f.value
        if f.op == "lte":
            return value <= f.value
        if f.op == "gte":
            return value >= f.value
        raise ValueError(f.op)

    async def count(self, query) -> int:
        self.queries.append(query)
        if query.name in self.fail:
            raise RuntimeError(f"simulated failure in {query.name}")
        return sum(
            1 for row in self.rows[query.collection]
            if all(self._matches(row, f) for f in query.filters)
        )


def document(tenant_id=TENANT_A, status="ok", expires_at=None, created_at=None) -> dict:
    return {
        "tenant_id": tenant_id,
        "status": status,
        "expires_at": expires_at,
        "created_at": created_at or datetime(2023, 6, 1, tzinfo=timezone.utc),
    }


def task(tenant_id=TENANT_A, status="open", due_at=None, source="manual") -> dict:
    return {"tenant_id": tenant_id, "status": status, "due_at": due_at, "source": source}


def export(created_at, tenant_id=TENANT_A) -> dict:
    return {"tenant_id": tenant_id, "created_at": created_at}


@pytest.fixture
def store():
    return InMemoryCountStore()
