"""Tests for the /api/v1/kpis endpoints: response formats, auth and error shapes."""
import uuid
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient, ASGITransport

from boerenkompas.core.config import settings
from boerenkompas.core.deps import get_count_store, get_current_tenant
from boerenkompas.core.security import create_access_token
from boerenkompas.db.session import get_session_factory
from boerenkompas.main import app
from boerenkompas.services import kpi as kpi_svc
from boerenkompas.services.tenant import TenantContext

from conftest import TENANT_A, InMemoryCountStore, document, task

USER_ID = uuid.UUID("f96955d0-752f-4e0c-b1dc-d26d8dd1460e")
KPI_IDS = [
    "total_documents",
    "documents_attention",
    "tasks_overdue",
    "tasks_upcoming_7d",
    "missing_items_open",
    "exports_this_month",
]


# ─── Helpers ──────────────────────────────────────────────────────────────────

def _seeded_store() -> InMemoryCountStore:
    store = InMemoryCountStore()
    for status in ("ok", "needs_review", "expired", "expired", "needs_review"):
        store.add("documents", **document(status=status))
    store.add("tasks", **task(source="missing_item"))
    return store


def _override(store: InMemoryCountStore | None = None):
    store = store or _seeded_store()
    app.dependency_overrides[get_current_tenant] = lambda: TenantContext(
        id=TENANT_A, name="Pilot Boerderij", role="owner"
    )
    app.dependency_overrides[get_count_store] = lambda: store
    return store


def _client(raise_app_exceptions: bool = True) -> AsyncClient:
    transport = ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest.fixture(autouse=True)
def _clear_overrides():
    yield
    app.dependency_overrides.clear()


# ─── Formats ──────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_default_format_returns_bare_list():
    _override()
    async with _client() as client:
        response = await client.get("/api/v1/kpis")

    assert response.status_code == 200
    body = response.json()
    assert isinstance(body, list)
    assert [k["id"] for k in body] == KPI_IDS

    by_id = {k["id"]: k for k in body}
    assert by_id["total_documents"] == {
        "id": "total_documents",
        "label": "Documenten",
        "value": 5,
        "unit": "stuks",
        "status": "good",
        "trend": 0,  # all documents predate this month
    }
    assert by_id["documents_attention"]["value"] == 4
    assert by_id["documents_attention"]["status"] == "critical"
    assert "trend" not in by_id["documents_attention"]
    assert by_id["missing_items_open"]["status"] == "warning"


@pytest.mark.asyncio
async def test_full_format_wraps_data_and_meta():
    _override()
    async with _client() as client:
        response = await client.get("/api/v1/kpis", params={"format": "full"})

    assert response.status_code == 200
    body = response.json()
    assert [k["id"] for k in body["data"]] == KPI_IDS
    meta = body["meta"]
    assert meta["tenantId"] == str(TENANT_A)
    assert meta["generatedAt"].endswith("Z")
    assert meta["queryTimeMs"] >= 0
    assert meta["apiTimeMs"] >= meta["queryTimeMs"]


@pytest.mark.asyncio
async def test_unknown_format_falls_back_to_array():
    _override()
    async with _client() as client:
        response = await client.get("/api/v1/kpis", params={"format": "csv"})

    assert response.status_code == 200
    assert isinstance(response.json(), list)


@pytest.mark.asyncio
async def test_failed_query_still_returns_all_kpis():
    store = _seeded_store()
    store.fail = {"docsAttention"}
    _override(store)
    async with _client() as client:
        response = await client.get("/api/v1/kpis")

    assert response.status_code == 200
    by_id = {k["id"]: k for k in response.json()}
    assert len(by_id) == 6
    assert by_id["documents_attention"]["value"] == 0
    assert by_id["total_documents"]["value"] == 5


# ─── Debug ────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_debug_snapshot():
    _override()
    async with _client() as client:
        response = await client.get("/api/v1/kpis/debug")

    assert response.status_code == 200
    body = response.json()
    assert body["meta"]["tenantName"] == "Pilot Boerderij"
    assert body["meta"]["environment"] == "test"
    assert set(body["dateBoundaries"]) >= {"now", "todayStart", "sevenDaysEnd", "prevMonthEnd", "todayDate"}
    assert body["rawCounts"]["documentsAttention"] == 4
    assert body["rawCounts"]["missingItemsOpen"] == 1
    assert body["rawCounts"]["tasksUpcoming7d"] == 0
    assert "documentsExpiredByDate" in body["rawCounts"]
    assert [k["id"] for k in body["kpis"]] == KPI_IDS
    assert set(body["_documentation"]["kpiDefinitions"]) == set(KPI_IDS)

    by_id = {k["id"]: k for k in body["kpis"]}
    for kpi_id in ("documents_attention", "tasks_overdue", "tasks_upcoming_7d", "missing_items_open"):
        assert "trend" not in by_id[kpi_id]
    assert by_id["total_documents"]["trend"] == 0


@pytest.mark.asyncio
async def test_debug_disabled_returns_403(monkeypatch):
    monkeypatch.setattr(settings, "KPI_DEBUG_ENABLED", False)
    _override()
    async with _client() as client:
        response = await client.get("/api/v1/kpis/debug")

    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"


# ─── Auth & tenant resolution ─────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_missing_token_returns_401():
    async with _client() as client:
        response = await client.get("/api/v1/kpis")

    assert response.status_code == 401
    assert response.json() == {"error": "Authentication required", "code": "UNAUTHORIZED"}


@pytest.mark.asyncio
async def test_invalid_token_returns_401():
    async with _client() as client:
        response = await client.get("/api/v1/kpis", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHORIZED"


class _SessionFactory:
    """Stands in for async_sessionmaker; tracks how many sessions are open."""

    def __init__(self, *results):
        self.db = AsyncMock()
        self.db.execute = AsyncMock(side_effect=list(results))
        self.open = 0

    def __call__(self):
        return self

    async def __aenter__(self):
        self.open += 1
        return self.db

    async def __aexit__(self, *exc_info):
        self.open -= 1


@pytest.mark.asyncio
async def test_valid_token_resolves_tenant_from_user_settings():
    settings_result = MagicMock()
    settings_result.scalar_one_or_none.return_value = SimpleNamespace(
        user_id=USER_ID, active_tenant_id=TENANT_A
    )
    membership_result = MagicMock()
    membership_result.first.return_value = SimpleNamespace(id=TENANT_A, name="Pilot Boerderij", role="owner")

    factory = _SessionFactory(settings_result, membership_result)
    store = _seeded_store()
    open_during_counts = []
    count = store.count

    async def _tracking_count(query):
        open_during_counts.append(factory.open)
        return await count(query)

    store.count = _tracking_count
    app.dependency_overrides[get_session_factory] = lambda: factory
    app.dependency_overrides[get_count_store] = lambda: store
    token = create_access_token(str(USER_ID))

    async with _client() as client:
        response = await client.get(
            "/api/v1/kpis",
            params={"format": "full"},
            headers={"Authorization": f"Bearer {token}"},
        )

    assert response.status_code == 200
    assert response.json()["meta"]["tenantId"] == str(TENANT_A)
    # tenant lookup session is closed before the nine counts run
    assert open_during_counts == [0] * 9


@pytest.mark.asyncio
async def test_user_without_tenant_gets_no_tenant_error():
    empty_settings = MagicMock()
    empty_settings.scalar_one_or_none.return_value = None
    no_membership = MagicMock()
    no_membership.first.return_value = None

    app.dependency_overrides[get_session_factory] = lambda: _SessionFactory(empty_settings, no_membership)
    token = create_access_token(str(USER_ID))

    async with _client() as client:
        response = await client.get("/api/v1/kpis", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 404
    assert response.json()["code"] == "NO_TENANT"


# ─── Unexpected failures ──────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_unexpected_error_returns_generic_500(monkeypatch):
    def _boom(counts):
        raise RuntimeError("secret internal detail")

    monkeypatch.setattr(kpi_svc, "build_kpis", _boom)
    _override()
    async with _client(raise_app_exceptions=False) as client:
        response = await client.get("/api/v1/kpis")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error", "code": "INTERNAL_ERROR"}
    assert "secret" not in response.text


@pytest.mark.asyncio
async def test_request_id_header_is_echoed():
    _override()
    async with _client() as client:
        response = await client.get("/api/v1/kpis", headers={"X-Request-ID": "abc123"})

    assert response.headers["X-Request-ID"] == "abc123"
