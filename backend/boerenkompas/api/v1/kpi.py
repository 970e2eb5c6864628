"""KPI Dashboard API endpoints."""
import logging
import time
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from boerenkompas.core.config import settings
from boerenkompas.core.deps import get_count_store, get_current_tenant
from boerenkompas.core.errors import ForbiddenError
from boerenkompas.core.limiter import limiter
from boerenkompas.schemas.kpi import KPI, KPIDebugSnapshot, KPIFullMeta, KPIFullResponse
from boerenkompas.services import kpi as kpi_svc
from boerenkompas.services.count_store import CountStore
from boerenkompas.services.tenant import TenantContext

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get(
    "",
    response_model=list[KPI] | KPIFullResponse,
    response_model_exclude_none=True,
    summary="Dashboard KPIs for the active tenant",
)
@limiter.limit(settings.KPI_RATE_LIMIT)
async def get_kpis(
    request: Request,
    tenant: Annotated[TenantContext, Depends(get_current_tenant)],
    store: Annotated[CountStore, Depends(get_count_store)],
    format: str = Query(default="array", description="'array' (bare KPI list) or 'full' (data + meta)"),
):
    """Return the six dashboard KPIs.

    ``format=array`` (default) returns the list itself. ``format=full`` wraps
    it as ``{data, meta}`` with tenant id, generation time and timings.
    Unrecognised formats are treated as ``array``.
    """
    started = time.perf_counter()

    if format == "full":
        result = await kpi_svc.get_dashboard_kpis_with_meta(store, tenant.id)
        return KPIFullResponse(
            data=result.kpis,
            meta=KPIFullMeta(
                **result.meta.model_dump(),
                api_time_ms=int((time.perf_counter() - started) * 1000),
            ),
        )

    return await kpi_svc.get_dashboard_kpis(store, tenant.id)


@router.get(
    "/debug",
    response_model=KPIDebugSnapshot,
    response_model_exclude_none=True,
    summary="Raw counts, date boundaries and KPIs for debugging",
)
@limiter.limit(settings.KPI_RATE_LIMIT)
async def get_kpis_debug(
    request: Request,
    tenant: Annotated[TenantContext, Depends(get_current_tenant)],
    store: Annotated[CountStore, Depends(get_count_store)],
):
    """Only ever returns data for the caller's own active tenant."""
    if not settings.KPI_DEBUG_ENABLED:
        raise ForbiddenError("KPI debug endpoint is disabled")

    snapshot = await kpi_svc.get_kpi_debug_snapshot(store, tenant.id, tenant.name)
    snapshot.documentation = {
        "endpoint": "GET /api/v1/kpis/debug",
        "purpose": "Debug KPI calculations and verify counts",
        "kpiDefinitions": kpi_svc.KPI_DEFINITIONS,
    }
    return snapshot
