"""Dashboard KPI aggregation.

KPI definitions (all counts are scoped to one tenant, all dates are UTC):

  total_documents      All documents. Trend vs documents created before the
                       start of this month. good if > 0, warning if 0.
  documents_attention  status in (needs_review, expired).
                       good 0, warning 1-3, critical > 3.
  tasks_overdue        status in (open, snoozed) and due_at < now.
                       good 0, warning 1-2, critical > 2.
  tasks_upcoming_7d    status in (open, snoozed) and
                       start of today <= due_at <= end of today + 7 days.
                       good <= 2, warning 3-5, critical > 5.
  missing_items_open   source = missing_item and status in (open, snoozed).
                       good 0, warning 1-3, critical > 3.
  exports_this_month   created_at within the current calendar month.
                       Trend vs previous month. Always good (informational).

Tasks without a due_at never count as overdue or upcoming. Documents whose
expires_at lies in the past are counted separately (documents_expired_by_date)
but documents_attention looks at status only.

A count query that fails is logged and read as 0: a partially degraded
dashboard is preferred over an error page.
"""
import asyncio
import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

from boerenkompas.core.config import settings
from boerenkompas.models import DocumentStatus, TaskSource, TaskStatus
from boerenkompas.schemas.kpi import (
    KPI,
    KPICounts,
    KPICountsSnapshot,
    KPIDebugMeta,
    KPIDebugSnapshot,
    KPIMeta,
    KPIResponse,
    KPIStatus,
)
from boerenkompas.services.count_store import (
    CountQuery,
    CountStore,
    eq,
    gte,
    in_,
    lt,
    lte,
    not_null,
)
from boerenkompas.services.kpi_dates import DateBoundaries, get_date_boundaries, to_iso

logger = logging.getLogger(__name__)

OPEN_TASK_STATUSES = (TaskStatus.open.value, TaskStatus.snoozed.value)
ATTENTION_DOC_STATUSES = (DocumentStatus.needs_review.value, DocumentStatus.expired.value)

Direction = Literal["lower-is-better", "higher-is-better"]


@dataclass(frozen=True)
class Thresholds:
    good: int
    warning: int


DOCUMENTS_ATTENTION_THRESHOLDS = Thresholds(good=0, warning=3)
TASKS_OVERDUE_THRESHOLDS = Thresholds(good=0, warning=2)
TASKS_UPCOMING_THRESHOLDS = Thresholds(good=2, warning=5)
MISSING_ITEMS_THRESHOLDS = Thresholds(good=0, warning=3)

KPI_DEFINITIONS = {
    "total_documents": "All documents for tenant (no filters)",
    "documents_attention": "Documents with status=needs_review OR status=expired",
    "tasks_overdue": "Tasks with status IN (open, snoozed) AND due_at < NOW",
    "tasks_upcoming_7d": "Tasks with status IN (open, snoozed) AND due_at between today and today+7",
    "missing_items_open": "Tasks with source=missing_item AND status IN (open, snoozed)",
    "exports_this_month": "Exports created in current calendar month",
}


# ─── Trend & status rules ─────────────────────────────────────────────────────

def calculate_trend(current: int, baseline: int) -> int:
    """Percentage change from baseline to current, as an integer.

    A zero baseline gives 100 when current is positive and 0 otherwise.
    Halves round towards +infinity (2.5 -> 3, -2.5 -> -2).
    """
    if baseline == 0:
        return 100 if current > 0 else 0
    return math.floor(((current - baseline) / baseline) * 100 + 0.5)


def determine_status(
    value: int,
    thresholds: Thresholds,
    direction: Direction = "lower-is-better",
) -> KPIStatus:
    if direction == "lower-is-better":
        if value <= thresholds.good:
            return "good"
        if value <= thresholds.warning:
            return "warning"
        return "critical"

    if value >= thresholds.good:
        return "good"
    if value >= thresholds.warning:
        return "warning"
    return "critical"


# ─── Counting ─────────────────────────────────────────────────────────────────

def build_count_queries(tenant_id, dates: DateBoundaries) -> list[tuple[str, CountQuery]]:
    """The nine count queries, keyed by the KPICounts field they fill."""
    return [
        ("total_documents", CountQuery.for_tenant("totalDocs", "documents", tenant_id)),
        ("documents_attention", CountQuery.for_tenant(
            "docsAttention", "documents", tenant_id,
            in_("status", ATTENTION_DOC_STATUSES),
        )),
        ("documents_expired_by_date", CountQuery.for_tenant(
            "docsExpiredByDate", "documents", tenant_id,
            not_null("expires_at"),
            lt("expires_at", dates.today_date),
        )),
        ("tasks_overdue", CountQuery.for_tenant(
            "tasksOverdue", "tasks", tenant_id,
            in_("status", OPEN_TASK_STATUSES),
            not_null("due_at"),
            lt("due_at", dates.now),
        )),
        ("tasks_upcoming_7d", CountQuery.for_tenant(
            "tasksUpcoming7d", "tasks", tenant_id,
            in_("status", OPEN_TASK_STATUSES),
            not_null("due_at"),
            gte("due_at", dates.today_start),
            lte("due_at", dates.seven_days_end),
        )),
        ("missing_items_open", CountQuery.for_tenant(
            "missingItems", "tasks", tenant_id,
            eq("source", TaskSource.missing_item.value),
            in_("status", OPEN_TASK_STATUSES),
        )),
        ("exports_this_month", CountQuery.for_tenant(
            "exportsThisMonth", "exports", tenant_id,
            gte("created_at", dates.month_start),
            lte("created_at", dates.month_end),
        )),
        ("exports_prev_month", CountQuery.for_tenant(
            "exportsPrevMonth", "exports", tenant_id,
            gte("created_at", dates.prev_month_start),
            lte("created_at", dates.prev_month_end),
        )),
        ("docs_at_month_start", CountQuery.for_tenant(
            "docsAtMonthStart", "documents", tenant_id,
            lt("created_at", dates.month_start),
        )),
    ]


async def _count_or_zero(store: CountStore, query: CountQuery) -> int:
    try:
        count = await store.count(query)
    except Exception as exc:
        logger.error("KPI query error (%s): %s", query.name, exc)
        return 0
    return count or 0


async def fetch_kpi_counts(store: CountStore, tenant_id, dates: DateBoundaries) -> KPICounts:
    """Run all count queries concurrently; failed queries count as 0."""
    queries = build_count_queries(tenant_id, dates)
    results = await asyncio.gather(*(_count_or_zero(store, query) for _, query in queries))
    return KPICounts(**{field: value for (field, _), value in zip(queries, results)})


# ─── Assembly ─────────────────────────────────────────────────────────────────

def build_kpis(counts: KPICounts) -> list[KPI]:
    """Shape raw counts into the six dashboard KPIs, in display order."""
    return [
        KPI(
            id="total_documents",
            label="Documenten",
            value=counts.total_documents,
            unit="stuks",
            status="good" if counts.total_documents > 0 else "warning",
            trend=calculate_trend(counts.total_documents, counts.docs_at_month_start),
        ),
        KPI(
            id="documents_attention",
            label="Aandacht vereist",
            value=counts.documents_attention,
            unit="documenten",
            status=determine_status(counts.documents_attention, DOCUMENTS_ATTENTION_THRESHOLDS),
        ),
        KPI(
            id="tasks_overdue",
            label="Taken verlopen",
            value=counts.tasks_overdue,
            unit="taken",
            status=determine_status(counts.tasks_overdue, TASKS_OVERDUE_THRESHOLDS),
        ),
        KPI(
            id="tasks_upcoming_7d",
            label="Deadlines (7d)",
            value=counts.tasks_upcoming_7d,
            unit="taken",
            status=determine_status(counts.tasks_upcoming_7d, TASKS_UPCOMING_THRESHOLDS),
        ),
        KPI(
            id="missing_items_open",
            label="Ontbrekende items",
            value=counts.missing_items_open,
            unit="open",
            status=determine_status(counts.missing_items_open, MISSING_ITEMS_THRESHOLDS),
        ),
        KPI(
            id="exports_this_month",
            label="Exports deze maand",
            value=counts.exports_this_month,
            unit="stuks",
            status="good",
            trend=calculate_trend(counts.exports_this_month, counts.exports_prev_month),
        ),
    ]


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def _utc_now_iso() -> str:
    return to_iso(datetime.now(timezone.utc))


async def get_dashboard_kpis(store: CountStore, tenant_id, now: datetime | None = None) -> list[KPI]:
    started = time.perf_counter()
    dates = get_date_boundaries(now)
    counts = await fetch_kpi_counts(store, tenant_id, dates)
    kpis = build_kpis(counts)

    query_time_ms = _elapsed_ms(started)
    if query_time_ms > settings.KPI_SLOW_QUERY_MS:
        logger.warning("KPI queries took %dms for tenant %s", query_time_ms, tenant_id)
    return kpis


async def get_dashboard_kpis_with_meta(
    store: CountStore, tenant_id, now: datetime | None = None
) -> KPIResponse:
    started = time.perf_counter()
    dates = get_date_boundaries(now)
    counts = await fetch_kpi_counts(store, tenant_id, dates)
    kpis = build_kpis(counts)

    return KPIResponse(
        kpis=kpis,
        meta=KPIMeta(
            tenant_id=str(tenant_id),
            generated_at=_utc_now_iso(),
            query_time_ms=_elapsed_ms(started),
        ),
    )


async def get_kpi_counts(store: CountStore, tenant_id, now: datetime | None = None) -> KPICountsSnapshot:
    """Raw counts plus the boundaries they were computed with (internal use)."""
    dates = get_date_boundaries(now)
    counts = await fetch_kpi_counts(store, tenant_id, dates)
    return KPICountsSnapshot(counts=counts, date_boundaries=dates.as_dict())


async def get_kpi_debug_snapshot(
    store: CountStore,
    tenant_id,
    tenant_name: str,
    now: datetime | None = None,
) -> KPIDebugSnapshot:
    """Everything behind the dashboard numbers, for operational debugging."""
    dates = get_date_boundaries(now)

    started = time.perf_counter()
    counts = await fetch_kpi_counts(store, tenant_id, dates)
    kpis = build_kpis(counts)
    query_time_ms = _elapsed_ms(started)

    return KPIDebugSnapshot(
        meta=KPIDebugMeta(
            tenant_id=str(tenant_id),
            tenant_name=tenant_name,
            generated_at=_utc_now_iso(),
            query_time_ms=query_time_ms,
            environment=settings.APP_ENV,
        ),
        date_boundaries=dates.as_dict(),
        raw_counts=counts,
        kpis=kpis,
    )
