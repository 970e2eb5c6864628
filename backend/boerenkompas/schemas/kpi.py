"""KPI dashboard Pydantic schemas.

JSON field names are camelCase to match the dashboard front-end; Python code
uses the snake_case attribute names.
"""
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

KPIStatus = Literal["good", "warning", "critical"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class KPI(CamelModel):
    id: str
    label: str
    value: int
    unit: str
    status: KPIStatus
    trend: int | None = None  # % change vs baseline, omitted when not tracked


class KPICounts(CamelModel):
    """Raw counts behind the dashboard; all tenant-scoped and non-negative."""

    total_documents: int = 0
    documents_attention: int = 0
    documents_expired_by_date: int = 0  # informational, not folded into documents_attention
    tasks_overdue: int = 0
    tasks_upcoming_7d: int = Field(default=0, alias="tasksUpcoming7d")  # to_camel would give "7D"
    missing_items_open: int = 0
    exports_this_month: int = 0
    exports_prev_month: int = 0
    docs_at_month_start: int = 0


class KPIMeta(CamelModel):
    tenant_id: str
    generated_at: str
    query_time_ms: int


class KPIResponse(BaseModel):
    kpis: list[KPI]
    meta: KPIMeta


class KPIFullMeta(KPIMeta):
    api_time_ms: int


class KPIFullResponse(CamelModel):
    data: list[KPI]
    meta: KPIFullMeta


class KPICountsSnapshot(CamelModel):
    counts: KPICounts
    date_boundaries: dict[str, str]


class KPIDebugMeta(KPIMeta):
    tenant_name: str
    environment: str


class KPIDebugSnapshot(CamelModel):
    meta: KPIDebugMeta
    date_boundaries: dict[str, str]
    raw_counts: KPICounts
    kpis: list[KPI]
    documentation: dict | None = Field(default=None, alias="_documentation")
