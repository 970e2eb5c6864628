from fastapi import APIRouter

from boerenkompas.api.v1 import kpi

api_router = APIRouter()

api_router.include_router(kpi.router, prefix="/kpis", tags=["kpis"])
