"""Seed script — creates the pilot tenant with a predictable KPI mix for dev.

Resulting dashboard (run on any day):
  total_documents 12, documents_attention 5, tasks_overdue 2,
  tasks_upcoming_7d 3, missing_items_open 2, exports_this_month 2.
"""
import asyncio
import os
import sys
import uuid
from datetime import datetime, timedelta, timezone

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from boerenkompas.core.config import settings
from boerenkompas.core.security import create_access_token
from boerenkompas.db.base import Base
from boerenkompas.models import Document, Export, Task, Tenant, TenantMember, UserSettings
from boerenkompas.services.kpi_dates import get_date_boundaries

PILOT_TENANT_ID = uuid.UUID("00000000-1111-2222-3333-444444444444")
PILOT_USER_ID = uuid.UUID(os.environ.get("SEED_USER_ID", "00000000-aaaa-bbbb-cccc-000000000001"))


async def seed():
    engine = create_async_engine(settings.DATABASE_URL, echo=True)
    SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    now = datetime.now(timezone.utc)
    dates = get_date_boundaries(now)
    today = dates.today_date

    async with SessionLocal() as db:
        db.add(Tenant(id=PILOT_TENANT_ID, name="Pilot Boerderij", created_by=PILOT_USER_ID))
        await db.flush()
        db.add(TenantMember(tenant_id=PILOT_TENANT_ID, user_id=PILOT_USER_ID, role="owner"))
        db.add(UserSettings(user_id=PILOT_USER_ID, active_tenant_id=PILOT_TENANT_ID))

        # Documents: 5 ok, 3 needs_review, 2 expired, 2 ok-but-date-expired
        for i in range(5):
            db.add(Document(tenant_id=PILOT_TENANT_ID, title=f"Mestboekhouding {i + 1}", status="ok"))
        for i in range(3):
            db.add(Document(tenant_id=PILOT_TENANT_ID, title=f"Bodemanalyse {i + 1}", status="needs_review"))
        for i in range(2):
            db.add(Document(
                tenant_id=PILOT_TENANT_ID,
                title=f"Vergunning {i + 1}",
                status="expired",
                expires_at=today - timedelta(days=30),
            ))
        for i in range(2):
            db.add(Document(
                tenant_id=PILOT_TENANT_ID,
                title=f"Keuringsrapport {i + 1}",
                status="ok",
                expires_at=today - timedelta(days=3),
            ))

        # Tasks: 2 overdue, 3 upcoming, 2 far future, 2 missing_item (no due date), 1 done
        for days in (-3, -1):
            db.add(Task(tenant_id=PILOT_TENANT_ID, title="Achterstallige taak", due_at=now + timedelta(days=days)))
        for days in (1, 3, 6):
            db.add(Task(tenant_id=PILOT_TENANT_ID, title="Deadline deze week", due_at=now + timedelta(days=days)))
        for days in (14, 30):
            db.add(Task(tenant_id=PILOT_TENANT_ID, title="Toekomstige taak", due_at=now + timedelta(days=days)))
        for code in ("MEST-01", "RVO-02"):
            db.add(Task(tenant_id=PILOT_TENANT_ID, title=f"Ontbrekend: {code}", source="missing_item"))
        db.add(Task(
            tenant_id=PILOT_TENANT_ID,
            title="Afgeronde taak",
            status="done",
            due_at=now - timedelta(days=2),
            completed_at=now,
        ))

        # Exports: 2 this month, 2 previous month
        for created in (dates.month_start, dates.month_start + timedelta(hours=1)):
            db.add(Export(tenant_id=PILOT_TENANT_ID, title="Inspectiedossier", created_at=created))
        for created in (dates.prev_month_start, dates.prev_month_start + timedelta(days=1)):
            db.add(Export(tenant_id=PILOT_TENANT_ID, title="Inspectiedossier", created_at=created))

        await db.commit()
        print("Seed complete.")
        print(f"  tenant: {PILOT_TENANT_ID} (Pilot Boerderij)")
        print(f"  bearer token: {create_access_token(str(PILOT_USER_ID), expires_minutes=24 * 60)}")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
