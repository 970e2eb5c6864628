"""Active tenant resolution.

The active tenant is DB-authoritative (``user_settings.active_tenant_id``).
Fallbacks, in order: the server-set ``bk_active_tenant`` cookie, then the
user's oldest membership. Every candidate is checked against
``tenant_members`` so a stale setting or cookie never grants access.
"""
import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from boerenkompas.core.errors import TenantNotFoundError
from boerenkompas.models import Tenant, TenantMember, UserSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantContext:
    id: uuid.UUID
    name: str
    role: str


def _parse_uuid(value: str | None) -> uuid.UUID | None:
    if not value:
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


async def _membership(db: AsyncSession, user_id: uuid.UUID, tenant_id: uuid.UUID) -> TenantContext | None:
    result = await db.execute(
        select(Tenant.id, Tenant.name, TenantMember.role)
        .join(TenantMember, TenantMember.tenant_id == Tenant.id)
        .where(TenantMember.user_id == user_id, TenantMember.tenant_id == tenant_id)
    )
    row = result.first()
    if row is None:
        return None
    return TenantContext(id=row.id, name=row.name, role=row.role)


async def get_active_tenant(
    db: AsyncSession,
    user_id: uuid.UUID,
    cookie_tenant_id: str | None = None,
) -> TenantContext | None:
    settings_row = (
        await db.execute(select(UserSettings).where(UserSettings.user_id == user_id))
    ).scalar_one_or_none()
    if settings_row is not None and settings_row.active_tenant_id is not None:
        tenant = await _membership(db, user_id, settings_row.active_tenant_id)
        if tenant is not None:
            return tenant
        logger.info("Active tenant %s for user %s is no longer a membership", settings_row.active_tenant_id, user_id)

    cookie_id = _parse_uuid(cookie_tenant_id)
    if cookie_id is not None:
        tenant = await _membership(db, user_id, cookie_id)
        if tenant is not None:
            return tenant

    result = await db.execute(
        select(Tenant.id, Tenant.name, TenantMember.role)
        .join(TenantMember, TenantMember.tenant_id == Tenant.id)
        .where(TenantMember.user_id == user_id)
        .order_by(TenantMember.created_at.asc())
        .limit(1)
    )
    row = result.first()
    if row is None:
        return None
    return TenantContext(id=row.id, name=row.name, role=row.role)


async def require_active_tenant(
    db: AsyncSession,
    user_id: uuid.UUID,
    cookie_tenant_id: str | None = None,
) -> TenantContext:
    """Like get_active_tenant, but raises TenantNotFoundError instead of returning None."""
    tenant = await get_active_tenant(db, user_id, cookie_tenant_id)
    if tenant is None:
        raise TenantNotFoundError()
    return tenant
