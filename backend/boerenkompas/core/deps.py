import uuid
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from boerenkompas.core.config import settings
from boerenkompas.core.errors import UnauthorizedError
from boerenkompas.core.security import decode_token
from boerenkompas.db.session import get_session_factory
from boerenkompas.services.count_store import CountStore, SqlAlchemyCountStore
from boerenkompas.services.tenant import TenantContext, require_active_tenant

# auto_error=False so a missing header surfaces as our own {"error", "code"} body
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> uuid.UUID:
    """Validate the bearer JWT and return the user id from its ``sub`` claim."""
    if credentials is None:
        raise UnauthorizedError()
    try:
        payload = decode_token(credentials.credentials)
        return UUID(payload.get("sub") or "")
    except (JWTError, ValueError):
        raise UnauthorizedError()


async def get_current_tenant(
    request: Request,
    user_id: Annotated[uuid.UUID, Depends(get_current_user_id)],
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> TenantContext:
    """Tenant every query of this request is scoped to. Never taken from client input alone.

    The session is released before the handler runs; the KPI counts open their own.
    """
    cookie_tenant_id = request.cookies.get(settings.ACTIVE_TENANT_COOKIE)
    async with session_factory() as db:
        return await require_active_tenant(db, user_id, cookie_tenant_id)


def get_count_store(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> CountStore:
    return SqlAlchemyCountStore(session_factory)
