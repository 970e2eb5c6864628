from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from boerenkompas.core.config import settings

# A single dashboard request opens up to nine sessions at once (one per KPI count).
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.APP_ENV == "development",
    pool_pre_ping=True,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    expire_on_commit=False,
    autoflush=False,
)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return AsyncSessionLocal

