"""
Async SQLAlchemy engine, session factory and the request-scoped session dependency.
The schema is owned by the Alembic migrations; nothing is created at startup.
"""
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from guardroster.config import settings

_ASYNCPG_PREFIXES = ("postgres://", "postgresql://", "postgresql+psycopg2://")


def async_database_url(url: str) -> str:
    """Point any PostgreSQL URL at the asyncpg driver; other URLs (sqlite+aiosqlite) pass through."""
    url = (url or "").strip()
    for prefix in _ASYNCPG_PREFIXES:
        if url.startswith(prefix):
            return "postgresql+asyncpg://" + url[len(prefix):]
    return url


engine = create_async_engine(
    async_database_url(settings.database_url),
    echo=settings.debug,
    pool_pre_ping=True,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


async def get_db():
    """One session per request: committed when the handler returns, rolled back if it raises."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
