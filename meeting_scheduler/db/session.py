# meeting_scheduler/db/session.py
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from meeting_scheduler.core.config import get_settings
from meeting_scheduler.db.base import Base

settings = get_settings()

# Tests drive the engine from several event loops (TestClient portal, pytest-asyncio),
# so connections must not be pooled across them.
IS_TEST = settings.APP_ENV == "test"

engine = create_async_engine(
    settings.DB_URL,
    echo=False,
    future=True,
    poolclass=NullPool if IS_TEST else None,
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    autoflush=False,
    expire_on_commit=False,
    class_=AsyncSession,
)


async def init_db_for_startup() -> None:
    """
    Create any missing tables. Safe to call on every application startup.
    """
    # registers every model on Base.metadata
    import meeting_scheduler.db.record_store  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def reset_db() -> None:
    """
    TEST-ONLY: drop and recreate every table.
    """
    import meeting_scheduler.db.record_store  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
