from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from trustbadges.core.config import settings


def build_engine(url: str) -> AsyncEngine:
    """Async engine for ``url``; SQLite connections may be shared across threads."""
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=False, connect_args={"check_same_thread": False})
    return create_async_engine(url, echo=False, pool_pre_ping=True)


engine = build_engine(settings.DATABASE_URL)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def create_tables(bind: AsyncEngine = engine) -> None:
    """Create any missing tables. Existing tables are left untouched."""
    from trustbadges.models import Base

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
