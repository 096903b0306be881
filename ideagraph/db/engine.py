"""Async SQLAlchemy engine and session factory."""

from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

_engine = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for ``url``.

    Plain ``postgresql://`` URLs are routed through asyncpg. For file-backed
    SQLite the parent directory is created.
    """
    url = url.replace("postgresql://", "postgresql+asyncpg://")
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        if parsed.database and parsed.database != ":memory:":
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
        return create_async_engine(url, echo=echo)
    return create_async_engine(url, echo=echo, pool_size=5, max_overflow=10)


def get_engine() -> AsyncEngine:
    """Get or create the async engine (singleton)."""
    global _engine
    if _engine is None:
        from ideagraph.config import get_settings

        db = get_settings().database
        _engine = build_engine(db.url, echo=db.echo)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the async session factory (singleton)."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def create_tables(engine: AsyncEngine | None = None) -> None:
    """Create all tables if they don't exist (idempotent)."""
    from ideagraph.db.models import Base

    async with (engine or get_engine()).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_engine() -> None:
    """Dispose the engine and release connection pool."""
    global _engine, _session_factory
    if _engine:
        await _engine.dispose()
        _engine = None
        _session_factory = None
