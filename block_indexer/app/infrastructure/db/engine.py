from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from block_indexer.app.config import settings


def create_app_async_engine(*, url: str | None = None, echo: bool = False) -> AsyncEngine:
    """
    AsyncEngine for the tasks. Protocol tables live in the database named by
    DATABASE_URL (or the assembled Postgres DSN) unless `url` overrides it.
    """
    return create_async_engine(
        url or settings.database_url,  # postgresql+asyncpg://...
        echo=echo,
        pool_pre_ping=True,
    )
