# agendabot/db/session.py
from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from agendabot import config

_engine: AsyncEngine | None = None


def engine() -> AsyncEngine:
    """
    Lazily create a singleton AsyncEngine from config.DATABASE_URL.
    Default DSN is 'mysql+aiomysql' with utf8mb4 (accented patient names).
    """
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            config.DATABASE_URL,
            pool_pre_ping=True,
            pool_size=5,
            max_overflow=0,
            echo=False,
        )
    return _engine


async def dispose() -> None:
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None
