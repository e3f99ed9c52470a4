"""Standalone Sessions — DB sessions for the CLI and scripts outside FastAPI.

Invariants:
    - Independent of the request-scoped DatabaseSessionManager
    - session_scope disposes its engine on exit; nothing leaks past the block
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker


@asynccontextmanager
async def session_scope(database_url: str) -> AsyncIterator[AsyncSession]:
    """One session on a private engine; rolled back on error, engine disposed after."""
    engine = create_async_engine(database_url, echo=False)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
    finally:
        await engine.dispose()
