from __future__ import annotations

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.db import Base, build_engine, build_session_factory


@pytest_asyncio.fixture
async def session_factory() -> async_sessionmaker[AsyncSession]:
    """In-memory state store with the full schema, shared by every session of a test."""
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield build_session_factory(engine)
    finally:
        await engine.dispose()
