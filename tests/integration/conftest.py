"""Integration-test fixtures.

Requires a migrated PostgreSQL reachable at settings.DATABASE_URL
(`alembic upgrade head`). When it is not reachable every test here is skipped.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool (created at import time) remains valid across
the entire test session.
"""

import asyncio

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from src.main import app
from src.pm_common.database import engine


async def _ping() -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1 FROM markets LIMIT 1"))


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    try:
        await asyncio.wait_for(_ping(), timeout=5)
    except (OSError, TimeoutError, SQLAlchemyError) as exc:
        pytest.skip(f"database not available: {exc}")
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await engine.dispose()
