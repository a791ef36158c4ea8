"""Shared test fixtures."""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.pm_clearing.application.service import SettlementService
from tests.fakes import (
    FakeMarketRepository,
    FakePositionRepository,
    FakeUserRepository,
    InMemoryStore,
)


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def session() -> AsyncMock:
    """Stand-in AsyncSession: records commit/rollback, executes nothing."""
    return AsyncMock()


@pytest.fixture
def engine_service(store: InMemoryStore) -> SettlementService:
    """SettlementService wired to the in-memory store."""
    return SettlementService(
        market_repo=FakeMarketRepository(store),
        user_repo=FakeUserRepository(store),
        position_repo=FakePositionRepository(store),
        close_losing_positions=True,
    )
