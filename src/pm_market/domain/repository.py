# src/pm_market/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock (or an in-memory fake) that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_market.domain.models import Market, MarketOption, NewMarket


class MarketRepositoryProtocol(Protocol):
    async def list_markets(
        self,
        db: AsyncSession,
        status: str | None,
        category: str | None,
    ) -> list[Market]: ...

    async def get_market_by_id(
        self,
        db: AsyncSession,
        market_id: int,
        for_update: bool = False,
    ) -> Market | None: ...

    async def list_options(
        self,
        db: AsyncSession,
        market_ids: list[int],
    ) -> list[MarketOption]: ...

    async def count_positions(
        self,
        db: AsyncSession,
        market_ids: list[int],
    ) -> dict[int, int]: ...

    async def create_market(
        self,
        db: AsyncSession,
        new_market: NewMarket,
    ) -> tuple[Market, list[MarketOption]]: ...

    async def delete_market(
        self,
        db: AsyncSession,
        market_id: int,
    ) -> bool: ...

    async def add_option_stake(
        self,
        db: AsyncSession,
        market_id: int,
        option_id: int,
        amount: Decimal,
    ) -> MarketOption: ...

    async def add_liquidity(
        self,
        db: AsyncSession,
        market_id: int,
        amount: Decimal,
    ) -> Market: ...

    async def mark_resolved(
        self,
        db: AsyncSession,
        market_id: int,
        winning_option_id: int,
    ) -> Market: ...
