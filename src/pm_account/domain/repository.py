"""Repository Protocols — dependency inversion for testability.

Unit tests inject a mock (or an in-memory fake) that conforms to these Protocols.
Infrastructure layer provides the real implementations.
"""

from datetime import datetime
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.models import Position, PositionWithMarketState, User


class UserRepositoryProtocol(Protocol):
    async def get_user(self, db: AsyncSession, address: str) -> User | None: ...

    async def get_or_create_user(
        self, db: AsyncSession, address: str, for_update: bool = False
    ) -> User: ...

    async def debit(self, db: AsyncSession, address: str, amount: Decimal) -> User: ...

    async def credit(self, db: AsyncSession, address: str, amount: Decimal) -> User: ...


class PositionRepositoryProtocol(Protocol):
    async def create_position(
        self,
        db: AsyncSession,
        market_id: int,
        option_id: int,
        user_address: str,
        amount: Decimal,
    ) -> Position: ...

    async def list_by_user(
        self, db: AsyncSession, user_address: str
    ) -> list[PositionWithMarketState]: ...

    async def list_unclaimed_for_update(
        self, db: AsyncSession, market_id: int, user_address: str
    ) -> list[Position]: ...

    async def settle_market_positions(
        self,
        db: AsyncSession,
        market_id: int,
        winning_option_id: int,
        settled_at: datetime,
    ) -> list[Position]: ...

    async def settle_position(
        self,
        db: AsyncSession,
        position_id: int,
        status: str,
        settled_at: datetime,
    ) -> Position | None: ...

    async def mark_claimed(self, db: AsyncSession, position_ids: list[int]) -> int: ...
