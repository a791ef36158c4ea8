"""Domain models for pm_account — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from src.pm_common.enums import MarketStatus, PositionStatus


@dataclass
class User:
    address: str
    balance: Decimal          # 6 fractional digits
    reputation: int
    holdings: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None


@dataclass
class Position:
    id: int
    market_id: int
    option_id: int
    user_address: str
    amount: Decimal           # 6 fractional digits
    status: str               # PositionStatus value
    claimed: bool
    created_at: datetime
    settled_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == PositionStatus.PENDING


@dataclass
class PositionWithMarketState:
    """A position joined with its market's lifecycle fields, for reconcile-on-read."""

    position: Position
    market_status: str
    winning_option_id: int | None

    @property
    def needs_settlement(self) -> bool:
        return self.position.is_pending and self.market_status == MarketStatus.RESOLVED
