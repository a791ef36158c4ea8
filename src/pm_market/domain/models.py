"""Domain models for pm_market — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.pm_common.enums import MarketStatus


@dataclass
class Market:
    id: int
    question: str
    description: str
    category: str
    banner_url: str | None
    close_time: datetime
    creator_id: str
    status: str
    winning_option_id: int | None
    total_liquidity: Decimal
    created_at: datetime

    def is_open_at(self, now: datetime) -> bool:
        """A market accepts stakes only while stored open AND before close_time."""
        return self.status == MarketStatus.OPEN and now < self.close_time

    @property
    def is_resolved(self) -> bool:
        return self.status == MarketStatus.RESOLVED


@dataclass
class MarketOption:
    id: int
    market_id: int
    text: str
    total_staked: Decimal


@dataclass
class MarketWithDetail:
    """Market enriched with its ordered options and a position count."""

    market: Market
    options: list[MarketOption] = field(default_factory=list)
    total_positions: int = 0

    def option(self, option_id: int | None) -> MarketOption | None:
        for o in self.options:
            if o.id == option_id:
                return o
        return None

    @property
    def winning_option(self) -> MarketOption | None:
        return self.option(self.market.winning_option_id)


@dataclass
class NewMarket:
    """Validated input for market creation."""

    question: str
    description: str
    category: str
    banner_url: str | None
    close_time: datetime
    creator_id: str
    option_texts: list[str]
