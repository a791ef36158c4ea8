"""Pydantic schemas for pm_market API requests and responses.

Request bodies accept camelCase (closeTime, creatorId, bannerUrl) as well as
snake_case field names. Amounts are serialized as fixed 6-digit strings.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.pm_common.amounts import format_amount
from src.pm_market.domain.models import MarketOption, MarketWithDetail

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateMarketRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    question: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    category: str | None = Field(None, max_length=64)
    banner_url: str | None = None
    close_time: datetime
    creator_id: str = Field(..., min_length=1, max_length=128)
    options: list[str] = Field(..., min_length=1, description="Ordered option labels")

    @field_validator("options")
    @classmethod
    def _labels_not_blank(cls, labels: list[str]) -> list[str]:
        cleaned = [label.strip() for label in labels]
        if any(not label for label in cleaned):
            raise ValueError("option labels must not be blank")
        return cleaned


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class OptionOut(BaseModel):
    id: int
    market_id: int
    text: str
    total_staked: str

    @classmethod
    def from_domain(cls, o: MarketOption) -> "OptionOut":
        return cls(
            id=o.id,
            market_id=o.market_id,
            text=o.text,
            total_staked=format_amount(o.total_staked),
        )


class MarketOut(BaseModel):
    id: int
    question: str
    description: str
    category: str
    banner_url: str | None
    close_time: str
    creator_id: str
    status: str
    winning_option_id: int | None
    total_liquidity: str
    created_at: str
    is_open: bool
    options: list[OptionOut]
    total_positions: int

    @classmethod
    def from_domain(cls, detail: MarketWithDetail, now: datetime) -> "MarketOut":
        m = detail.market
        return cls(
            id=m.id,
            question=m.question,
            description=m.description,
            category=m.category,
            banner_url=m.banner_url,
            close_time=m.close_time.isoformat(),
            creator_id=m.creator_id,
            status=m.status,
            winning_option_id=m.winning_option_id,
            total_liquidity=format_amount(m.total_liquidity),
            created_at=m.created_at.isoformat(),
            is_open=m.is_open_at(now),
            options=[OptionOut.from_domain(o) for o in detail.options],
            total_positions=detail.total_positions,
        )


class MarketListResponse(BaseModel):
    items: list[MarketOut]
    total: int


class DeleteMarketResponse(BaseModel):
    market_id: int
    deleted: bool
