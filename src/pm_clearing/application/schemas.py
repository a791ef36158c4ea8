"""Pydantic schemas for the settlement API (stake, resolve, positions, claim).

Request bodies accept the camelCase wire names (marketId, optionId,
userAddress, winningOptionId) as well as snake_case.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.pm_account.domain.models import Position
from src.pm_common.amounts import format_amount
from src.pm_market.application.schemas import MarketOut

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class _CamelRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StakeRequest(_CamelRequest):
    market_id: int
    option_id: int
    user_address: str = Field(..., min_length=1, max_length=128)
    amount: Decimal = Field(..., gt=0, max_digits=20, decimal_places=6)


class ResolveRequest(_CamelRequest):
    market_id: int
    winning_option_id: int


class ClaimRequest(_CamelRequest):
    market_id: int
    user_address: str = Field(..., min_length=1, max_length=128)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PositionOut(BaseModel):
    id: int
    market_id: int
    option_id: int
    user_address: str
    amount: str
    status: str
    claimed: bool
    created_at: str
    settled_at: str | None

    @classmethod
    def from_domain(cls, p: Position) -> "PositionOut":
        return cls(
            id=p.id,
            market_id=p.market_id,
            option_id=p.option_id,
            user_address=p.user_address,
            amount=format_amount(p.amount),
            status=p.status,
            claimed=p.claimed,
            created_at=p.created_at.isoformat(),
            settled_at=p.settled_at.isoformat() if p.settled_at else None,
        )


class PositionListResponse(BaseModel):
    items: list[PositionOut]
    total: int
    reconciled: int


class ResolveResponse(BaseModel):
    market: MarketOut
    settled_positions: int
    won: int
    lost: int


class ClaimResponse(BaseModel):
    market_id: int
    user_address: str
    payout: str
    claimed_position_ids: list[int]
    balance: str | None
