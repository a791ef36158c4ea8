"""Parimutuel claim payout.

Every winning position receives its share of the winning pool applied to the
WHOLE market pool (all options combined):

    payout = amount / winning_pool * total_liquidity

A zero or missing winning pool is replaced by 1. That guard only avoids a
division by zero; it is not a pricing rule.

Per-position payouts are summed unrounded and the total is quantized once to
6 fractional digits.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from src.pm_account.domain.models import Position
from src.pm_common.amounts import to_amount

_ONE = Decimal(1)


@dataclass
class ClaimOutcome:
    payout: Decimal
    winning_position_ids: list[int] = field(default_factory=list)
    claimed_position_ids: list[int] = field(default_factory=list)

    @property
    def has_winners(self) -> bool:
        return bool(self.winning_position_ids)


def position_payout(
    amount: Decimal, winning_pool: Decimal, total_liquidity: Decimal
) -> Decimal:
    """Unrounded share of the market pool for one winning stake."""
    # Multiply first: same value as amount / pool * total, fewer rounding steps.
    return amount * total_liquidity / winning_pool


def compute_claim(
    positions: Sequence[Position],
    winning_option_id: int | None,
    winning_pool: Decimal | None,
    total_liquidity: Decimal,
    close_losing_positions: bool = True,
) -> ClaimOutcome:
    """Work out the payout and which positions a claim closes.

    No winners in the selection: every selected position is closed, payout 0.
    Winners present: winners are paid and closed. Losers in the same selection
    are closed too when close_losing_positions is set; otherwise they stay
    unclaimed and a later claim closes them at zero payout.
    """
    winners = [p for p in positions if p.option_id == winning_option_id]
    if not winners:
        return ClaimOutcome(
            payout=to_amount(0),
            claimed_position_ids=[p.id for p in positions],
        )

    divisor = winning_pool if winning_pool else _ONE
    raw = sum(
        (position_payout(p.amount, divisor, total_liquidity) for p in winners),
        Decimal(0),
    )
    winner_ids = [p.id for p in winners]
    claimed = [p.id for p in positions] if close_losing_positions else list(winner_ids)
    return ClaimOutcome(
        payout=to_amount(raw),
        winning_position_ids=winner_ids,
        claimed_position_ids=claimed,
    )
