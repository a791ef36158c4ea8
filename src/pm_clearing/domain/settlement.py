"""Market settlement — classify positions against the declared winner.

Settlement moves no money; it only stamps each position won or lost.
Balances change later, at claim time (see payout.py).
"""

from src.pm_common.enums import PositionStatus


def classify_position(option_id: int, winning_option_id: int | None) -> PositionStatus:
    """won iff the position backs the winning option, else lost."""
    if winning_option_id is not None and option_id == winning_option_id:
        return PositionStatus.WON
    return PositionStatus.LOST
