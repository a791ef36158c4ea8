"""Fixed-point amount utilities.

All balances, stakes, pools and payouts are Decimal with 6 fractional digits.
No float anywhere on the money path. Amounts cross the API boundary as strings.
"""

from decimal import ROUND_HALF_UP, Decimal

AMOUNT_PLACES = 6
AMOUNT_QUANTUM = Decimal(1).scaleb(-AMOUNT_PLACES)  # Decimal('0.000001')
ZERO = Decimal("0").quantize(AMOUNT_QUANTUM)


def to_amount(value: Decimal | int | str) -> Decimal:
    """Quantize to 6 fractional digits, half-up: Decimal('1.0000005') -> Decimal('1.000001')."""
    return Decimal(value).quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal | int | str) -> str:
    """Render as a fixed 6-digit string: 100 -> '100.000000'."""
    return f"{to_amount(value):f}"
