"""Global enums — must match DB CHECK constraints exactly.

Ref: alembic/versions/003_create_markets.py, 005_create_positions.py
"""

from enum import Enum


class MarketStatus(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"


class PositionStatus(str, Enum):
    PENDING = "pending"
    WON = "won"
    LOST = "lost"
