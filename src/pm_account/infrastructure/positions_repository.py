# src/pm_account/infrastructure/positions_repository.py
"""Positions persistence: stake inserts, settlement stamps, claim flags."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.models import Position, PositionWithMarketState

_POSITION_COLUMNS = """
    id, market_id, option_id, user_address, amount, status, claimed,
    created_at, settled_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO positions (market_id, option_id, user_address, amount, status, claimed)
    VALUES (:market_id, :option_id, :user_address, :amount, 'pending', FALSE)
    RETURNING {_POSITION_COLUMNS}
""")

_LIST_BY_USER_SQL = text("""
    SELECT p.id, p.market_id, p.option_id, p.user_address, p.amount, p.status,
           p.claimed, p.created_at, p.settled_at,
           m.status AS market_status, m.winning_option_id
    FROM positions p
    JOIN markets m ON m.id = p.market_id
    WHERE p.user_address = :user_address
    ORDER BY p.created_at DESC, p.id DESC
""")

_LIST_UNCLAIMED_FOR_UPDATE_SQL = text(f"""
    SELECT {_POSITION_COLUMNS}
    FROM positions
    WHERE market_id = :market_id
      AND user_address = :user_address
      AND claimed = FALSE
    ORDER BY id
    FOR UPDATE
""")

# won iff the position's option is the winner; every position is re-stamped.
_SETTLE_MARKET_SQL = text(f"""
    UPDATE positions
    SET status = CASE WHEN option_id = :winning_option_id THEN 'won' ELSE 'lost' END,
        settled_at = :settled_at
    WHERE market_id = :market_id
    RETURNING {_POSITION_COLUMNS}
""")

_SETTLE_ONE_SQL = text(f"""
    UPDATE positions
    SET status = :status,
        settled_at = :settled_at
    WHERE id = :position_id AND status = 'pending'
    RETURNING {_POSITION_COLUMNS}
""")

_MARK_CLAIMED_SQL = text("""
    UPDATE positions
    SET claimed = TRUE
    WHERE id IN :position_ids AND claimed = FALSE
""").bindparams(bindparam("position_ids", expanding=True))


def _row_to_position(row: object) -> Position:
    return Position(
        id=row.id,  # type: ignore[attr-defined]
        market_id=row.market_id,  # type: ignore[attr-defined]
        option_id=row.option_id,  # type: ignore[attr-defined]
        user_address=row.user_address,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        claimed=row.claimed,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        settled_at=row.settled_at,  # type: ignore[attr-defined]
    )


class PositionsRepository:
    async def create_position(
        self,
        db: AsyncSession,
        market_id: int,
        option_id: int,
        user_address: str,
        amount: Decimal,
    ) -> Position:
        row = (
            await db.execute(
                _INSERT_SQL,
                {
                    "market_id": market_id,
                    "option_id": option_id,
                    "user_address": user_address,
                    "amount": amount,
                },
            )
        ).fetchone()
        return _row_to_position(row)

    async def list_by_user(
        self, db: AsyncSession, user_address: str
    ) -> list[PositionWithMarketState]:
        rows = (
            await db.execute(_LIST_BY_USER_SQL, {"user_address": user_address})
        ).fetchall()
        return [
            PositionWithMarketState(
                position=_row_to_position(r),
                market_status=r.market_status,
                winning_option_id=r.winning_option_id,
            )
            for r in rows
        ]

    async def list_unclaimed_for_update(
        self, db: AsyncSession, market_id: int, user_address: str
    ) -> list[Position]:
        rows = (
            await db.execute(
                _LIST_UNCLAIMED_FOR_UPDATE_SQL,
                {"market_id": market_id, "user_address": user_address},
            )
        ).fetchall()
        return [_row_to_position(r) for r in rows]

    async def settle_market_positions(
        self,
        db: AsyncSession,
        market_id: int,
        winning_option_id: int,
        settled_at: datetime,
    ) -> list[Position]:
        rows = (
            await db.execute(
                _SETTLE_MARKET_SQL,
                {
                    "market_id": market_id,
                    "winning_option_id": winning_option_id,
                    "settled_at": settled_at,
                },
            )
        ).fetchall()
        return [_row_to_position(r) for r in rows]

    async def settle_position(
        self,
        db: AsyncSession,
        position_id: int,
        status: str,
        settled_at: datetime,
    ) -> Position | None:
        row = (
            await db.execute(
                _SETTLE_ONE_SQL,
                {"position_id": position_id, "status": status, "settled_at": settled_at},
            )
        ).fetchone()
        return _row_to_position(row) if row else None

    async def mark_claimed(self, db: AsyncSession, position_ids: list[int]) -> int:
        if not position_ids:
            return 0
        result = await db.execute(_MARK_CLAIMED_SQL, {"position_ids": position_ids})
        return result.rowcount
