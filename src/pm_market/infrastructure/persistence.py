"""MarketRepository — concrete implementation of MarketRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
Pool counters are bumped with in-place `x = x + :amount` updates so concurrent
stakes never lose an increment.

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from decimal import Decimal

from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.errors import MarketNotFoundError, OptionNotFoundError
from src.pm_market.domain.models import Market, MarketOption, NewMarket

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_MARKET_COLUMNS = """
    id, question, description, category, banner_url, close_time, creator_id,
    status, winning_option_id, total_liquidity, created_at
"""

_OPTION_COLUMNS = "id, market_id, text, total_staked"

_GET_MARKET_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE id = :market_id
""")

_GET_MARKET_FOR_UPDATE_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE id = :market_id
    FOR UPDATE
""")

_LIST_MARKETS_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE
        (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
        AND (CAST(:category AS TEXT) IS NULL OR category = CAST(:category AS TEXT))
    ORDER BY created_at DESC, id DESC
""")

_LIST_OPTIONS_SQL = text(f"""
    SELECT {_OPTION_COLUMNS}
    FROM market_options
    WHERE market_id IN :market_ids
    ORDER BY market_id, id
""").bindparams(bindparam("market_ids", expanding=True))

_COUNT_POSITIONS_SQL = text("""
    SELECT market_id, COUNT(*) AS total
    FROM positions
    WHERE market_id IN :market_ids
    GROUP BY market_id
""").bindparams(bindparam("market_ids", expanding=True))

_INSERT_MARKET_SQL = text(f"""
    INSERT INTO markets
        (question, description, category, banner_url, close_time, creator_id, status)
    VALUES
        (:question, :description, :category, :banner_url, :close_time, :creator_id, 'open')
    RETURNING {_MARKET_COLUMNS}
""")

_INSERT_OPTION_SQL = text(f"""
    INSERT INTO market_options (market_id, text, total_staked)
    VALUES (:market_id, :text, 0)
    RETURNING {_OPTION_COLUMNS}
""")

# Children before parent: positions -> options -> market.
_DELETE_POSITIONS_SQL = text("DELETE FROM positions WHERE market_id = :market_id")
_DELETE_OPTIONS_SQL = text("DELETE FROM market_options WHERE market_id = :market_id")
_DELETE_MARKET_SQL = text("DELETE FROM markets WHERE id = :market_id RETURNING id")

_ADD_OPTION_STAKE_SQL = text(f"""
    UPDATE market_options
    SET total_staked = total_staked + :amount
    WHERE id = :option_id AND market_id = :market_id
    RETURNING {_OPTION_COLUMNS}
""")

_ADD_LIQUIDITY_SQL = text(f"""
    UPDATE markets
    SET total_liquidity = total_liquidity + :amount,
        updated_at = NOW()
    WHERE id = :market_id
    RETURNING {_MARKET_COLUMNS}
""")

_MARK_RESOLVED_SQL = text(f"""
    UPDATE markets
    SET status = 'resolved',
        winning_option_id = :winning_option_id,
        updated_at = NOW()
    WHERE id = :market_id
    RETURNING {_MARKET_COLUMNS}
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_market(row: object) -> Market:
    return Market(
        id=row.id,  # type: ignore[attr-defined]
        question=row.question,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        category=row.category,  # type: ignore[attr-defined]
        banner_url=row.banner_url,  # type: ignore[attr-defined]
        close_time=row.close_time,  # type: ignore[attr-defined]
        creator_id=row.creator_id,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        winning_option_id=row.winning_option_id,  # type: ignore[attr-defined]
        total_liquidity=row.total_liquidity,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_option(row: object) -> MarketOption:
    return MarketOption(
        id=row.id,  # type: ignore[attr-defined]
        market_id=row.market_id,  # type: ignore[attr-defined]
        text=row.text,  # type: ignore[attr-defined]
        total_staked=row.total_staked,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MarketRepository:
    """Concrete repository for markets and their options."""

    async def get_market_by_id(
        self, db: AsyncSession, market_id: int, for_update: bool = False
    ) -> Market | None:
        sql = _GET_MARKET_FOR_UPDATE_SQL if for_update else _GET_MARKET_SQL
        result = await db.execute(sql, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def list_markets(
        self,
        db: AsyncSession,
        status: str | None,
        category: str | None,
    ) -> list[Market]:
        result = await db.execute(
            _LIST_MARKETS_SQL, {"status": status, "category": category}
        )
        return [_row_to_market(row) for row in result.fetchall()]

    async def list_options(
        self, db: AsyncSession, market_ids: list[int]
    ) -> list[MarketOption]:
        if not market_ids:
            return []
        result = await db.execute(_LIST_OPTIONS_SQL, {"market_ids": market_ids})
        return [_row_to_option(row) for row in result.fetchall()]

    async def count_positions(
        self, db: AsyncSession, market_ids: list[int]
    ) -> dict[int, int]:
        if not market_ids:
            return {}
        result = await db.execute(_COUNT_POSITIONS_SQL, {"market_ids": market_ids})
        return {row.market_id: row.total for row in result.fetchall()}

    async def create_market(
        self, db: AsyncSession, new_market: NewMarket
    ) -> tuple[Market, list[MarketOption]]:
        result = await db.execute(
            _INSERT_MARKET_SQL,
            {
                "question": new_market.question,
                "description": new_market.description,
                "category": new_market.category,
                "banner_url": new_market.banner_url,
                "close_time": new_market.close_time,
                "creator_id": new_market.creator_id,
            },
        )
        market = _row_to_market(result.fetchone())

        options: list[MarketOption] = []
        for option_text in new_market.option_texts:
            opt_result = await db.execute(
                _INSERT_OPTION_SQL, {"market_id": market.id, "text": option_text}
            )
            options.append(_row_to_option(opt_result.fetchone()))
        return market, options

    async def delete_market(self, db: AsyncSession, market_id: int) -> bool:
        await db.execute(_DELETE_POSITIONS_SQL, {"market_id": market_id})
        await db.execute(_DELETE_OPTIONS_SQL, {"market_id": market_id})
        result = await db.execute(_DELETE_MARKET_SQL, {"market_id": market_id})
        return result.fetchone() is not None

    async def add_option_stake(
        self, db: AsyncSession, market_id: int, option_id: int, amount: Decimal
    ) -> MarketOption:
        result = await db.execute(
            _ADD_OPTION_STAKE_SQL,
            {"market_id": market_id, "option_id": option_id, "amount": amount},
        )
        row = result.fetchone()
        if row is None:
            raise OptionNotFoundError(option_id, market_id)
        return _row_to_option(row)

    async def add_liquidity(
        self, db: AsyncSession, market_id: int, amount: Decimal
    ) -> Market:
        result = await db.execute(
            _ADD_LIQUIDITY_SQL, {"market_id": market_id, "amount": amount}
        )
        row = result.fetchone()
        if row is None:
            raise MarketNotFoundError(market_id)
        return _row_to_market(row)

    async def mark_resolved(
        self, db: AsyncSession, market_id: int, winning_option_id: int
    ) -> Market:
        result = await db.execute(
            _MARK_RESOLVED_SQL,
            {"market_id": market_id, "winning_option_id": winning_option_id},
        )
        row = result.fetchone()
        if row is None:
            raise MarketNotFoundError(market_id)
        return _row_to_market(row)
