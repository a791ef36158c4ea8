"""Pool and lifecycle invariant verification.

INV-1: markets.total_liquidity == SUM(positions.amount) per market
INV-2: market_options.total_staked == SUM(positions.amount) per option
INV-3: no position is pending on a resolved market, none settled on an open one
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_LIQUIDITY_MISMATCH_SQL = text("""
    SELECT m.id, m.total_liquidity, COALESCE(SUM(p.amount), 0) AS staked
    FROM markets m
    LEFT JOIN positions p ON p.market_id = m.id
    GROUP BY m.id, m.total_liquidity
    HAVING m.total_liquidity <> COALESCE(SUM(p.amount), 0)
    ORDER BY m.id
""")

_OPTION_MISMATCH_SQL = text("""
    SELECT o.id, o.market_id, o.total_staked, COALESCE(SUM(p.amount), 0) AS staked
    FROM market_options o
    LEFT JOIN positions p ON p.option_id = o.id
    GROUP BY o.id, o.market_id, o.total_staked
    HAVING o.total_staked <> COALESCE(SUM(p.amount), 0)
    ORDER BY o.id
""")

_STATUS_MISMATCH_SQL = text("""
    SELECT p.id, p.market_id, p.status, m.status AS market_status
    FROM positions p
    JOIN markets m ON m.id = p.market_id
    WHERE (m.status = 'resolved' AND p.status = 'pending')
       OR (m.status = 'open' AND p.status <> 'pending')
    ORDER BY p.id
""")

_COUNT_MARKETS_SQL = text("SELECT COUNT(*) FROM markets")


async def count_markets(db: AsyncSession) -> int:
    return (await db.execute(_COUNT_MARKETS_SQL)).scalar_one()


async def verify_pool_invariants(db: AsyncSession) -> list[str]:
    """Check INV-1/2/3 across all markets. Returns list of violation strings."""
    violations: list[str] = []

    for row in (await db.execute(_LIQUIDITY_MISMATCH_SQL)).fetchall():
        violations.append(
            f"INV-1 violated: market={row.id} total_liquidity={row.total_liquidity} "
            f"!= sum(position.amount)={row.staked}"
        )

    for row in (await db.execute(_OPTION_MISMATCH_SQL)).fetchall():
        violations.append(
            f"INV-2 violated: option={row.id} (market={row.market_id}) "
            f"total_staked={row.total_staked} != sum(position.amount)={row.staked}"
        )

    for row in (await db.execute(_STATUS_MISMATCH_SQL)).fetchall():
        violations.append(
            f"INV-3 violated: position={row.id} status={row.status} "
            f"on {row.market_status} market={row.market_id}"
        )

    for msg in violations:
        logger.error(msg)
    if not violations:
        logger.debug("Pool invariants OK")
    return violations
