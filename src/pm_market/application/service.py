"""MarketApplicationService — thin composition layer.

Reads run without an explicit transaction. create_market and delete_market
commit on success and roll back on any error; the caller (router) passes the
db session.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_common.datetime_utils import ensure_utc, utc_now
from src.pm_common.errors import MarketNotFoundError
from src.pm_market.application.schemas import (
    CreateMarketRequest,
    DeleteMarketResponse,
    MarketListResponse,
    MarketOut,
)
from src.pm_market.domain.models import Market, MarketWithDetail, NewMarket
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository

logger = logging.getLogger(__name__)


async def enrich_markets(
    repo: MarketRepositoryProtocol, db: AsyncSession, markets: list[Market]
) -> list[MarketWithDetail]:
    """Attach options and position counts with one query each, not one per market."""
    ids = [m.id for m in markets]
    options = await repo.list_options(db, ids)
    counts = await repo.count_positions(db, ids)
    return [
        MarketWithDetail(
            market=m,
            options=[o for o in options if o.market_id == m.id],
            total_positions=counts.get(m.id, 0),
        )
        for m in markets
    ]


class MarketApplicationService:
    def __init__(
        self,
        repo: MarketRepositoryProtocol | None = None,
        default_category: str | None = None,
    ) -> None:
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()
        self._default_category = default_category or settings.DEFAULT_MARKET_CATEGORY

    async def list_markets(
        self,
        db: AsyncSession,
        status: str | None,
        category: str | None,
    ) -> MarketListResponse:
        markets = await self._repo.list_markets(db, status, category)
        details = await enrich_markets(self._repo, db, markets)
        now = utc_now()
        items = [MarketOut.from_domain(d, now) for d in details]
        return MarketListResponse(items=items, total=len(items))

    async def get_market(self, db: AsyncSession, market_id: int) -> MarketOut:
        market = await self._repo.get_market_by_id(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        [detail] = await enrich_markets(self._repo, db, [market])
        return MarketOut.from_domain(detail, utc_now())

    async def create_market(
        self, db: AsyncSession, req: CreateMarketRequest
    ) -> MarketOut:
        new_market = NewMarket(
            question=req.question,
            description=req.description or "",
            category=req.category or self._default_category,
            banner_url=req.banner_url or None,
            close_time=ensure_utc(req.close_time),
            creator_id=req.creator_id,
            option_texts=req.options,
        )
        try:
            market, options = await self._repo.create_market(db, new_market)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Created market %s with %d options (closes %s)",
            market.id,
            len(options),
            market.close_time.isoformat(),
        )
        detail = MarketWithDetail(market=market, options=options, total_positions=0)
        return MarketOut.from_domain(detail, utc_now())

    async def delete_market(
        self, db: AsyncSession, market_id: int
    ) -> DeleteMarketResponse:
        try:
            deleted = await self._repo.delete_market(db, market_id)
            if not deleted:
                raise MarketNotFoundError(market_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Deleted market %s with its options and positions", market_id)
        return DeleteMarketResponse(market_id=market_id, deleted=True)
