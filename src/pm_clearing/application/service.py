"""SettlementService — stake, resolve, reconcile-on-read, claim.

Each money-moving operation is one transaction:
  - the market row is locked (SELECT ... FOR UPDATE) first, serializing
    stakes, resolution and claims on the same market
  - stake and claim additionally lock the user row
  - every precondition is checked before the first write; any exception
    rolls the whole unit back, so a rejection leaves zero mutations

Repositories are injected (default: SQL implementations); the session is
passed per call by the router.
"""

import logging
from dataclasses import replace

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_account.domain.repository import (
    PositionRepositoryProtocol,
    UserRepositoryProtocol,
)
from src.pm_account.infrastructure.persistence import UserRepository
from src.pm_account.infrastructure.positions_repository import PositionsRepository
from src.pm_clearing.application.schemas import (
    ClaimRequest,
    ClaimResponse,
    PositionListResponse,
    PositionOut,
    ResolveRequest,
    ResolveResponse,
    StakeRequest,
)
from src.pm_clearing.domain.payout import compute_claim
from src.pm_clearing.domain.settlement import classify_position
from src.pm_common.amounts import format_amount, to_amount
from src.pm_common.datetime_utils import utc_now
from src.pm_common.enums import PositionStatus
from src.pm_common.errors import (
    InsufficientBalanceError,
    MarketAlreadyResolvedError,
    MarketClosedError,
    MarketNotFoundError,
    MarketNotResolvedError,
    NoUnclaimedPositionsError,
    OptionNotFoundError,
)
from src.pm_market.application.schemas import MarketOut
from src.pm_market.domain.models import MarketWithDetail
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository

logger = logging.getLogger(__name__)


class SettlementService:
    def __init__(
        self,
        market_repo: MarketRepositoryProtocol | None = None,
        user_repo: UserRepositoryProtocol | None = None,
        position_repo: PositionRepositoryProtocol | None = None,
        close_losing_positions: bool | None = None,
    ) -> None:
        self._markets: MarketRepositoryProtocol = market_repo or MarketRepository()
        self._users: UserRepositoryProtocol = user_repo or UserRepository()
        self._positions: PositionRepositoryProtocol = position_repo or PositionsRepository()
        self._close_losing = (
            settings.CLAIM_CLOSES_LOSING_POSITIONS
            if close_losing_positions is None
            else close_losing_positions
        )

    # ------------------------------------------------------------------
    # Stake
    # ------------------------------------------------------------------

    async def stake(self, db: AsyncSession, req: StakeRequest) -> PositionOut:
        amount = to_amount(req.amount)
        try:
            market = await self._markets.get_market_by_id(db, req.market_id, for_update=True)
            if market is None:
                raise MarketNotFoundError(req.market_id)
            # Stored status may still say open after close_time has passed.
            if not market.is_open_at(utc_now()):
                raise MarketClosedError(market.id)

            options = await self._markets.list_options(db, [market.id])
            if not any(o.id == req.option_id for o in options):
                raise OptionNotFoundError(req.option_id, market.id)

            user = await self._users.get_or_create_user(db, req.user_address, for_update=True)
            if user.balance < amount:
                raise InsufficientBalanceError(amount, user.balance)

            await self._users.debit(db, user.address, amount)
            position = await self._positions.create_position(
                db, market.id, req.option_id, user.address, amount
            )
            await self._markets.add_option_stake(db, market.id, req.option_id, amount)
            await self._markets.add_liquidity(db, market.id, amount)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Stake: user=%s market=%s option=%s amount=%s position=%s",
            position.user_address,
            position.market_id,
            position.option_id,
            format_amount(amount),
            position.id,
        )
        return PositionOut.from_domain(position)

    # ------------------------------------------------------------------
    # Resolve
    # ------------------------------------------------------------------

    async def resolve(self, db: AsyncSession, req: ResolveRequest) -> ResolveResponse:
        try:
            market = await self._markets.get_market_by_id(db, req.market_id, for_update=True)
            if market is None:
                raise MarketNotFoundError(req.market_id)

            options = await self._markets.list_options(db, [market.id])
            if not any(o.id == req.winning_option_id for o in options):
                raise OptionNotFoundError(req.winning_option_id, market.id)

            if (
                market.is_resolved
                and market.winning_option_id is not None
                and market.winning_option_id != req.winning_option_id
            ):
                raise MarketAlreadyResolvedError(market.id, market.winning_option_id)

            market = await self._markets.mark_resolved(db, market.id, req.winning_option_id)
            settled = await self._positions.settle_market_positions(
                db, market.id, req.winning_option_id, utc_now()
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        won = sum(1 for p in settled if p.status == PositionStatus.WON)
        logger.info(
            "Resolved market %s: winner=%s, settled %d positions (won=%d, lost=%d)",
            market.id,
            req.winning_option_id,
            len(settled),
            won,
            len(settled) - won,
        )
        detail = MarketWithDetail(market=market, options=options, total_positions=len(settled))
        return ResolveResponse(
            market=MarketOut.from_domain(detail, utc_now()),
            settled_positions=len(settled),
            won=won,
            lost=len(settled) - won,
        )

    # ------------------------------------------------------------------
    # Positions (reconcile on read)
    # ------------------------------------------------------------------

    async def list_positions(
        self, db: AsyncSession, user_address: str
    ) -> PositionListResponse:
        """List a user's positions; pending ones on resolved markets are settled first."""
        items: list[PositionOut] = []
        reconciled = 0
        try:
            views = await self._positions.list_by_user(db, user_address)
            now = utc_now()
            for view in views:
                position = view.position
                if view.needs_settlement:
                    status = classify_position(position.option_id, view.winning_option_id)
                    updated = await self._positions.settle_position(
                        db, position.id, status.value, now
                    )
                    # None: a concurrent resolve stamped it first, same classification.
                    position = updated or replace(
                        position, status=status.value, settled_at=now
                    )
                    reconciled += 1
                items.append(PositionOut.from_domain(position))
            if reconciled:
                await db.commit()
        except Exception:
            await db.rollback()
            raise

        if reconciled:
            logger.info(
                "Reconciled %d pending positions for user %s", reconciled, user_address
            )
        return PositionListResponse(items=items, total=len(items), reconciled=reconciled)

    # ------------------------------------------------------------------
    # Claim
    # ------------------------------------------------------------------

    async def claim(self, db: AsyncSession, req: ClaimRequest) -> ClaimResponse:
        balance: str | None = None
        try:
            market = await self._markets.get_market_by_id(db, req.market_id, for_update=True)
            if market is None:
                raise MarketNotFoundError(req.market_id)
            if not market.is_resolved:
                raise MarketNotResolvedError(market.id)

            positions = await self._positions.list_unclaimed_for_update(
                db, market.id, req.user_address
            )
            if not positions:
                raise NoUnclaimedPositionsError(market.id, req.user_address)

            options = await self._markets.list_options(db, [market.id])
            winning = next((o for o in options if o.id == market.winning_option_id), None)
            outcome = compute_claim(
                positions,
                market.winning_option_id,
                winning.total_staked if winning else None,
                market.total_liquidity,
                close_losing_positions=self._close_losing,
            )

            await self._positions.mark_claimed(db, outcome.claimed_position_ids)
            if outcome.has_winners:
                await self._users.get_or_create_user(db, req.user_address, for_update=True)
                user = await self._users.credit(db, req.user_address, outcome.payout)
                balance = format_amount(user.balance)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        payout = format_amount(outcome.payout) if outcome.has_winners else "0"
        logger.info(
            "Claim: user=%s market=%s payout=%s closed=%d positions",
            req.user_address,
            market.id,
            payout,
            len(outcome.claimed_position_ids),
        )
        return ClaimResponse(
            market_id=market.id,
            user_address=req.user_address,
            payout=payout,
            claimed_position_ids=outcome.claimed_position_ids,
            balance=balance,
        )
