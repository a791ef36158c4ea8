"""In-memory repositories conforming to the repository Protocols.

They let the settlement engine run end-to-end in unit tests with an
AsyncMock standing in for the session. Every read returns a copy so the
service cannot mutate stored state except through repository calls.
"""

import itertools
from dataclasses import replace
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from src.pm_account.domain.models import Position, PositionWithMarketState, User
from src.pm_common.datetime_utils import utc_now
from src.pm_common.errors import (
    InsufficientBalanceError,
    MarketNotFoundError,
    OptionNotFoundError,
    UserNotFoundError,
)
from src.pm_market.domain.models import Market, MarketOption, NewMarket


class InMemoryStore:
    def __init__(
        self,
        default_balance: Decimal = Decimal("1000.000000"),
        default_reputation: int = 100,
    ) -> None:
        self.default_balance = default_balance
        self.default_reputation = default_reputation
        self.users: dict[str, User] = {}
        self.markets: dict[int, Market] = {}
        self.options: dict[int, MarketOption] = {}
        self.positions: dict[int, Position] = {}
        self.locked: list[tuple[str, Any]] = []
        self._ids = itertools.count(1)

    def next_id(self) -> int:
        return next(self._ids)

    # -- seeding helpers ----------------------------------------------------

    def add_user(self, address: str, balance: str = "1000.000000") -> User:
        user = User(address=address, balance=Decimal(balance), reputation=100)
        self.users[address] = user
        return user

    def add_market(
        self,
        option_texts: tuple[str, ...] = ("A", "B"),
        close_time: datetime | None = None,
        status: str = "open",
        question: str = "Who wins?",
    ) -> tuple[Market, list[MarketOption]]:
        market = Market(
            id=self.next_id(),
            question=question,
            description="",
            category="Cricket",
            banner_url=None,
            close_time=close_time or utc_now() + timedelta(days=1),
            creator_id="creator",
            status=status,
            winning_option_id=None,
            total_liquidity=Decimal("0"),
            created_at=utc_now(),
        )
        self.markets[market.id] = market
        options = []
        for text in option_texts:
            option = MarketOption(
                id=self.next_id(), market_id=market.id, text=text, total_staked=Decimal("0")
            )
            self.options[option.id] = option
            options.append(option)
        return market, options

    # -- derived views for assertions ---------------------------------------

    def positions_of(self, market_id: int) -> list[Position]:
        return [p for p in self.positions.values() if p.market_id == market_id]

    def options_of(self, market_id: int) -> list[MarketOption]:
        return [o for o in self.options.values() if o.market_id == market_id]


class FakeMarketRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def list_markets(self, db, status, category) -> list[Market]:
        markets = [
            replace(m)
            for m in self.store.markets.values()
            if (status is None or m.status == status)
            and (category is None or m.category == category)
        ]
        return sorted(markets, key=lambda m: (m.created_at, m.id), reverse=True)

    async def get_market_by_id(self, db, market_id, for_update=False) -> Market | None:
        market = self.store.markets.get(market_id)
        if market is None:
            return None
        if for_update:
            self.store.locked.append(("market", market_id))
        return replace(market)

    async def list_options(self, db, market_ids) -> list[MarketOption]:
        return [replace(o) for o in self.store.options.values() if o.market_id in market_ids]

    async def count_positions(self, db, market_ids) -> dict[int, int]:
        counts: dict[int, int] = {}
        for p in self.store.positions.values():
            if p.market_id in market_ids:
                counts[p.market_id] = counts.get(p.market_id, 0) + 1
        return counts

    async def create_market(self, db, new_market: NewMarket):
        market, options = self.store.add_market(
            option_texts=tuple(new_market.option_texts),
            close_time=new_market.close_time,
            question=new_market.question,
        )
        market.description = new_market.description
        market.category = new_market.category
        market.banner_url = new_market.banner_url
        market.creator_id = new_market.creator_id
        return replace(market), [replace(o) for o in options]

    async def delete_market(self, db, market_id) -> bool:
        for pid in [p.id for p in self.store.positions_of(market_id)]:
            del self.store.positions[pid]
        for oid in [o.id for o in self.store.options_of(market_id)]:
            del self.store.options[oid]
        return self.store.markets.pop(market_id, None) is not None

    async def add_option_stake(self, db, market_id, option_id, amount) -> MarketOption:
        option = self.store.options.get(option_id)
        if option is None or option.market_id != market_id:
            raise OptionNotFoundError(option_id, market_id)
        option.total_staked += amount
        return replace(option)

    async def add_liquidity(self, db, market_id, amount) -> Market:
        market = self.store.markets.get(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        market.total_liquidity += amount
        return replace(market)

    async def mark_resolved(self, db, market_id, winning_option_id) -> Market:
        market = self.store.markets[market_id]
        market.status = "resolved"
        market.winning_option_id = winning_option_id
        return replace(market)


class FakeUserRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def get_user(self, db, address) -> User | None:
        user = self.store.users.get(address)
        return replace(user) if user else None

    async def get_or_create_user(self, db, address, for_update=False) -> User:
        if address not in self.store.users:
            self.store.users[address] = User(
                address=address,
                balance=self.store.default_balance,
                reputation=self.store.default_reputation,
            )
        if for_update:
            self.store.locked.append(("user", address))
        return replace(self.store.users[address])

    async def debit(self, db, address, amount) -> User:
        user = self.store.users.get(address)
        if user is None:
            raise UserNotFoundError(address)
        if user.balance < amount:
            raise InsufficientBalanceError(amount, user.balance)
        user.balance -= amount
        return replace(user)

    async def credit(self, db, address, amount) -> User:
        user = self.store.users.get(address)
        if user is None:
            raise UserNotFoundError(address)
        user.balance += amount
        return replace(user)


class FakePositionRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def create_position(self, db, market_id, option_id, user_address, amount) -> Position:
        position = Position(
            id=self.store.next_id(),
            market_id=market_id,
            option_id=option_id,
            user_address=user_address,
            amount=amount,
            status="pending",
            claimed=False,
            created_at=utc_now(),
        )
        self.store.positions[position.id] = position
        return replace(position)

    async def list_by_user(self, db, user_address) -> list[PositionWithMarketState]:
        mine = [p for p in self.store.positions.values() if p.user_address == user_address]
        mine.sort(key=lambda p: (p.created_at, p.id), reverse=True)
        return [
            PositionWithMarketState(
                position=replace(p),
                market_status=self.store.markets[p.market_id].status,
                winning_option_id=self.store.markets[p.market_id].winning_option_id,
            )
            for p in mine
        ]

    async def list_unclaimed_for_update(self, db, market_id, user_address) -> list[Position]:
        return [
            replace(p)
            for p in sorted(self.store.positions.values(), key=lambda p: p.id)
            if p.market_id == market_id and p.user_address == user_address and not p.claimed
        ]

    async def settle_market_positions(
        self, db, market_id, winning_option_id, settled_at
    ) -> list[Position]:
        settled = []
        for p in self.store.positions_of(market_id):
            p.status = "won" if p.option_id == winning_option_id else "lost"
            p.settled_at = settled_at
            settled.append(replace(p))
        return settled

    async def settle_position(self, db, position_id, status, settled_at) -> Position | None:
        p = self.store.positions[position_id]
        if p.status != "pending":
            return None
        p.status = status
        p.settled_at = settled_at
        return replace(p)

    async def mark_claimed(self, db, position_ids) -> int:
        changed = 0
        for pid in position_ids:
            p = self.store.positions[pid]
            if not p.claimed:
                p.claimed = True
                changed += 1
        return changed
