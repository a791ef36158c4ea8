"""UserRepository — concrete implementation of UserRepositoryProtocol.

Users are provisioned lazily on first reference with the configured default
balance and reputation. Balance mutations are atomic UPDATE ... RETURNING; the
debit is guarded by `balance >= :amount`, so 0 rows means insufficient funds.

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

import json
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_account.domain.models import User
from src.pm_common.errors import InsufficientBalanceError, UserNotFoundError

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_USER_COLUMNS = "address, balance, reputation, holdings, created_at"

_GET_USER_SQL = text(f"""
    SELECT {_USER_COLUMNS}
    FROM users
    WHERE address = :address
""")

_GET_USER_FOR_UPDATE_SQL = text(f"""
    SELECT {_USER_COLUMNS}
    FROM users
    WHERE address = :address
    FOR UPDATE
""")

_PROVISION_USER_SQL = text("""
    INSERT INTO users (address, balance, reputation, holdings)
    VALUES (:address, :balance, :reputation, '{}'::jsonb)
    ON CONFLICT (address) DO NOTHING
""")

_DEBIT_SQL = text(f"""
    UPDATE users
    SET balance = balance - :amount,
        updated_at = NOW()
    WHERE address = :address AND balance >= :amount
    RETURNING {_USER_COLUMNS}
""")

_CREDIT_SQL = text(f"""
    UPDATE users
    SET balance = balance + :amount,
        updated_at = NOW()
    WHERE address = :address
    RETURNING {_USER_COLUMNS}
""")


def _row_to_user(row: object) -> User:
    holdings = row.holdings  # type: ignore[attr-defined]
    if isinstance(holdings, str):
        holdings = json.loads(holdings)
    return User(
        address=row.address,  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
        reputation=row.reputation,  # type: ignore[attr-defined]
        holdings=holdings or {},
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class UserRepository:
    """Concrete repository — all balance mutations atomic at the SQL level."""

    def __init__(
        self,
        default_balance: Decimal | None = None,
        default_reputation: int | None = None,
    ) -> None:
        self._default_balance = (
            default_balance if default_balance is not None else settings.DEFAULT_USER_BALANCE
        )
        self._default_reputation = (
            default_reputation
            if default_reputation is not None
            else settings.DEFAULT_USER_REPUTATION
        )

    async def get_user(self, db: AsyncSession, address: str) -> User | None:
        result = await db.execute(_GET_USER_SQL, {"address": address})
        row = result.fetchone()
        return _row_to_user(row) if row else None

    async def get_or_create_user(
        self, db: AsyncSession, address: str, for_update: bool = False
    ) -> User:
        # ON CONFLICT DO NOTHING makes concurrent first references safe.
        await db.execute(
            _PROVISION_USER_SQL,
            {
                "address": address,
                "balance": self._default_balance,
                "reputation": self._default_reputation,
            },
        )
        sql = _GET_USER_FOR_UPDATE_SQL if for_update else _GET_USER_SQL
        row = (await db.execute(sql, {"address": address})).fetchone()
        if row is None:
            raise UserNotFoundError(address)
        return _row_to_user(row)

    async def debit(self, db: AsyncSession, address: str, amount: Decimal) -> User:
        result = await db.execute(_DEBIT_SQL, {"address": address, "amount": amount})
        row = result.fetchone()
        if row is None:
            current = await self.get_user(db, address)
            if current is None:
                raise UserNotFoundError(address)
            raise InsufficientBalanceError(amount, current.balance)
        return _row_to_user(row)

    async def credit(self, db: AsyncSession, address: str, amount: Decimal) -> User:
        result = await db.execute(_CREDIT_SQL, {"address": address, "amount": amount})
        row = result.fetchone()
        if row is None:
            raise UserNotFoundError(address)
        return _row_to_user(row)
