"""Pydantic schemas for pm_account API."""

from typing import Any

from pydantic import BaseModel

from src.pm_account.domain.models import User
from src.pm_common.amounts import format_amount


class UserResponse(BaseModel):
    address: str
    balance: str
    reputation: int
    holdings: dict[str, Any]

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            address=user.address,
            balance=format_amount(user.balance),
            reputation=user.reputation,
            holdings=user.holdings,
        )
