"""Unified error codes and custom exceptions.

Error code ranges:
  2xxx: User/Funds
  3xxx: Market/Option
  5xxx: Position/Claim
  9xxx: System

Category bases group the concrete errors into the four business-rule
families surfaced to callers: not found, invalid state, insufficient funds,
nothing to claim. None of them are transient; callers must not retry.
"""

from decimal import Decimal


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


class NotFoundError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


class InvalidStateError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 422)


# --- 2xxx: User/Funds ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: Decimal, available: Decimal) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required}, available {available}",
            422,
        )


class UserNotFoundError(NotFoundError):
    def __init__(self, address: str) -> None:
        super().__init__(2002, f"User not found: {address}")


# --- 3xxx: Market/Option ---

class MarketNotFoundError(NotFoundError):
    def __init__(self, market_id: int) -> None:
        super().__init__(3001, f"Market not found: {market_id}")


class MarketClosedError(InvalidStateError):
    def __init__(self, market_id: int) -> None:
        super().__init__(3002, f"Market is closed: {market_id}")


class OptionNotFoundError(NotFoundError):
    def __init__(self, option_id: int, market_id: int) -> None:
        super().__init__(3003, f"Option {option_id} not found in market {market_id}")


class MarketNotResolvedError(InvalidStateError):
    def __init__(self, market_id: int) -> None:
        super().__init__(3004, f"Market not resolved: {market_id}")


class MarketAlreadyResolvedError(InvalidStateError):
    def __init__(self, market_id: int, winning_option_id: int) -> None:
        super().__init__(
            3005,
            f"Market {market_id} already resolved with winning option {winning_option_id}",
        )


# --- 5xxx: Position/Claim ---

class NoUnclaimedPositionsError(AppError):
    def __init__(self, market_id: int, user_address: str) -> None:
        super().__init__(
            5001,
            f"No unclaimed positions found for {user_address} in market {market_id}",
            422,
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
