"""AccountApplicationService — thin composition layer.

get_user provisions the user on first reference (default balance and
reputation), so it commits like a write.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.application.schemas import UserResponse
from src.pm_account.domain.repository import UserRepositoryProtocol
from src.pm_account.infrastructure.persistence import UserRepository


class AccountApplicationService:
    def __init__(self, repo: UserRepositoryProtocol | None = None) -> None:
        self._repo: UserRepositoryProtocol = repo or UserRepository()

    async def get_user(self, db: AsyncSession, address: str) -> UserResponse:
        try:
            user = await self._repo.get_or_create_user(db, address)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return UserResponse.from_domain(user)
