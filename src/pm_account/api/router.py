"""pm_account REST API.

GET /users/{address} — current balance/reputation, provisioning on first reference
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.application.service import AccountApplicationService
from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response

router = APIRouter(prefix="/users", tags=["users"])

_service = AccountApplicationService()


@router.get("/{address}")
async def get_user(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    address: str = Path(..., min_length=1, max_length=128),
) -> ApiResponse:
    data = await _service.get_user(db, address)
    return success_response(data.model_dump(), request)
