"""pm_market REST endpoints.

GET    /markets               — list, newest first, with options + position counts
POST   /markets               — create a market with its ordered options
GET    /markets/{market_id}   — full detail
DELETE /markets/{market_id}   — delete positions, options, then the market
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.enums import MarketStatus
from src.pm_common.response import ApiResponse, success_response
from src.pm_market.application.schemas import CreateMarketRequest
from src.pm_market.application.service import MarketApplicationService

router = APIRouter(prefix="/markets", tags=["markets"])

_service = MarketApplicationService()


@router.get("")
async def list_markets(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    status: MarketStatus | None = Query(None, description="Filter by status. Default: all."),
    category: str | None = Query(None),
) -> ApiResponse:
    result = await _service.list_markets(
        db, status.value if status else None, category
    )
    return success_response(result.model_dump(), request)


@router.post("")
async def create_market(
    body: CreateMarketRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create_market(db, body)
    return success_response(result.model_dump(), request)


@router.get("/{market_id}")
async def get_market(
    market_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_market(db, market_id)
    return success_response(result.model_dump(), request)


@router.delete("/{market_id}")
async def delete_market(
    market_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.delete_market(db, market_id)
    return success_response(result.model_dump(), request)
