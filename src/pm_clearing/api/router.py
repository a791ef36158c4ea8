"""Settlement REST endpoints.

POST /stake                     — open a position on a market option
POST /resolve                   — declare the winning option, settle positions
GET  /positions?userAddress=    — a user's positions, reconciled
POST /claim                     — pay out a user's unclaimed positions on a market
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_clearing.application.schemas import (
    ClaimRequest,
    ResolveRequest,
    StakeRequest,
)
from src.pm_clearing.application.service import SettlementService
from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response

router = APIRouter(tags=["settlement"])

_service = SettlementService()


@router.post("/stake")
async def stake(
    body: StakeRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.stake(db, body)
    return success_response(result.model_dump(), request)


@router.post("/resolve")
async def resolve(
    body: ResolveRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.resolve(db, body)
    return success_response(result.model_dump(), request)


@router.get("/positions")
async def list_positions(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    user_address: str = Query(..., alias="userAddress", min_length=1, max_length=128),
) -> ApiResponse:
    result = await _service.list_positions(db, user_address)
    return success_response(result.model_dump(), request)


@router.post("/claim")
async def claim(
    body: ClaimRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.claim(db, body)
    return success_response(result.model_dump(), request)
