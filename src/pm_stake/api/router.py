"""pm_stake REST endpoints.

POST /markets/{market_id}/votes       — stake points on YES or NO (once per market)
GET  /account/votes                   — the caller's votes, newest first
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_current_user
from src.pm_gateway.user.db_models import UserModel
from src.pm_stake.application.schemas import PlaceStakeRequest
from src.pm_stake.application.service import StakeLedgerService

router = APIRouter(tags=["stakes"])

_service = StakeLedgerService()


@router.post("/markets/{market_id}/votes", status_code=201)
async def place_stake(
    market_id: str,
    body: PlaceStakeRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.place_stake(
        db, str(current_user.id), market_id, body.stance, body.points_staked
    )
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/account/votes")
async def list_my_votes(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    result = await _service.list_my_votes(db, str(current_user.id), limit)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
