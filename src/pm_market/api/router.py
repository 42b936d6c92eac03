"""pm_market REST endpoints.

POST /markets                         — create a market (caller becomes owner)
GET  /markets                         — feed with cursor pagination
GET  /markets/{market_id}             — full detail, incl. the caller's own vote
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.enums import MarketStatusFilter
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_current_user, get_optional_user
from src.pm_gateway.user.db_models import UserModel
from src.pm_market.application.schemas import CreateMarketRequest
from src.pm_market.application.service import MarketApplicationService

router = APIRouter(prefix="/markets", tags=["markets"])

_service = MarketApplicationService()


@router.post("", status_code=201)
async def create_market(
    body: CreateMarketRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create_market(db, str(current_user.id), body)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_markets(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    status: MarketStatusFilter = Query(MarketStatusFilter.OPEN),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    result = await _service.list_markets(db, status, cursor, limit)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{market_id}")
async def get_market(
    market_id: str,
    request: Request,
    current_user: Annotated[UserModel | None, Depends(get_optional_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    viewer_id = str(current_user.id) if current_user is not None else None
    result = await _service.get_market(db, market_id, viewer_id)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
