"""MarketApplicationService — market creation and read projections.

Creation is the only write here and runs in its own transaction; aggregate
fields and the resolved flag are owned by the stake ledger and the
settlement engine.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import run_in_transaction
from src.pm_common.datetime_utils import to_iso, utc_now
from src.pm_common.enums import MarketStatusFilter
from src.pm_common.errors import InvalidMarketError, MarketNotFoundError
from src.pm_market.application.schemas import (
    CreateMarketRequest,
    MarketDetail,
    MarketListResponse,
    MarketSnapshot,
    MyVote,
    cursor_decode,
    cursor_encode,
)
from src.pm_market.domain.models import PredictionMarket
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_stake.domain.repository import VoteRepositoryProtocol
from src.pm_stake.infrastructure.persistence import VoteRepository

logger = logging.getLogger(__name__)


class MarketApplicationService:
    def __init__(
        self,
        repo: MarketRepositoryProtocol | None = None,
        vote_repo: VoteRepositoryProtocol | None = None,
    ) -> None:
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()
        self._vote_repo: VoteRepositoryProtocol = vote_repo or VoteRepository()

    async def create_market(
        self, db: AsyncSession, owner_id: str, body: CreateMarketRequest
    ) -> MarketSnapshot:
        now = utc_now()
        if body.resolution_deadline <= now:
            raise InvalidMarketError("resolution_deadline must be in the future")

        async def _work() -> PredictionMarket:
            return await self._repo.create_market(
                db,
                owner_id=owner_id,
                title=body.title,
                description=body.description,
                category=body.category,
                resolution_deadline=body.resolution_deadline,
            )

        market = await run_in_transaction(db, _work)
        logger.info("Market created: id=%s owner=%s", market.id, owner_id)
        return MarketSnapshot.from_domain(market, now)

    async def list_markets(
        self,
        db: AsyncSession,
        status: MarketStatusFilter,
        cursor: str | None,
        limit: int,
    ) -> MarketListResponse:
        resolved = {
            MarketStatusFilter.OPEN: False,
            MarketStatusFilter.RESOLVED: True,
            MarketStatusFilter.ALL: None,
        }[status]
        cursor_ts, cursor_id = cursor_decode(cursor)

        # Fetch limit+1 to detect has_more without COUNT(*)
        markets = await self._repo.list_markets(db, resolved, cursor_ts, cursor_id, limit + 1)
        has_more = len(markets) > limit
        page = markets[:limit]

        now = utc_now()
        items = [MarketSnapshot.from_domain(m, now) for m in page]
        next_cursor = cursor_encode(page[-1]) if has_more and page else None
        return MarketListResponse(items=items, next_cursor=next_cursor, has_more=has_more)

    async def get_market(
        self, db: AsyncSession, market_id: str, viewer_id: str | None = None
    ) -> MarketDetail:
        market = await self._repo.get_market_by_id(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        snapshot = MarketSnapshot.from_domain(market, utc_now())

        my_vote = None
        if viewer_id is not None:
            vote = await self._vote_repo.get_user_vote(db, viewer_id, market_id)
            if vote is not None:
                my_vote = MyVote(
                    stance=vote.stance,
                    points_staked=vote.points_staked,
                    created_at=to_iso(vote.created_at),
                )
        return MarketDetail(**snapshot.model_dump(), my_vote=my_vote)
