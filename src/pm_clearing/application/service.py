"""SettlementService — resolve a market and pay out its winners.

All in one transaction, market row locked first:
  check owner / resolved / deadline -> mark resolved (guarded) ->
  load votes -> compute payouts -> credit + accuracy per voter (ascending user_id)
Stake aggregates are untouched by resolution, so the projector is not run.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.repository import AccountRepositoryProtocol
from src.pm_account.infrastructure.persistence import AccountRepository
from src.pm_clearing.application.schemas import ResolveResponse
from src.pm_clearing.domain.settlement import SettlementPlan, compute_settlement
from src.pm_common.database import run_in_transaction
from src.pm_common.datetime_utils import utc_now
from src.pm_common.enums import MarketEventType, Stance
from src.pm_common.errors import (
    MarketAlreadyResolvedError,
    MarketNotFoundError,
    NotMarketOwnerError,
    ResolutionTooEarlyError,
)
from src.pm_market.application.schemas import MarketSnapshot
from src.pm_market.domain.models import PredictionMarket
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_realtime.infrastructure.notifier import (
    ChangeNotifierProtocol,
    RedisChangeNotifier,
)
from src.pm_stake.domain.repository import VoteRepositoryProtocol
from src.pm_stake.infrastructure.persistence import VoteRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _ResolveOutcome:
    market: PredictionMarket
    plan: SettlementPlan


class SettlementService:
    def __init__(
        self,
        market_repo: MarketRepositoryProtocol | None = None,
        account_repo: AccountRepositoryProtocol | None = None,
        vote_repo: VoteRepositoryProtocol | None = None,
        notifier: ChangeNotifierProtocol | None = None,
    ) -> None:
        self._market_repo: MarketRepositoryProtocol = market_repo or MarketRepository()
        self._account_repo: AccountRepositoryProtocol = account_repo or AccountRepository()
        self._vote_repo: VoteRepositoryProtocol = vote_repo or VoteRepository()
        self._notifier: ChangeNotifierProtocol = notifier or RedisChangeNotifier()

    async def resolve(
        self, db: AsyncSession, caller_id: str, market_id: str, outcome: bool
    ) -> ResolveResponse:
        async def _work() -> _ResolveOutcome:
            market = await self._market_repo.lock_market(db, market_id)
            if market is None:
                raise MarketNotFoundError(market_id)
            if market.owner_id != caller_id:
                raise NotMarketOwnerError(market_id)
            if market.resolved:
                raise MarketAlreadyResolvedError(market_id)
            if not market.deadline_passed(utc_now()):
                raise ResolutionTooEarlyError(
                    market_id, market.resolution_deadline.isoformat()
                )

            resolved = await self._market_repo.mark_resolved(db, market_id, outcome)
            if resolved is None:
                raise MarketAlreadyResolvedError(market_id)

            votes = await self._vote_repo.list_votes_for_market(db, market_id)
            plan = compute_settlement(votes, outcome)
            for entry in plan.entries:
                await self._account_repo.apply_settlement(
                    db, entry.user_id, entry.payout, entry.correct
                )
            return _ResolveOutcome(market=resolved, plan=plan)

        result = await run_in_transaction(db, _work)
        plan = result.plan
        logger.info(
            "Market resolved: id=%s outcome=%s voters=%d winners=%d distributed=%d",
            market_id, Stance.from_bool(outcome).value, len(plan.entries), plan.winner_count,
            plan.distributed,
        )
        if plan.entries and plan.winner_count == 0:
            logger.warning(
                "Market %s resolved with no winners: %d points removed from circulation",
                market_id, plan.undistributed_points,
            )

        snapshot = MarketSnapshot.from_domain(result.market, utc_now())
        await self._notifier.notify(
            MarketEventType.MARKET_RESOLVED, market_id, snapshot.model_dump()
        )
        return ResolveResponse.build(snapshot, plan)
