"""StakeLedgerService — placeStake, the only path that moves points into a market.

Transaction layout (lock order is market row, then the caller's account row):
  1. SELECT ... FOR UPDATE the market  -> MarketNotFound / MarketAlreadyResolved
  2. existing vote for (user, market)  -> AlreadyVoted
  3. SELECT ... FOR UPDATE the account -> InsufficientPoints
  4. INSERT vote (unique violation     -> AlreadyVoted)
  5. guarded debit (balance >= amount)
  6. StatsProjector.refresh
The snapshot is published only after COMMIT.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.models import PointAccount
from src.pm_account.domain.repository import AccountRepositoryProtocol
from src.pm_account.infrastructure.persistence import AccountRepository
from src.pm_clearing.domain.stats_projector import StatsProjector
from src.pm_common.database import run_in_transaction
from src.pm_common.datetime_utils import utc_now
from src.pm_common.enums import MarketEventType, Stance
from src.pm_common.errors import (
    AccountNotFoundError,
    AlreadyVotedError,
    InsufficientPointsError,
    InvalidStakeError,
    MarketAlreadyResolvedError,
    MarketNotFoundError,
)
from src.pm_market.application.schemas import MarketSnapshot
from src.pm_market.domain.models import PredictionMarket
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_realtime.infrastructure.notifier import (
    ChangeNotifierProtocol,
    RedisChangeNotifier,
)
from src.pm_stake.application.schemas import (
    PortfolioItem,
    PortfolioResponse,
    StakeResponse,
    VoteItem,
)
from src.pm_stake.domain.models import Vote
from src.pm_stake.domain.repository import VoteRepositoryProtocol
from src.pm_stake.infrastructure.persistence import VoteRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _StakeOutcome:
    vote: Vote
    account: PointAccount
    market: PredictionMarket


def validate_stake_input(stance: object, points_staked: object) -> None:
    """Reject malformed input before any transaction is opened."""
    if not isinstance(stance, bool):
        raise InvalidStakeError("stance must be a boolean")
    # bool is a subclass of int
    if isinstance(points_staked, bool) or not isinstance(points_staked, int):
        raise InvalidStakeError("points_staked must be an integer")
    if points_staked <= 0:
        raise InvalidStakeError("points_staked must be positive")


class StakeLedgerService:
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
        self._projector = StatsProjector(self._vote_repo, self._market_repo)

    async def place_stake(
        self,
        db: AsyncSession,
        user_id: str,
        market_id: str,
        stance: bool,
        points_staked: int,
    ) -> StakeResponse:
        validate_stake_input(stance, points_staked)

        async def _work() -> _StakeOutcome:
            market = await self._market_repo.lock_market(db, market_id)
            if market is None:
                raise MarketNotFoundError(market_id)
            if market.resolved:
                raise MarketAlreadyResolvedError(market_id)

            if await self._vote_repo.get_user_vote(db, user_id, market_id) is not None:
                raise AlreadyVotedError(market_id)

            account = await self._account_repo.lock_account(db, user_id)
            if account is None:
                raise AccountNotFoundError(user_id)
            if account.balance < points_staked:
                raise InsufficientPointsError(points_staked, account.balance)

            vote = await self._vote_repo.insert_vote(
                db, user_id, market_id, stance, points_staked
            )
            account = await self._account_repo.debit(db, user_id, points_staked)
            market = await self._projector.refresh(db, market_id)
            return _StakeOutcome(vote=vote, account=account, market=market)

        result = await run_in_transaction(db, _work)
        logger.info(
            "Stake placed: user=%s market=%s stance=%s points=%d balance=%d",
            user_id, market_id, Stance.from_bool(stance).value, points_staked,
            result.account.balance,
        )

        snapshot = MarketSnapshot.from_domain(result.market, utc_now())
        await self._notifier.notify(
            MarketEventType.VOTE_UPDATE, market_id, snapshot.model_dump()
        )
        return StakeResponse(
            vote=VoteItem.from_domain(result.vote),
            balance=result.account.balance,
            market=snapshot,
        )

    async def list_my_votes(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> PortfolioResponse:
        entries = await self._vote_repo.list_votes_for_user(db, user_id, limit)
        return PortfolioResponse(items=[PortfolioItem.from_entry(e) for e in entries])
