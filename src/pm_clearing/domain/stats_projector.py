"""StatsProjector: recomputes a market's cached aggregates from its votes.

The aggregate columns on prediction_markets are a pure projection of the
vote set. They are rebuilt from scratch inside the staking transaction
rather than incremented, so the cache can never drift from the source.
"""

from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_market.domain.models import MarketStats, PredictionMarket
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_stake.domain.models import Vote
from src.pm_stake.domain.repository import VoteRepositoryProtocol


def project_market_stats(votes: Iterable[Vote]) -> MarketStats:
    stake_count = yes_count = no_count = yes_points = no_points = 0
    for vote in votes:
        stake_count += 1
        if vote.stance:
            yes_count += 1
            yes_points += vote.points_staked
        else:
            no_count += 1
            no_points += vote.points_staked
    return MarketStats(
        stake_count=stake_count,
        total_points=yes_points + no_points,
        yes_count=yes_count,
        no_count=no_count,
        yes_points=yes_points,
        no_points=no_points,
    )


class StatsProjector:
    def __init__(
        self,
        vote_repo: VoteRepositoryProtocol,
        market_repo: MarketRepositoryProtocol,
    ) -> None:
        self._vote_repo = vote_repo
        self._market_repo = market_repo

    async def refresh(self, db: AsyncSession, market_id: str) -> PredictionMarket:
        """Rebuild and persist the aggregates. Caller must hold the market row lock."""
        votes = await self._vote_repo.list_votes_for_market(db, market_id)
        stats = project_market_stats(votes)
        return await self._market_repo.update_stats(db, market_id, stats)
