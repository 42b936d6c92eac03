"""Repository Protocol — dependency inversion for testability.

Votes are insert-only: there is deliberately no update or delete.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_stake.domain.models import PortfolioEntry, Vote


class VoteRepositoryProtocol(Protocol):
    async def get_user_vote(
        self, db: AsyncSession, user_id: str, market_id: str
    ) -> Vote | None: ...

    async def insert_vote(
        self,
        db: AsyncSession,
        user_id: str,
        market_id: str,
        stance: bool,
        points_staked: int,
    ) -> Vote: ...

    async def list_votes_for_market(
        self, db: AsyncSession, market_id: str
    ) -> list[Vote]: ...

    async def list_votes_for_user(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[PortfolioEntry]: ...
