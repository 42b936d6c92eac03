"""AccountApplicationService — read projections over point accounts.

All methods are read-only; balances are only ever mutated by the stake ledger
and the settlement engine.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.application.schemas import (
    LeaderboardItem,
    LeaderboardResponse,
    PointsResponse,
    UserProfileResponse,
)
from src.pm_account.domain.repository import AccountRepositoryProtocol
from src.pm_account.infrastructure.persistence import AccountRepository
from src.pm_common.errors import AccountNotFoundError, UserNotFoundError


class AccountApplicationService:
    def __init__(self, repo: AccountRepositoryProtocol | None = None) -> None:
        self._repo: AccountRepositoryProtocol = repo or AccountRepository()

    async def get_points(self, db: AsyncSession, user_id: str) -> PointsResponse:
        account = await self._repo.get_account_by_user_id(db, user_id)
        if account is None:
            raise AccountNotFoundError(user_id)
        return PointsResponse.from_domain(account)

    async def get_profile(self, db: AsyncSession, user_id: str) -> UserProfileResponse:
        entry = await self._repo.get_public_profile(db, user_id)
        if entry is None:
            raise UserNotFoundError(user_id)
        return UserProfileResponse.from_domain(entry)

    async def get_leaderboard(
        self, db: AsyncSession, limit: int, offset: int
    ) -> LeaderboardResponse:
        entries = await self._repo.list_leaderboard(db, limit, offset)
        items = [
            LeaderboardItem(
                rank=offset + i + 1,
                **UserProfileResponse.from_domain(e).model_dump(),
            )
            for i, e in enumerate(entries)
        ]
        return LeaderboardResponse(items=items, limit=limit, offset=offset)
