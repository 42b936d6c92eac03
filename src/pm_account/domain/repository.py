"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.models import LeaderboardEntry, PointAccount


class AccountRepositoryProtocol(Protocol):
    async def get_account_by_user_id(
        self, db: AsyncSession, user_id: str
    ) -> PointAccount | None: ...

    async def lock_account(
        self, db: AsyncSession, user_id: str
    ) -> PointAccount | None: ...

    async def create_account(
        self, db: AsyncSession, user_id: str, starting_points: int
    ) -> PointAccount: ...

    async def debit(
        self, db: AsyncSession, user_id: str, amount: int
    ) -> PointAccount: ...

    async def apply_settlement(
        self, db: AsyncSession, user_id: str, payout: int, correct: bool
    ) -> PointAccount: ...

    async def list_leaderboard(
        self, db: AsyncSession, limit: int, offset: int
    ) -> list[LeaderboardEntry]: ...

    async def get_public_profile(
        self, db: AsyncSession, user_id: str
    ) -> LeaderboardEntry | None: ...
