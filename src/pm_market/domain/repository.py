# src/pm_market/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_market.domain.models import MarketStats, PredictionMarket


class MarketRepositoryProtocol(Protocol):
    async def get_market_by_id(
        self,
        db: AsyncSession,
        market_id: str,
    ) -> PredictionMarket | None: ...

    async def lock_market(
        self,
        db: AsyncSession,
        market_id: str,
    ) -> PredictionMarket | None: ...

    async def create_market(
        self,
        db: AsyncSession,
        owner_id: str,
        title: str,
        description: str | None,
        category: str | None,
        resolution_deadline: datetime,
    ) -> PredictionMarket: ...

    async def list_markets(
        self,
        db: AsyncSession,
        resolved: bool | None,
        cursor_ts: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[PredictionMarket]: ...

    async def mark_resolved(
        self,
        db: AsyncSession,
        market_id: str,
        outcome: bool,
    ) -> PredictionMarket | None: ...

    async def update_stats(
        self,
        db: AsyncSession,
        market_id: str,
        stats: MarketStats,
    ) -> PredictionMarket: ...
