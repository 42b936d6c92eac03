"""MarketRepository — concrete implementation of MarketRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.errors import InternalError, MarketNotFoundError
from src.pm_market.domain.models import MarketStats, PredictionMarket

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_MARKET_COLUMNS = """
    id, owner_id, title, description, category,
    resolution_deadline, resolved, outcome,
    stake_count, total_points, yes_count, no_count, yes_points, no_points,
    resolved_at, created_at, updated_at
"""

_GET_MARKET_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM prediction_markets
    WHERE id = :market_id
""")

# Serialization point for stakes and resolution on one market.
_LOCK_MARKET_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM prediction_markets
    WHERE id = :market_id
    FOR UPDATE
""")

_INSERT_MARKET_SQL = text(f"""
    INSERT INTO prediction_markets
        (owner_id, title, description, category, resolution_deadline)
    VALUES
        (:owner_id, :title, :description, :category, :resolution_deadline)
    RETURNING {_MARKET_COLUMNS}
""")

_LIST_MARKETS_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM prediction_markets
    WHERE
        (CAST(:resolved AS BOOLEAN) IS NULL OR resolved = CAST(:resolved AS BOOLEAN))
        AND (
            CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
            OR created_at < CAST(:cursor_ts AS TIMESTAMPTZ)
            OR (
                created_at = CAST(:cursor_ts AS TIMESTAMPTZ)
                AND id < CAST(:cursor_id AS TEXT)
            )
        )
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

# The resolved = FALSE guard makes the transition single-shot even if a
# caller skipped the row lock.
_MARK_RESOLVED_SQL = text(f"""
    UPDATE prediction_markets
    SET resolved = TRUE,
        outcome = :outcome,
        resolved_at = NOW(),
        updated_at = NOW()
    WHERE id = :market_id AND resolved = FALSE
    RETURNING {_MARKET_COLUMNS}
""")

_UPDATE_STATS_SQL = text(f"""
    UPDATE prediction_markets
    SET stake_count = :stake_count,
        total_points = :total_points,
        yes_count = :yes_count,
        no_count = :no_count,
        yes_points = :yes_points,
        no_points = :no_points,
        updated_at = NOW()
    WHERE id = :market_id
    RETURNING {_MARKET_COLUMNS}
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------

def _row_to_market(row: object) -> PredictionMarket:
    return PredictionMarket(
        id=row.id,  # type: ignore[attr-defined]
        owner_id=row.owner_id,  # type: ignore[attr-defined]
        title=row.title,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        category=row.category,  # type: ignore[attr-defined]
        resolution_deadline=row.resolution_deadline,  # type: ignore[attr-defined]
        resolved=row.resolved,  # type: ignore[attr-defined]
        outcome=row.outcome,  # type: ignore[attr-defined]
        stake_count=row.stake_count,  # type: ignore[attr-defined]
        total_points=row.total_points,  # type: ignore[attr-defined]
        yes_count=row.yes_count,  # type: ignore[attr-defined]
        no_count=row.no_count,  # type: ignore[attr-defined]
        yes_points=row.yes_points,  # type: ignore[attr-defined]
        no_points=row.no_points,  # type: ignore[attr-defined]
        resolved_at=row.resolved_at,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class MarketRepository:
    """Concrete repository. Locking reads and writes run in the caller's transaction."""

    async def get_market_by_id(
        self, db: AsyncSession, market_id: str
    ) -> PredictionMarket | None:
        result = await db.execute(_GET_MARKET_SQL, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def lock_market(
        self, db: AsyncSession, market_id: str
    ) -> PredictionMarket | None:
        result = await db.execute(_LOCK_MARKET_SQL, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def create_market(
        self,
        db: AsyncSession,
        owner_id: str,
        title: str,
        description: str | None,
        category: str | None,
        resolution_deadline: datetime,
    ) -> PredictionMarket:
        result = await db.execute(
            _INSERT_MARKET_SQL,
            {
                "owner_id": owner_id,
                "title": title,
                "description": description,
                "category": category,
                "resolution_deadline": resolution_deadline,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Market insert returned no rows: this should never happen")
        return _row_to_market(row)

    async def list_markets(
        self,
        db: AsyncSession,
        resolved: bool | None,
        cursor_ts: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[PredictionMarket]:
        # asyncpg requires a real datetime object for TIMESTAMPTZ parameters,
        # not an ISO string.  Parse the cursor timestamp here.
        cursor_ts_dt: datetime | None = None
        if cursor_ts is not None:
            cursor_ts_dt = datetime.fromisoformat(cursor_ts)

        result = await db.execute(
            _LIST_MARKETS_SQL,
            {
                "resolved": resolved,
                "cursor_ts": cursor_ts_dt,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        rows = result.fetchall()
        return [_row_to_market(row) for row in rows]

    async def mark_resolved(
        self, db: AsyncSession, market_id: str, outcome: bool
    ) -> PredictionMarket | None:
        result = await db.execute(
            _MARK_RESOLVED_SQL, {"market_id": market_id, "outcome": outcome}
        )
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def update_stats(
        self, db: AsyncSession, market_id: str, stats: MarketStats
    ) -> PredictionMarket:
        result = await db.execute(
            _UPDATE_STATS_SQL,
            {
                "market_id": market_id,
                "stake_count": stats.stake_count,
                "total_points": stats.total_points,
                "yes_count": stats.yes_count,
                "no_count": stats.no_count,
                "yes_points": stats.yes_points,
                "no_points": stats.no_points,
            },
        )
        row = result.fetchone()
        if row is None:
            raise MarketNotFoundError(market_id)
        return _row_to_market(row)
