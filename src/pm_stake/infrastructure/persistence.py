"""VoteRepository — concrete implementation of VoteRepositoryProtocol.

The UNIQUE (user_id, market_id) constraint is the storage-level backstop for
the one-vote-per-market rule; a violation surfaces as AlreadyVotedError.
"""

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.errors import AlreadyVotedError, InternalError
from src.pm_stake.domain.models import PortfolioEntry, Vote

_VOTE_COLUMNS = "id, user_id, market_id, stance, points_staked, created_at"

_GET_USER_VOTE_SQL = text(f"""
    SELECT {_VOTE_COLUMNS}
    FROM votes
    WHERE user_id = :user_id AND market_id = :market_id
""")

_INSERT_VOTE_SQL = text(f"""
    INSERT INTO votes (user_id, market_id, stance, points_staked)
    VALUES (:user_id, :market_id, :stance, :points_staked)
    RETURNING {_VOTE_COLUMNS}
""")

_LIST_MARKET_VOTES_SQL = text(f"""
    SELECT {_VOTE_COLUMNS}
    FROM votes
    WHERE market_id = :market_id
    ORDER BY created_at, id
""")

_LIST_USER_VOTES_SQL = text("""
    SELECT v.id, v.user_id, v.market_id, v.stance, v.points_staked, v.created_at,
           m.title AS market_title, m.resolved AS market_resolved,
           m.outcome AS market_outcome
    FROM votes v
    JOIN prediction_markets m ON m.id = v.market_id
    WHERE v.user_id = :user_id
    ORDER BY v.created_at DESC, v.id DESC
    LIMIT :limit
""")

_UQ_USER_MARKET = "uq_votes_user_market"


def _row_to_vote(row: object) -> Vote:
    return Vote(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        market_id=row.market_id,  # type: ignore[attr-defined]
        stance=row.stance,  # type: ignore[attr-defined]
        points_staked=row.points_staked,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class VoteRepository:
    async def get_user_vote(
        self, db: AsyncSession, user_id: str, market_id: str
    ) -> Vote | None:
        result = await db.execute(
            _GET_USER_VOTE_SQL, {"user_id": user_id, "market_id": market_id}
        )
        row = result.fetchone()
        return _row_to_vote(row) if row else None

    async def insert_vote(
        self,
        db: AsyncSession,
        user_id: str,
        market_id: str,
        stance: bool,
        points_staked: int,
    ) -> Vote:
        try:
            result = await db.execute(
                _INSERT_VOTE_SQL,
                {
                    "user_id": user_id,
                    "market_id": market_id,
                    "stance": stance,
                    "points_staked": points_staked,
                },
            )
        except IntegrityError as exc:
            if _UQ_USER_MARKET in str(exc.orig):
                raise AlreadyVotedError(market_id) from exc
            raise
        row = result.fetchone()
        if row is None:
            raise InternalError("Vote insert returned no rows: this should never happen")
        return _row_to_vote(row)

    async def list_votes_for_market(
        self, db: AsyncSession, market_id: str
    ) -> list[Vote]:
        result = await db.execute(_LIST_MARKET_VOTES_SQL, {"market_id": market_id})
        return [_row_to_vote(row) for row in result.fetchall()]

    async def list_votes_for_user(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[PortfolioEntry]:
        result = await db.execute(_LIST_USER_VOTES_SQL, {"user_id": user_id, "limit": limit})
        return [
            PortfolioEntry(
                vote=_row_to_vote(row),
                market_title=row.market_title,
                market_resolved=row.market_resolved,
                market_outcome=row.market_outcome,
            )
            for row in result.fetchall()
        ]
