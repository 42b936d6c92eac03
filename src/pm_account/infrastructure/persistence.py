"""AccountRepository — concrete implementation of AccountRepositoryProtocol.

All balance-mutating operations use atomic PostgreSQL UPDATE ... RETURNING.
A result of 0 rows on a guarded debit means the balance was insufficient.

Transaction ownership: the CALLER (application service) starts and commits the
transaction. Row locks taken here are held until that commit or rollback.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.models import LeaderboardEntry, PointAccount
from src.pm_common.errors import AccountNotFoundError, InsufficientPointsError, InternalError

_ACCOUNT_COLUMNS = """
    user_id, balance, lifetime_predictions_made, lifetime_correct,
    accuracy_percent, version, created_at, updated_at
"""

# ---------------------------------------------------------------------------
# SQL: reads
# ---------------------------------------------------------------------------

_GET_ACCOUNT_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM point_accounts
    WHERE user_id = :user_id
""")

_LOCK_ACCOUNT_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM point_accounts
    WHERE user_id = :user_id
    FOR UPDATE
""")

_LEADERBOARD_SQL = text("""
    SELECT a.user_id, u.username, a.balance,
           a.lifetime_predictions_made, a.lifetime_correct, a.accuracy_percent
    FROM point_accounts a
    JOIN users u ON u.id::text = a.user_id
    ORDER BY a.balance DESC, a.accuracy_percent DESC, a.user_id
    LIMIT :limit OFFSET :offset
""")

_PROFILE_SQL = text("""
    SELECT a.user_id, u.username, a.balance,
           a.lifetime_predictions_made, a.lifetime_correct, a.accuracy_percent
    FROM point_accounts a
    JOIN users u ON u.id::text = a.user_id
    WHERE a.user_id = :user_id
""")

# ---------------------------------------------------------------------------
# SQL: mutations
# ---------------------------------------------------------------------------

_CREATE_ACCOUNT_SQL = text(f"""
    INSERT INTO point_accounts (user_id, balance)
    VALUES (:user_id, :balance)
    RETURNING {_ACCOUNT_COLUMNS}
""")

_DEBIT_SQL = text(f"""
    UPDATE point_accounts
    SET balance = balance - :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE user_id = :user_id AND balance >= :amount
    RETURNING {_ACCOUNT_COLUMNS}
""")

# SET expressions all read the pre-update row, so the accuracy is computed
# from the incremented counters explicitly.
_SETTLE_SQL = text(f"""
    UPDATE point_accounts
    SET balance = balance + :payout,
        lifetime_predictions_made = lifetime_predictions_made + 1,
        lifetime_correct = lifetime_correct + :correct,
        accuracy_percent = ROUND(
            (lifetime_correct + :correct) * 100.0 / (lifetime_predictions_made + 1), 2
        ),
        version = version + 1,
        updated_at = NOW()
    WHERE user_id = :user_id
    RETURNING {_ACCOUNT_COLUMNS}
""")


def _row_to_account(row: object) -> PointAccount:
    return PointAccount(
        user_id=row.user_id,  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
        lifetime_predictions_made=row.lifetime_predictions_made,  # type: ignore[attr-defined]
        lifetime_correct=row.lifetime_correct,  # type: ignore[attr-defined]
        accuracy_percent=row.accuracy_percent,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_leaderboard(row: object) -> LeaderboardEntry:
    return LeaderboardEntry(
        user_id=row.user_id,  # type: ignore[attr-defined]
        username=row.username,  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
        lifetime_predictions_made=row.lifetime_predictions_made,  # type: ignore[attr-defined]
        lifetime_correct=row.lifetime_correct,  # type: ignore[attr-defined]
        accuracy_percent=row.accuracy_percent,  # type: ignore[attr-defined]
    )


class AccountRepository:
    """Concrete repository — all operations atomic at the SQL level."""

    async def get_account_by_user_id(
        self, db: AsyncSession, user_id: str
    ) -> PointAccount | None:
        result = await db.execute(_GET_ACCOUNT_SQL, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def lock_account(
        self, db: AsyncSession, user_id: str
    ) -> PointAccount | None:
        result = await db.execute(_LOCK_ACCOUNT_SQL, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def create_account(
        self, db: AsyncSession, user_id: str, starting_points: int
    ) -> PointAccount:
        result = await db.execute(
            _CREATE_ACCOUNT_SQL, {"user_id": user_id, "balance": starting_points}
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Account insert returned no rows: this should never happen")
        return _row_to_account(row)

    async def debit(
        self, db: AsyncSession, user_id: str, amount: int
    ) -> PointAccount:
        result = await db.execute(_DEBIT_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            acc_result = await db.execute(_GET_ACCOUNT_SQL, {"user_id": user_id})
            acc_row = acc_result.fetchone()
            if acc_row is None:
                raise AccountNotFoundError(user_id)
            raise InsufficientPointsError(amount, acc_row.balance)
        return _row_to_account(row)

    async def apply_settlement(
        self, db: AsyncSession, user_id: str, payout: int, correct: bool
    ) -> PointAccount:
        result = await db.execute(
            _SETTLE_SQL,
            {"user_id": user_id, "payout": payout, "correct": 1 if correct else 0},
        )
        row = result.fetchone()
        if row is None:
            raise AccountNotFoundError(user_id)
        return _row_to_account(row)

    async def list_leaderboard(
        self, db: AsyncSession, limit: int, offset: int
    ) -> list[LeaderboardEntry]:
        result = await db.execute(_LEADERBOARD_SQL, {"limit": limit, "offset": offset})
        return [_row_to_leaderboard(row) for row in result.fetchall()]

    async def get_public_profile(
        self, db: AsyncSession, user_id: str
    ) -> LeaderboardEntry | None:
        result = await db.execute(_PROFILE_SQL, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_leaderboard(row) if row else None
