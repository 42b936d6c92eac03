"""Repository unit tests with a MagicMock AsyncSession."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from src.pm_account.infrastructure.persistence import AccountRepository
from src.pm_common.errors import (
    AccountNotFoundError,
    AlreadyVotedError,
    InsufficientPointsError,
    MarketNotFoundError,
)
from src.pm_market.domain.models import MarketStats
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_stake.infrastructure.persistence import VoteRepository


def _result(*rows):
    result = MagicMock()
    result.fetchone.return_value = rows[0] if rows else None
    result.fetchall.return_value = list(rows)
    return result


def _account_row(balance: int = 1000, **kwargs):
    row = MagicMock()
    row.user_id = kwargs.get("user_id", "u1")
    row.balance = balance
    row.lifetime_predictions_made = kwargs.get("made", 0)
    row.lifetime_correct = kwargs.get("correct", 0)
    row.accuracy_percent = Decimal(kwargs.get("accuracy", "0.00"))
    row.version = 0
    row.created_at = datetime.now(UTC)
    row.updated_at = datetime.now(UTC)
    return row


def _market_row(**kwargs):
    now = datetime.now(UTC)
    row = MagicMock()
    row.id = kwargs.get("id", "m1")
    row.owner_id = "owner"
    row.title = "Will it rain?"
    row.description = None
    row.category = None
    row.resolution_deadline = now + timedelta(days=1)
    row.resolved = kwargs.get("resolved", False)
    row.outcome = kwargs.get("outcome")
    for name in ("stake_count", "total_points", "yes_count", "no_count", "yes_points", "no_points"):
        setattr(row, name, kwargs.get(name, 0))
    row.resolved_at = None
    row.created_at = now
    row.updated_at = now
    return row


def _vote_row(**kwargs):
    row = MagicMock()
    row.id = kwargs.get("id", "5f0c7c1e-0000-4000-8000-000000000001")
    row.user_id = kwargs.get("user_id", "u1")
    row.market_id = kwargs.get("market_id", "m1")
    row.stance = kwargs.get("stance", True)
    row.points_staked = kwargs.get("points_staked", 30)
    row.created_at = datetime.now(UTC)
    return row


@pytest.fixture
def db():
    return MagicMock()


class TestAccountRepository:
    async def test_debit_returns_updated_account(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(_account_row(70)))
        account = await AccountRepository().debit(db, "u1", 30)
        assert account.balance == 70
        params = db.execute.await_args.args[1]
        assert params == {"user_id": "u1", "amount": 30}

    async def test_debit_guard_miss_raises_insufficient(self, db) -> None:
        db.execute = AsyncMock(side_effect=[_result(), _result(_account_row(10))])
        with pytest.raises(InsufficientPointsError) as exc_info:
            await AccountRepository().debit(db, "u1", 30)
        assert "available 10" in exc_info.value.message

    async def test_debit_missing_account(self, db) -> None:
        db.execute = AsyncMock(side_effect=[_result(), _result()])
        with pytest.raises(AccountNotFoundError):
            await AccountRepository().debit(db, "u1", 30)

    async def test_apply_settlement_passes_correct_as_int(self, db) -> None:
        db.execute = AsyncMock(
            return_value=_result(_account_row(1050, made=1, correct=1, accuracy="100.00"))
        )
        account = await AccountRepository().apply_settlement(db, "u1", 50, True)
        assert account.lifetime_correct == 1
        assert db.execute.await_args.args[1] == {"user_id": "u1", "payout": 50, "correct": 1}

    async def test_apply_settlement_missing_account(self, db) -> None:
        db.execute = AsyncMock(return_value=_result())
        with pytest.raises(AccountNotFoundError):
            await AccountRepository().apply_settlement(db, "u1", 0, False)

    async def test_lock_account_uses_for_update(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(_account_row()))
        await AccountRepository().lock_account(db, "u1")
        assert "FOR UPDATE" in str(db.execute.await_args.args[0])


class TestMarketRepository:
    async def test_lock_market_uses_for_update(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(_market_row()))
        market = await MarketRepository().lock_market(db, "m1")
        assert market is not None
        assert "FOR UPDATE" in str(db.execute.await_args.args[0])

    async def test_lock_market_missing(self, db) -> None:
        db.execute = AsyncMock(return_value=_result())
        assert await MarketRepository().lock_market(db, "nope") is None

    async def test_mark_resolved_guard_miss_returns_none(self, db) -> None:
        db.execute = AsyncMock(return_value=_result())
        assert await MarketRepository().mark_resolved(db, "m1", True) is None
        assert "resolved = FALSE" in str(db.execute.await_args.args[0])

    async def test_update_stats_writes_all_aggregates(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(_market_row(stake_count=2, total_points=50)))
        stats = MarketStats(2, 50, 1, 1, 30, 20)
        market = await MarketRepository().update_stats(db, "m1", stats)
        assert market.total_points == 50
        params = db.execute.await_args.args[1]
        assert params["yes_points"] == 30
        assert params["no_points"] == 20

    async def test_update_stats_missing_market(self, db) -> None:
        db.execute = AsyncMock(return_value=_result())
        with pytest.raises(MarketNotFoundError):
            await MarketRepository().update_stats(db, "m1", MarketStats())

    async def test_list_markets_parses_cursor_timestamp(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(_market_row()))
        await MarketRepository().list_markets(db, False, "2030-01-01T00:00:00+00:00", "m9", 21)
        params = db.execute.await_args.args[1]
        assert params["cursor_ts"] == datetime(2030, 1, 1, tzinfo=UTC)
        assert params["resolved"] is False


class TestVoteRepository:
    async def test_insert_returns_vote(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(_vote_row(stance=False, points_staked=20)))
        vote = await VoteRepository().insert_vote(db, "u1", "m1", False, 20)
        assert vote.stance is False
        assert vote.points_staked == 20

    async def test_unique_violation_maps_to_already_voted(self, db) -> None:
        orig = Exception('duplicate key value violates unique constraint "uq_votes_user_market"')
        db.execute = AsyncMock(side_effect=IntegrityError("INSERT INTO votes", {}, orig))
        with pytest.raises(AlreadyVotedError):
            await VoteRepository().insert_vote(db, "u1", "m1", True, 10)

    async def test_other_integrity_errors_propagate(self, db) -> None:
        orig = Exception('violates check constraint "ck_votes_points_staked_gt_0"')
        db.execute = AsyncMock(side_effect=IntegrityError("INSERT INTO votes", {}, orig))
        with pytest.raises(IntegrityError):
            await VoteRepository().insert_vote(db, "u1", "m1", True, 10)

    async def test_get_user_vote_none(self, db) -> None:
        db.execute = AsyncMock(return_value=_result())
        assert await VoteRepository().get_user_vote(db, "u1", "m1") is None

    async def test_list_votes_for_user_builds_portfolio(self, db) -> None:
        row = _vote_row()
        row.market_title = "Will it rain?"
        row.market_resolved = True
        row.market_outcome = False
        db.execute = AsyncMock(return_value=_result(row))

        entries = await VoteRepository().list_votes_for_user(db, "u1", 10)

        assert len(entries) == 1
        assert entries[0].market_title == "Will it rain?"
        assert entries[0].correct is False
