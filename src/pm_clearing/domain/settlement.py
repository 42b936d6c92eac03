"""Parimutuel settlement arithmetic: pure, no I/O.

Winners get their stake back plus a share of the losing pool proportional
to their stake:  payout = stake + floor(stake * total_loser / total_winner).
Losers get nothing. Integer floor means the sum of payouts never exceeds the
pool; the leftover (rounding dust, or the whole pool when nobody picked the
outcome) is reported as undistributed and simply leaves circulation.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from src.pm_stake.domain.models import Vote


@dataclass(frozen=True)
class SettlementEntry:
    user_id: str
    points_staked: int
    payout: int
    correct: bool


@dataclass(frozen=True)
class SettlementPlan:
    outcome: bool
    entries: list[SettlementEntry]
    total_winner_points: int
    total_loser_points: int

    @property
    def pool(self) -> int:
        return self.total_winner_points + self.total_loser_points

    @property
    def distributed(self) -> int:
        return sum(e.payout for e in self.entries)

    @property
    def undistributed_points(self) -> int:
        return self.pool - self.distributed

    @property
    def winner_count(self) -> int:
        return sum(1 for e in self.entries if e.correct)


def compute_payout(points_staked: int, total_winner: int, total_loser: int) -> int:
    if total_winner <= 0:
        return 0
    return points_staked + (points_staked * total_loser) // total_winner


def compute_settlement(votes: Sequence[Vote], outcome: bool) -> SettlementPlan:
    """Entries are ordered by user_id, the same order accounts are locked in."""
    total_winner = sum(v.points_staked for v in votes if v.stance == outcome)
    total_loser = sum(v.points_staked for v in votes if v.stance != outcome)

    entries = []
    for vote in sorted(votes, key=lambda v: v.user_id):
        correct = vote.stance == outcome
        payout = compute_payout(vote.points_staked, total_winner, total_loser) if correct else 0
        entries.append(
            SettlementEntry(
                user_id=vote.user_id,
                points_staked=vote.points_staked,
                payout=payout,
                correct=correct,
            )
        )
    return SettlementPlan(
        outcome=outcome,
        entries=entries,
        total_winner_points=total_winner,
        total_loser_points=total_loser,
    )
