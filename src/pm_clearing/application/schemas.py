"""Pydantic schemas for market resolution."""

from pydantic import BaseModel, StrictBool

from src.pm_clearing.domain.settlement import SettlementEntry, SettlementPlan
from src.pm_market.application.schemas import MarketSnapshot


class ResolveRequest(BaseModel):
    outcome: StrictBool


class PayoutItem(BaseModel):
    user_id: str
    points_staked: int
    payout: int
    correct: bool

    @classmethod
    def from_entry(cls, e: SettlementEntry) -> "PayoutItem":
        return cls(
            user_id=e.user_id,
            points_staked=e.points_staked,
            payout=e.payout,
            correct=e.correct,
        )


class ResolveResponse(BaseModel):
    market: MarketSnapshot
    outcome: bool
    total_winner_points: int
    total_loser_points: int
    distributed_points: int
    undistributed_points: int
    winner_count: int
    payouts: list[PayoutItem]

    @classmethod
    def build(cls, market: MarketSnapshot, plan: SettlementPlan) -> "ResolveResponse":
        return cls(
            market=market,
            outcome=plan.outcome,
            total_winner_points=plan.total_winner_points,
            total_loser_points=plan.total_loser_points,
            distributed_points=plan.distributed,
            undistributed_points=plan.undistributed_points,
            winner_count=plan.winner_count,
            payouts=[PayoutItem.from_entry(e) for e in plan.entries if e.correct],
        )
