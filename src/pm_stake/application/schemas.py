"""Pydantic schemas for pm_stake API requests and responses."""

from pydantic import BaseModel, Field, StrictBool, StrictInt

from src.pm_common.datetime_utils import to_iso
from src.pm_market.application.schemas import MarketSnapshot
from src.pm_stake.domain.models import PortfolioEntry, Vote


class PlaceStakeRequest(BaseModel):
    # Strict: "true" / 1 are not accepted as a stance, true is not a stake
    stance: StrictBool
    points_staked: StrictInt = Field(..., gt=0)


class VoteItem(BaseModel):
    id: str
    market_id: str
    stance: bool
    points_staked: int
    created_at: str | None

    @classmethod
    def from_domain(cls, v: Vote) -> "VoteItem":
        return cls(
            id=v.id,
            market_id=v.market_id,
            stance=v.stance,
            points_staked=v.points_staked,
            created_at=to_iso(v.created_at),
        )


class StakeResponse(BaseModel):
    vote: VoteItem
    balance: int
    market: MarketSnapshot


class PortfolioItem(VoteItem):
    market_title: str
    market_resolved: bool
    market_outcome: bool | None
    correct: bool | None

    @classmethod
    def from_entry(cls, e: PortfolioEntry) -> "PortfolioItem":
        return cls(
            **VoteItem.from_domain(e.vote).model_dump(),
            market_title=e.market_title,
            market_resolved=e.market_resolved,
            market_outcome=e.market_outcome,
            correct=e.correct,
        )


class PortfolioResponse(BaseModel):
    items: list[PortfolioItem]
