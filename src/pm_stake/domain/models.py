"""Domain models for pm_stake: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Vote:
    """A stake on one side of a market. Immutable: the audit record payouts are computed from."""

    id: str
    user_id: str
    market_id: str
    stance: bool            # True = YES
    points_staked: int      # > 0
    created_at: datetime | None = None


@dataclass(frozen=True)
class PortfolioEntry:
    vote: Vote
    market_title: str
    market_resolved: bool
    market_outcome: bool | None

    @property
    def correct(self) -> bool | None:
        if not self.market_resolved or self.market_outcome is None:
            return None
        return self.vote.stance == self.market_outcome
