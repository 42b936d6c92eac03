"""Domain models for pm_market — pure dataclasses, no SQLAlchemy dependency."""

import math
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class MarketStats:
    """Aggregates derived from a market's votes. Never edited by hand."""

    stake_count: int = 0
    total_points: int = 0
    yes_count: int = 0
    no_count: int = 0
    yes_points: int = 0
    no_points: int = 0


@dataclass
class PredictionMarket:
    id: str
    owner_id: str
    title: str
    description: str | None
    category: str | None
    resolution_deadline: datetime
    resolved: bool
    outcome: bool | None              # set exactly once, together with resolved
    stake_count: int
    total_points: int
    yes_count: int
    no_count: int
    yes_points: int
    no_points: int
    resolved_at: datetime | None
    created_at: datetime
    updated_at: datetime

    @property
    def yes_percentage(self) -> int:
        votes = self.yes_count + self.no_count
        # half-up rounding in integer arithmetic
        return (self.yes_count * 200 + votes) // (2 * votes) if votes > 0 else 0

    @property
    def no_percentage(self) -> int:
        return 100 - self.yes_percentage if self.yes_count + self.no_count > 0 else 0

    def deadline_passed(self, now: datetime) -> bool:
        return now >= self.resolution_deadline

    def time_remaining(self, now: datetime) -> str:
        """Whole days left, rounded up, e.g. "3d"; "Ended" once the deadline is reached."""
        seconds_left = (self.resolution_deadline - now).total_seconds()
        days_left = max(0, math.ceil(seconds_left / 86400))
        return f"{days_left}d" if days_left > 0 else "Ended"
