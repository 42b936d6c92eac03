"""Domain models for pm_account — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class PointAccount:
    user_id: str
    balance: int                      # points, never negative
    lifetime_predictions_made: int
    lifetime_correct: int
    accuracy_percent: Decimal         # stored NUMERIC(5,2), derived from the two counters
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class LeaderboardEntry:
    user_id: str
    username: str
    balance: int
    lifetime_predictions_made: int
    lifetime_correct: int
    accuracy_percent: Decimal

