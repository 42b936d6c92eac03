"""Pydantic schemas for pm_account API."""

from pydantic import BaseModel

from src.pm_account.domain.models import LeaderboardEntry, PointAccount


class PointsResponse(BaseModel):
    user_id: str
    balance: int
    lifetime_predictions_made: int
    lifetime_correct: int
    accuracy_percent: float

    @classmethod
    def from_domain(cls, account: PointAccount) -> "PointsResponse":
        return cls(
            user_id=account.user_id,
            balance=account.balance,
            lifetime_predictions_made=account.lifetime_predictions_made,
            lifetime_correct=account.lifetime_correct,
            accuracy_percent=float(account.accuracy_percent),
        )


class UserProfileResponse(BaseModel):
    user_id: str
    username: str
    balance: int
    lifetime_predictions_made: int
    lifetime_correct: int
    accuracy_percent: float

    @classmethod
    def from_domain(cls, entry: LeaderboardEntry) -> "UserProfileResponse":
        return cls(
            user_id=entry.user_id,
            username=entry.username,
            balance=entry.balance,
            lifetime_predictions_made=entry.lifetime_predictions_made,
            lifetime_correct=entry.lifetime_correct,
            accuracy_percent=float(entry.accuracy_percent),
        )


class LeaderboardItem(UserProfileResponse):
    rank: int


class LeaderboardResponse(BaseModel):
    items: list[LeaderboardItem]
    limit: int
    offset: int
