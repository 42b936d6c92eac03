"""Pydantic schemas for pm_market API requests and responses.

Cursor format for markets (VARCHAR PK, not sequential):
  {"ts": "<created_at ISO>", "id": "<market_id>"}
  Encoded as Base64 JSON string.
"""

import base64
import json
from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator

from src.pm_common.datetime_utils import to_iso
from src.pm_market.domain.models import PredictionMarket

# ---------------------------------------------------------------------------
# Cursor utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_market: PredictionMarket) -> str:
    """Encode composite cursor from last market in page."""
    payload = {
        "ts": last_market.created_at.isoformat(),
        "id": last_market.id,
    }
    return base64.b64encode(json.dumps(payload).encode()).decode()


def cursor_decode(cursor: str | None) -> tuple[str | None, str | None]:
    """Decode composite cursor -> (ts_iso, market_id), or (None, None) on error."""
    if cursor is None:
        return None, None
    try:
        data = json.loads(base64.b64decode(cursor.encode()).decode())
        ts, market_id = data["ts"], data["id"]
        # the repository binds ts as TIMESTAMPTZ
        datetime.fromisoformat(ts)
        if not isinstance(market_id, str):
            return None, None
        return ts, market_id
    except Exception:
        return None, None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateMarketRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = Field(None, max_length=5000)
    category: str | None = Field(None, max_length=64)
    resolution_deadline: datetime

    @field_validator("resolution_deadline")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Naive timestamps are interpreted as UTC."""
        return v if v.tzinfo is not None else v.replace(tzinfo=UTC)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class MarketSnapshot(BaseModel):
    """Full public state of a market. Also the payload broadcast on change."""

    id: str
    owner_id: str
    title: str
    description: str | None
    category: str | None
    resolution_deadline: str
    resolved: bool
    outcome: bool | None
    stake_count: int
    total_points: int
    yes_count: int
    no_count: int
    yes_points: int
    no_points: int
    yes_percentage: int
    no_percentage: int
    time_remaining: str
    resolved_at: str | None
    created_at: str

    @classmethod
    def from_domain(cls, m: PredictionMarket, now: datetime) -> "MarketSnapshot":
        return cls(
            id=m.id,
            owner_id=m.owner_id,
            title=m.title,
            description=m.description,
            category=m.category,
            resolution_deadline=m.resolution_deadline.isoformat(),
            resolved=m.resolved,
            outcome=m.outcome,
            stake_count=m.stake_count,
            total_points=m.total_points,
            yes_count=m.yes_count,
            no_count=m.no_count,
            yes_points=m.yes_points,
            no_points=m.no_points,
            yes_percentage=m.yes_percentage,
            no_percentage=m.no_percentage,
            time_remaining=m.time_remaining(now),
            resolved_at=to_iso(m.resolved_at),
            created_at=m.created_at.isoformat(),
        )


class MyVote(BaseModel):
    stance: bool
    points_staked: int
    created_at: str | None


class MarketDetail(MarketSnapshot):
    my_vote: MyVote | None = None


class MarketListResponse(BaseModel):
    items: list[MarketSnapshot]
    next_cursor: str | None
    has_more: bool
