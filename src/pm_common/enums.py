"""Global enums: string values are part of the API and pub/sub contracts."""

from enum import Enum


class MarketStatusFilter(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"
    ALL = "all"


class Stance(str, Enum):
    """Display label for a boolean stance/outcome (True = YES)."""
    YES = "YES"
    NO = "NO"

    @classmethod
    def from_bool(cls, value: bool) -> "Stance":
        return cls.YES if value else cls.NO


class MarketEventType(str, Enum):
    VOTE_UPDATE = "vote_update"
    MARKET_RESOLVED = "market_resolved"
