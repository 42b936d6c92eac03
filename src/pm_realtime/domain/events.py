"""Market change events published after a committed stake or resolution.

Wire format (one JSON object per message on the market updates channel):
  {"type": "vote_update" | "market_resolved", "market_id": "...", "market": {...}}
"""

import json
from dataclasses import dataclass
from typing import Any

from src.pm_common.enums import MarketEventType


@dataclass(frozen=True)
class MarketEvent:
    event_type: MarketEventType
    market_id: str
    market: dict[str, Any]

    def to_json(self) -> str:
        return json.dumps(
            {
                "type": self.event_type.value,
                "market_id": self.market_id,
                "market": self.market,
            }
        )
