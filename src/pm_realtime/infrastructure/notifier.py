"""Change notifier: fire-and-forget publish of market snapshots to Redis.

Called only after the database transaction has committed. notify() returns
as soon as the publish is scheduled; the publish itself runs as a background
task, bounded by a timeout. A failed or slow publish is logged and dropped.
"""

import asyncio
import logging
from typing import Any, Protocol

from config.settings import settings
from src.pm_common.enums import MarketEventType
from src.pm_common.redis_client import get_redis
from src.pm_realtime.domain.events import MarketEvent

logger = logging.getLogger(__name__)

# strong references: the event loop only keeps weak ones to running tasks
_pending: set[asyncio.Task[None]] = set()


class ChangeNotifierProtocol(Protocol):
    async def notify(
        self, event_type: MarketEventType, market_id: str, snapshot: dict[str, Any]
    ) -> None: ...


async def drain_pending() -> None:
    """Wait for in-flight publishes. Called on shutdown before Redis is closed."""
    if _pending:
        await asyncio.gather(*_pending, return_exceptions=True)


class RedisChangeNotifier:
    def __init__(self, channel: str | None = None, timeout: float | None = None) -> None:
        self._channel = channel or settings.MARKET_UPDATES_CHANNEL
        self._timeout = timeout if timeout is not None else settings.NOTIFY_TIMEOUT_SECONDS

    async def notify(
        self, event_type: MarketEventType, market_id: str, snapshot: dict[str, Any]
    ) -> None:
        event = MarketEvent(event_type=event_type, market_id=market_id, market=snapshot)
        task = asyncio.create_task(self._publish(event))
        _pending.add(task)
        task.add_done_callback(_pending.discard)

    async def _publish(self, event: MarketEvent) -> None:
        try:
            redis = await get_redis()
            await asyncio.wait_for(
                redis.publish(self._channel, event.to_json()), timeout=self._timeout
            )
        except Exception:
            logger.warning(
                "Failed to publish %s for market %s", event.event_type.value, event.market_id,
                exc_info=True,
            )
