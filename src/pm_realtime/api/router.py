"""WebSocket relay: WS /ws streams every market change event to the client.

Each connection holds its own Redis pub/sub subscription; messages are
forwarded verbatim (see src/pm_realtime/domain/events.py for the format).
The connection lives as long as both directions do: a client disconnect
stops the relay, and a dead relay closes the client socket.
"""

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from config.settings import settings
from src.pm_common.redis_client import get_redis

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


async def _drain_client(websocket: WebSocket) -> None:
    """Consume inbound frames until the client goes away."""
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("WebSocket client disconnected")


async def _relay(websocket: WebSocket, pubsub) -> None:  # type: ignore[no-untyped-def]
    async for message in pubsub.listen():
        if message.get("type") != "message":
            continue
        await websocket.send_text(message["data"])


@router.websocket("/ws")
async def market_updates(websocket: WebSocket) -> None:
    await websocket.accept()
    redis = await get_redis()
    pubsub = redis.pubsub()
    await pubsub.subscribe(settings.MARKET_UPDATES_CHANNEL)

    relay = asyncio.create_task(_relay(websocket, pubsub))
    drain = asyncio.create_task(_drain_client(websocket))
    try:
        await asyncio.wait({relay, drain}, return_when=asyncio.FIRST_COMPLETED)
        if relay.done():
            exc = None if relay.cancelled() else relay.exception()
            logger.warning("Market update relay stopped: %r", exc)
            try:
                await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
            except Exception:
                # socket already gone (e.g. send_text failed on a dead client)
                logger.debug("WebSocket already closed", exc_info=True)
    finally:
        for task in (relay, drain):
            task.cancel()
        await asyncio.gather(relay, drain, return_exceptions=True)
        try:
            await pubsub.unsubscribe(settings.MARKET_UPDATES_CHANNEL)
            await pubsub.aclose()
        except Exception:
            logger.warning("Failed to release pub/sub subscription", exc_info=True)
