# gallery/services/broadcaster.py
# Real-time fan-out to connected WebSocket viewers

from __future__ import annotations
import logging
from typing import Any, List

from fastapi import WebSocket

logger = logging.getLogger(__name__)

GALLERY_UPDATED = "gallery_updated"


class Broadcaster:
    def __init__(self) -> None:
        # process-wide subscriber set (one event loop, no lock needed)
        self._subscribers: List[WebSocket] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def connect(self, websocket: WebSocket) -> None:
        if websocket not in self._subscribers:
            self._subscribers.append(websocket)
        logger.info(f"viewer connected ({len(self._subscribers)} live)")

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self._subscribers:
            self._subscribers.remove(websocket)
            logger.info(f"viewer disconnected ({len(self._subscribers)} live)")

    async def send(self, websocket: WebSocket, event: str, data: Any) -> bool:
        try:
            await websocket.send_json({"event": event, "data": data})
            return True
        except Exception as e:
            logger.warning(f"dropping subscriber after failed send: {e}")
            self.disconnect(websocket)
            return False

    async def broadcast(self, event: str, data: Any) -> int:
        sent = 0
        # copy: send() may drop dead sockets while iterating
        for ws in list(self._subscribers):
            if await self.send(ws, event, data):
                sent += 1
        logger.info(f"broadcast {event} to {sent} subscriber(s)")
        return sent

    async def publish_gallery(self, photos) -> int:
        """Re-read the newest-first list from the record store and push it to everyone."""
        records = await photos.list_newest_first()
        return await self.broadcast(GALLERY_UPDATED, [r.to_json() for r in records])

    async def close(self) -> None:
        for ws in list(self._subscribers):
            try:
                await ws.close()
            except Exception as e:
                logger.debug(f"subscriber close failed: {e}")
        self._subscribers.clear()
