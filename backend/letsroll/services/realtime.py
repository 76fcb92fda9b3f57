"""Room-based WebSocket relay for campaign sessions.

Each campaign has one room. Chat and dice messages sent to a room are pushed
to the sockets that joined it; nothing is stored, ordered or replayed, and a
message sent to an empty room is simply dropped. Room membership lives in
this process only.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class CampaignRoomManager:
    """Manages WebSocket connections grouped by campaign room."""

    def __init__(self) -> None:
        self._rooms: Dict[str, Set[WebSocket]] = {}
        self._lock = asyncio.Lock()

    @staticmethod
    def room_key(campaign_id: Any) -> str:
        return str(campaign_id).strip()

    async def join(self, campaign_id: Any, websocket: WebSocket) -> None:
        key = self.room_key(campaign_id)
        async with self._lock:
            self._rooms.setdefault(key, set()).add(websocket)

    async def leave(self, campaign_id: Any, websocket: WebSocket) -> None:
        key = self.room_key(campaign_id)
        async with self._lock:
            self._discard(key, websocket)

    async def leave_all(self, websocket: WebSocket) -> List[str]:
        """Drop ``websocket`` from every room; returns the rooms it left."""
        async with self._lock:
            left = [key for key, sockets in self._rooms.items() if websocket in sockets]
            for key in left:
                self._discard(key, websocket)
        return left

    def _discard(self, key: str, websocket: WebSocket) -> None:
        sockets = self._rooms.get(key)
        if sockets is None:
            return
        sockets.discard(websocket)
        if not sockets:
            del self._rooms[key]

    def in_room(self, campaign_id: Any, websocket: WebSocket) -> bool:
        return websocket in self._rooms.get(self.room_key(campaign_id), set())

    def room_size(self, campaign_id: Any) -> int:
        return len(self._rooms.get(self.room_key(campaign_id), set()))

    async def broadcast(
        self,
        campaign_id: Any,
        event: str,
        data: Any,
        *,
        exclude: Optional[WebSocket] = None,
    ) -> int:
        """Send ``{"event", "data"}`` to the room; returns how many sockets got it."""
        key = self.room_key(campaign_id)
        async with self._lock:
            connections = [ws for ws in self._rooms.get(key, set()) if ws is not exclude]

        frame = {"event": event, "data": data}
        delivered = 0
        for websocket in connections:
            try:
                await websocket.send_json(frame)
            except Exception:
                logger.debug("Dropping dead socket from room %s", key)
                await self.leave(key, websocket)
            else:
                delivered += 1
        return delivered


room_manager = CampaignRoomManager()
