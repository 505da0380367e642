"""
Realtime notification hub.
Tracks authenticated websocket connections in per-user rooms and pushes events.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Any, Dict, List, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


def user_room(user_id: str) -> str:
    return f"user:{user_id}"


class NotificationHub:
    """Manage websocket connections grouped into rooms."""

    def __init__(self) -> None:
        self._rooms: Dict[str, Set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def join(self, websocket: WebSocket, user_id: str) -> None:
        async with self._lock:
            self._rooms[user_room(user_id)].add(websocket)

    async def leave(self, websocket: WebSocket, user_id: str) -> None:
        room = user_room(user_id)
        async with self._lock:
            clients = self._rooms.get(room)
            if clients:
                clients.discard(websocket)
                if not clients:
                    self._rooms.pop(room, None)

    def connection_count(self, user_id: str) -> int:
        return len(self._rooms.get(user_room(user_id), ()))

    async def emit_to_user(self, user_id: str, event: str, data: Any) -> int:
        """
        Send ``{type, data}`` to every connection of a user.

        Returns:
            Number of connections that received the event
        """
        return await self._fanout(user_room(user_id), {"type": event, "data": data})

    async def broadcast(self, event: str, data: Any) -> int:
        """Send an event to every connected client."""
        async with self._lock:
            rooms = list(self._rooms)
        delivered = 0
        for room in rooms:
            delivered += await self._fanout(room, {"type": event, "data": data})
        return delivered

    async def _fanout(self, room: str, payload: Dict[str, Any]) -> int:
        async with self._lock:
            clients: List[WebSocket] = list(self._rooms.get(room, set()))
        if not clients:
            return 0

        dead: List[WebSocket] = []
        for ws in clients:
            try:
                await ws.send_json(payload)
            except Exception as exc:
                logger.debug(f"Dropping websocket in {room}: {exc}")
                dead.append(ws)

        if dead:
            async with self._lock:
                remaining = self._rooms.get(room)
                if remaining:
                    for ws in dead:
                        remaining.discard(ws)
                    if not remaining:
                        self._rooms.pop(room, None)

        return len(clients) - len(dead)
