import json
import logging
from typing import Dict, Optional, Set

from fastapi.websockets import WebSocket

logger = logging.getLogger(__name__)


class ConnectionHub:
    """Open WebSocket connections, globally and grouped into per-quiz rooms."""

    def __init__(self) -> None:
        self.clients: Set[WebSocket] = set()
        self.rooms: Dict[str, Set[WebSocket]] = {}

    # --- connections ---

    async def register(self, ws: WebSocket) -> None:
        await ws.accept()
        self.clients.add(ws)
        logger.debug("Client connected, total=%d", len(self.clients))

    async def unregister(self, ws: WebSocket) -> None:
        """Forget a connection and drop it from every room it joined."""
        self.clients.discard(ws)
        for room in list(self.rooms):
            self.leave(room, ws)
        logger.debug("Client disconnected, remaining=%d", len(self.clients))

    def join(self, room: str, ws: WebSocket) -> None:
        self.rooms.setdefault(room, set()).add(ws)
        logger.debug("Joined room %s (%d members)", room, len(self.rooms[room]))

    def leave(self, room: str, ws: WebSocket) -> None:
        members = self.rooms.get(room)
        if members is None:
            return
        members.discard(ws)
        # empty rooms are removed
        if not members:
            del self.rooms[room]

    def members(self, room: Optional[str]) -> Set[WebSocket]:
        if room is None:
            return set(self.clients)
        return set(self.rooms.get(room, ()))

    # --- delivery ---

    async def broadcast(self, room: Optional[str], message: dict) -> int:
        """
        Send ``message`` to everyone in ``room`` (or every client when room is
        None). Connections whose send fails are unregistered. Returns the
        number of successful sends.
        """
        targets = self.members(room)
        if not targets:
            return 0

        data = json.dumps(message)
        disconnected: list[WebSocket] = []
        sent_count = 0

        for ws in targets:
            try:
                await ws.send_text(data)
                sent_count += 1
            except Exception as e:
                logger.debug("Send failed, dropping connection: %s", e)
                disconnected.append(ws)

        for ws in disconnected:
            await self.unregister(ws)

        logger.debug(
            "Broadcast %s to %s: %d/%d delivered",
            message.get("type", "unknown"),
            room or "*",
            sent_count,
            len(targets),
        )
        return sent_count
