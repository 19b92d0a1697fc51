import logging
from typing import Any, Iterable, List

logger = logging.getLogger(__name__)

class Broadcaster:
    """Keeps every open socket and fans JSON frames out to them."""

    def __init__(self):
        self.connections: List[Any] = []

    def __len__(self):
        return len(self.connections)

    def add(self, websocket: Any):
        if websocket not in self.connections:
            self.connections.append(websocket)
        logger.info("New client connected, total connections: %d", len(self.connections))

    def remove(self, websocket: Any):
        if websocket in self.connections:
            self.connections.remove(websocket)
        logger.info("Client disconnected, total connections: %d", len(self.connections))

    async def send(self, websocket: Any, payload: dict) -> bool:
        try:
            await websocket.send_json(payload)
            return True
        except Exception as e:
            # A dead socket gets cleaned up by its own receive loop
            logger.warning("Error sending %s frame: %s", payload.get("type"), e)
            return False

    async def broadcast(self, payload: dict, websockets: Iterable[Any] = None) -> int:
        """Sends to the given sockets (all open ones by default), returns how many succeeded."""
        targets = list(self.connections if websockets is None else websockets)
        delivered = 0
        for websocket in targets:
            if await self.send(websocket, payload):
                delivered += 1
        return delivered
