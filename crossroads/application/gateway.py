import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from crossroads.application import events
from crossroads.application.broadcaster import Broadcaster
from crossroads.application.events import ClientEvent
from crossroads.application.sessions import SessionRegistry, MessageLog, generate_id, utcnow
from crossroads.domain.models import (
    ChatMessage, ConnectRequest, ChatRequest, EmergencyRequest, LocationRequest
)
from crossroads.domain import config

logger = logging.getLogger(__name__)

class ChatGateway:
    """Handles the client side of the broadcast channel.

    Every open socket receives traffic updates. Only sockets that sent a
    ``connect`` frame take part in chat, locations and emergencies.
    """

    def __init__(self, kernel, sessions: Optional[SessionRegistry] = None,
                 messages: Optional[MessageLog] = None, broadcaster: Optional[Broadcaster] = None):
        self.kernel = kernel
        self.sessions = sessions or SessionRegistry()
        self.messages = messages or MessageLog()
        self.broadcaster = broadcaster or Broadcaster()
        self._handlers = {
            ClientEvent.CONNECT.value: self._on_connect,
            ClientEvent.MESSAGE.value: self._on_message,
            ClientEvent.EMERGENCY.value: self._on_emergency,
            ClientEvent.LOCATION.value: self._on_location,
        }

    # Connection lifecycle

    async def open(self, websocket: Any):
        self.broadcaster.add(websocket)
        await self.broadcaster.send(websocket, events.traffic_update(self.kernel.get_status()))

    async def close(self, websocket: Any):
        self.broadcaster.remove(websocket)
        session = self.sessions.find_by_socket(websocket)
        if session is None:
            return
        self.sessions.unregister(session.user_id)
        await self.broadcast_users()
        await self.broadcast_locations()

    async def publish_traffic(self) -> int:
        return await self.broadcaster.broadcast(events.traffic_update(self.kernel.get_status()))

    # Fan-out to registered users

    async def broadcast_users(self):
        await self.broadcaster.broadcast(events.user_list(self.sessions.user_list()), self.sessions.websockets())

    async def broadcast_locations(self):
        await self.broadcaster.broadcast(events.locations(self.sessions.location_list()), self.sessions.websockets())

    # Inbound frames

    async def handle(self, websocket: Any, raw: str) -> Optional[str]:
        """Dispatches one text frame, returns the handled type or None when ignored."""
        try:
            frame = json.loads(raw)
        except (TypeError, ValueError):
            logger.debug("Ignoring non-JSON frame: %r", raw)
            return None
        if not isinstance(frame, dict):
            return None

        kind = frame.get("type")
        handler = self._handlers.get(kind) if isinstance(kind, str) else None
        if handler is None:
            logger.debug("Ignoring frame of unknown type %r", kind)
            return None

        try:
            handled = await handler(websocket, frame)
        except ValidationError as e:
            logger.warning("Invalid %s frame: %s", kind, e.errors())
            return None
        return kind if handled else None

    async def _on_connect(self, websocket: Any, frame: dict) -> bool:
        request = ConnectRequest.model_validate(frame)
        session = self.sessions.register(websocket, request.userName)

        await self.broadcaster.send(
            websocket,
            events.connected(session.user_id, self.messages.recent(config.MESSAGE_HISTORY))
        )
        await self.broadcast_users()
        await self.broadcast_locations()
        return True

    async def _on_message(self, websocket: Any, frame: dict) -> bool:
        request = ChatRequest.model_validate(frame)
        sender = self.sessions.get(request.userId)
        if sender is None:
            logger.info("Sender not found for userId: %s", request.userId)
            return False

        message = self.messages.append(ChatMessage(
            id=generate_id(),
            userId=request.userId,
            userName=sender.user_name,
            content=request.content,
            timestamp=utcnow(),
            type=request.messageType or "normal"
        ))
        logger.info("Message sent by %s: %s", sender.user_name, request.content)
        await self.broadcaster.broadcast(events.new_message(message), self.sessions.websockets())
        return True

    async def _on_emergency(self, websocket: Any, frame: dict) -> bool:
        request = EmergencyRequest.model_validate(frame)
        sender = self.sessions.get(request.userId)
        if sender is None:
            return False

        message = self.messages.append(ChatMessage(
            id=generate_id(),
            userId=request.userId,
            userName=sender.user_name,
            content=config.EMERGENCY_CONTENT,
            timestamp=utcnow(),
            type="emergency"
        ))
        logger.warning("Emergency raised by %s (%s)", sender.user_name, request.userId)
        await self.broadcaster.broadcast(
            events.emergency(message, self.kernel.get_status()),
            self.sessions.websockets()
        )
        return True

    async def _on_location(self, websocket: Any, frame: dict) -> bool:
        request = LocationRequest.model_validate(frame)
        location = self.sessions.update_location(request.userId, request.latitude, request.longitude, request.accuracy)
        if location is None:
            return False
        await self.broadcast_locations()
        return True
