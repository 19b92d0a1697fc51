import logging
import random
import string
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional

from crossroads.domain.models import ChatMessage, Location, UserSummary, UserLocation
from crossroads.domain import config

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits

def generate_id(length: int = 9) -> str:
    return "".join(random.choices(_ID_ALPHABET, k=length))

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class UserSession:
    def __init__(self, user_id: str, user_name: Optional[str], websocket: Any = None):
        self.user_id = user_id
        self.user_name = user_name
        self.websocket = websocket
        self.location: Optional[Location] = None

class SessionRegistry:
    """Connected users keyed by the id handed out on ``connect``."""

    def __init__(self):
        self.sessions: Dict[str, UserSession] = {}

    def __len__(self):
        return len(self.sessions)

    def __contains__(self, user_id):
        return user_id in self.sessions

    def register(self, websocket: Any, user_name: Optional[str]) -> UserSession:
        # One registration per socket, a repeated connect replaces the old one
        previous = self.find_by_socket(websocket)
        if previous is not None:
            self.unregister(previous.user_id)

        session = UserSession(generate_id(), user_name, websocket)
        self.sessions[session.user_id] = session
        logger.info("User %s registered as %s (%d online)", user_name, session.user_id, len(self.sessions))
        return session

    def unregister(self, user_id: str) -> Optional[UserSession]:
        session = self.sessions.pop(user_id, None)
        if session is not None:
            logger.info("User %s (%s) disconnected", session.user_name, user_id)
        return session

    def get(self, user_id: Optional[str]) -> Optional[UserSession]:
        if user_id is None:
            return None
        return self.sessions.get(user_id)

    def find_by_socket(self, websocket: Any) -> Optional[UserSession]:
        for session in self.sessions.values():
            if session.websocket is websocket:
                return session
        return None

    def update_location(self, user_id: str, latitude: float, longitude: float,
                        accuracy: Optional[float] = None) -> Optional[Location]:
        session = self.get(user_id)
        if session is None:
            return None
        session.location = Location(
            latitude=latitude,
            longitude=longitude,
            accuracy=accuracy or 0.0,
            timestamp=utcnow()
        )
        return session.location

    def websockets(self) -> List[Any]:
        return [s.websocket for s in self.sessions.values() if s.websocket is not None]

    def user_list(self) -> List[UserSummary]:
        return [UserSummary(userId=s.user_id, userName=s.user_name) for s in self.sessions.values()]

    def location_list(self) -> List[UserLocation]:
        return [
            UserLocation(userId=s.user_id, userName=s.user_name, location=s.location)
            for s in self.sessions.values()
        ]

class MessageLog:
    """Chat history kept in memory, oldest entries fall off past the limit."""

    def __init__(self, limit: int = config.MESSAGE_LOG_LIMIT):
        self.messages: Deque[ChatMessage] = deque(maxlen=limit)

    def __len__(self):
        return len(self.messages)

    def append(self, message: ChatMessage) -> ChatMessage:
        self.messages.append(message)
        return message

    def recent(self, count: int = config.MESSAGE_HISTORY) -> List[ChatMessage]:
        if count <= 0:
            return []
        return list(self.messages)[-count:]
