"""Outbound WebSocket payloads.

Every frame is a JSON object with a ``type`` field; these helpers build the
plain dicts so the broadcaster never has to know about pydantic.
"""
from enum import Enum
from typing import Dict, Iterable

from crossroads.domain.models import ChatMessage, DirectionStatus, UserSummary, UserLocation


class ServerEvent(str, Enum):
    TRAFFIC_UPDATE = "trafficUpdate"
    CONNECTED = "connected"
    USER_LIST = "userList"
    LOCATIONS = "locations"
    NEW_MESSAGE = "newMessage"
    EMERGENCY = "emergency"


class ClientEvent(str, Enum):
    CONNECT = "connect"
    MESSAGE = "message"
    EMERGENCY = "emergency"
    LOCATION = "location"


def dump_status(status: Dict[str, DirectionStatus]) -> dict:
    return {direction: info.model_dump(mode="json") for direction, info in status.items()}


def traffic_update(status: Dict[str, DirectionStatus]) -> dict:
    return {"type": ServerEvent.TRAFFIC_UPDATE.value, "data": dump_status(status)}


def connected(user_id: str, history: Iterable[ChatMessage]) -> dict:
    return {
        "type": ServerEvent.CONNECTED.value,
        "userId": user_id,
        "messages": [m.model_dump(mode="json") for m in history],
    }


def user_list(users: Iterable[UserSummary]) -> dict:
    return {"type": ServerEvent.USER_LIST.value, "users": [u.model_dump(mode="json") for u in users]}


def locations(entries: Iterable[UserLocation]) -> dict:
    return {"type": ServerEvent.LOCATIONS.value, "locations": [e.model_dump(mode="json") for e in entries]}


def new_message(message: ChatMessage) -> dict:
    return {"type": ServerEvent.NEW_MESSAGE.value, "message": message.model_dump(mode="json")}


def emergency(message: ChatMessage, status: Dict[str, DirectionStatus]) -> dict:
    return {
        "type": ServerEvent.EMERGENCY.value,
        "message": message.model_dump(mode="json"),
        "trafficData": dump_status(status),
    }
