from datetime import datetime
from enum import Enum
from typing import List, Optional, Dict
from pydantic import BaseModel, Field

from crossroads.domain.errors import UnknownDirectionError
from crossroads.domain import config

class Direction(str, Enum):
    NORTH = "North"
    SOUTH = "South"
    EAST = "East"
    WEST = "West"

    @classmethod
    def parse(cls, value: str) -> "Direction":
        """Case-insensitive lookup, e.g. "north" -> Direction.NORTH"""
        if isinstance(value, cls):
            return value
        for direction in cls:
            if direction.value.lower() == str(value).strip().lower():
                return direction
        raise UnknownDirectionError(value)

class VehicleGroup(BaseModel):
    direction: Direction
    is_second_group: bool = False
    speed: float # km/h
    max_speed: float # km/h
    distance_traveled: float = 0.0 # km
    time_elapsed: float = 0.0 # s
    has_reached: bool = False
    volume: int = 0 # vehicles in the group

class GroupStatus(BaseModel):
    direction: Direction
    currentSpeed: float
    volume: int
    distanceTraveled: float
    timeElapsed: float
    hasReached: bool
    estimatedTimeToReach: Optional[float] = None # None while standing still

class GroupVolumes(BaseModel):
    total: int = 0
    first: int = 0
    second: int = 0

class DirectionStatus(BaseModel):
    firstGroup: GroupStatus
    secondGroup: GroupStatus
    maxSpeed: float
    density: float
    volumes: GroupVolumes

TrafficStatus = Dict[str, DirectionStatus]

class Location(BaseModel):
    latitude: float
    longitude: float
    accuracy: float = 0.0
    timestamp: datetime

class ChatMessage(BaseModel):
    id: str
    userId: str
    userName: Optional[str] = None
    content: Optional[str] = None
    timestamp: datetime
    type: str = "normal" # "normal", "emergency" or client supplied

class UserSummary(BaseModel):
    userId: str
    userName: Optional[str] = None

class UserLocation(BaseModel):
    userId: str
    userName: Optional[str] = None
    location: Optional[Location] = None

# Inbound WebSocket Payloads

class ConnectRequest(BaseModel):
    userName: Optional[str] = None

class ChatRequest(BaseModel):
    userId: str
    content: Optional[str] = None
    messageType: Optional[str] = None

class EmergencyRequest(BaseModel):
    userId: str

class LocationRequest(BaseModel):
    userId: str
    latitude: float = Field(allow_inf_nan=False)
    longitude: float = Field(allow_inf_nan=False)
    accuracy: Optional[float] = Field(None, allow_inf_nan=False)

# API/Request Models

class MaxSpeedUpdate(BaseModel):
    maxSpeed: float = Field(gt=0, le=config.MAX_SPEED_LIMIT, allow_inf_nan=False)

class DensityUpdate(BaseModel):
    # Negative values are accepted and clamped to 0 by the kernel
    density: float = Field(le=config.MAX_DENSITY, allow_inf_nan=False)

class AssistantRequest(BaseModel):
    prompt: Optional[str] = None
    userId: Optional[str] = None

# API/Response Models

class MaxSpeedResult(BaseModel):
    success: bool
    data: DirectionStatus

class DensityResult(BaseModel):
    success: bool
    direction: Direction
    density: float

class SpeedPrediction(BaseModel):
    direction: Direction
    maxSpeed: float
    predictedSpeed: float

class AssistantReply(BaseModel):
    reply: str
    suggestions: List[str]
    statusSnapshot: TrafficStatus

class ErrorResult(BaseModel):
    success: bool = False
    message: str
