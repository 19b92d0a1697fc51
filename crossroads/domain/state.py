from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict
from crossroads.domain.models import VehicleGroup, GroupVolumes
from crossroads.domain.graph import RoadNetwork

class SimulationState(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    tick_id: int = 0
    time: float = 0.0
    first_groups: Dict[str, VehicleGroup] = {}
    second_groups: Dict[str, VehicleGroup] = {}
    densities: Dict[str, float] = {}
    max_speeds: Dict[str, float] = {}
    volumes: Dict[str, GroupVolumes] = {}

    # Approach roads
    road_network: Optional[RoadNetwork] = None
