import logging
import math
import random
from datetime import datetime
from typing import Callable, Dict, Optional

from crossroads.domain.models import (
    Direction, VehicleGroup, GroupVolumes, DirectionStatus
)
from crossroads.domain.state import SimulationState
from crossroads.domain.graph import RoadNetwork
from crossroads.domain.errors import InvalidParameterError
from crossroads.systems.vehicle_system import VehicleSystem, js_round
from crossroads.domain import config

logger = logging.getLogger(__name__)

def _checked(name: str, value, upper: float) -> float:
    """Rejects non-numbers, NaN, infinities and values above the accepted range."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(name, value, "not a number")
    if not math.isfinite(number):
        raise InvalidParameterError(name, value, "must be finite")
    if number > upper:
        raise InvalidParameterError(name, value, f"must not exceed {upper}")
    return number

class SimulationKernel:
    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self.state = SimulationState()
        self.dt = 1.0 # Fixed timestep, one tick per second
        self.rng = random.Random()
        self.vehicles = VehicleSystem(self.rng, clock)
        self.initialized = False
        self.seed: Optional[int] = None

    def initialize(self, seed: Optional[int] = config.SIMULATION_SEED):
        self.seed = seed
        self.rng.seed(seed)
        self.state.tick_id = 0
        self.state.time = 0.0
        self.state.road_network = RoadNetwork.four_way(config.DISTANCE_TO_TRAVEL)
        if not self.state.densities:
            self.state.densities = dict(config.DEFAULT_DENSITIES)
        if not self.state.max_speeds:
            self.state.max_speeds = dict(config.INITIAL_SPEEDS)
        self._initialize_groups()
        self._recalculate_volumes()
        self.initialized = True
        logger.info("Simulation kernel initialized (seed=%s)", seed)

    def _initialize_groups(self):
        self.state.first_groups = {}
        self.state.second_groups = {}
        for direction in config.DIRECTIONS:
            initial_speed = config.INITIAL_SPEEDS[direction]
            max_speed = self.state.max_speeds[direction]
            # Second group starts at half speed behind the first one
            self.state.first_groups[direction] = VehicleGroup(
                direction=Direction(direction),
                speed=min(initial_speed, max_speed),
                max_speed=max_speed
            )
            self.state.second_groups[direction] = VehicleGroup(
                direction=Direction(direction),
                is_second_group=True,
                speed=min(initial_speed / 2, max_speed),
                max_speed=max_speed
            )

    def _recalculate_volumes(self):
        for direction in config.DIRECTIONS:
            density = self.state.densities.get(direction, 0.0)
            total = max(1, js_round(density * config.DISTANCE_TO_TRAVEL))
            # Vehicles closer to the intersection form the first group
            first = math.ceil(total * config.FIRST_GROUP_SHARE)
            second = max(0, total - first)
            self.state.volumes[direction] = GroupVolumes(total=total, first=first, second=second)
            self.state.first_groups[direction].volume = first
            self.state.second_groups[direction].volume = second

    def approach_length(self, direction: str) -> float:
        return self.state.road_network.approach_length(direction)

    def execute(self, command):
        """Applies a command right away and returns its result."""
        if not self.initialized:
            self.initialize()
        return command.execute(self)

    def run_tick(self):
        if not self.initialized:
            self.initialize()

        # 1. Densities may have changed since the last tick
        self._recalculate_volumes()

        # 2. Move groups, all first groups before the second ones
        for groups in (self.state.first_groups, self.state.second_groups):
            for direction, group in groups.items():
                self.vehicles.update(
                    group,
                    self.state.densities.get(direction, 0.0),
                    self.approach_length(direction),
                    self.dt
                )

        # 3. Advance Time
        self.state.time += self.dt
        self.state.tick_id += 1

    def set_density(self, direction: str, density: float) -> float:
        key = Direction.parse(direction).value
        value = max(0.0, _checked("density", density or 0, config.MAX_DENSITY))
        self.state.densities[key] = value
        self._recalculate_volumes()
        return self.state.densities[key]

    def set_max_speed(self, direction: str, max_speed: float) -> DirectionStatus:
        key = Direction.parse(direction).value
        value = _checked("max speed", max_speed, config.MAX_SPEED_LIMIT)
        if value <= 0:
            raise InvalidParameterError("max speed", max_speed, "must be positive")
        self.state.max_speeds[key] = value
        for groups in (self.state.first_groups, self.state.second_groups):
            group = groups[key]
            group.max_speed = value
            group.speed = min(group.speed, group.max_speed)
        return self.get_direction_status(key)

    def predict_speed(self, direction: str, max_speed: Optional[float] = None) -> float:
        key = Direction.parse(direction).value
        if max_speed is None:
            max_speed = self.state.max_speeds.get(key, config.INITIAL_SPEEDS[key])
        elif _checked("max speed", max_speed, config.MAX_SPEED_LIMIT) <= 0:
            raise InvalidParameterError("max speed", max_speed, "must be positive")
        return self.vehicles.predict_speed(key, max_speed)

    def reset(self):
        """Restarts every approach from scratch, keeping densities and speed caps."""
        self.initialize(self.seed)

    def get_direction_status(self, direction: str) -> DirectionStatus:
        if not self.initialized:
            self.initialize()
        key = Direction.parse(direction).value
        distance = self.approach_length(key)
        return DirectionStatus(
            firstGroup=self.vehicles.build_status(self.state.first_groups[key], distance),
            secondGroup=self.vehicles.build_status(self.state.second_groups[key], distance),
            maxSpeed=self.state.max_speeds[key],
            density=self.state.densities.get(key, 0.0),
            volumes=self.state.volumes.get(key, GroupVolumes())
        )

    def get_status(self) -> Dict[str, DirectionStatus]:
        return {direction: self.get_direction_status(direction) for direction in config.DIRECTIONS}
