import math
import random
from datetime import datetime
from typing import Callable, Optional

from crossroads.domain.models import VehicleGroup, GroupStatus
from crossroads.domain import config

def js_round(value: float) -> int:
    """Round half up, so 2.5 -> 3 (round() would give 2)."""
    return int(math.floor(value + 0.5))

def time_factor(hour: int) -> float:
    """Share of the max speed achievable at the given hour of day."""
    start, end, factor = config.MORNING_RUSH
    if start <= hour <= end:
        return factor
    start, end, factor = config.EVENING_RUSH
    if start <= hour <= end:
        return factor
    # Night wraps around midnight
    start, end, factor = config.NIGHT
    if hour >= start or hour <= end:
        return factor
    return config.NORMAL_FACTOR

class VehicleSystem:
    def __init__(self, rng: Optional[random.Random] = None, clock: Callable[[], datetime] = datetime.now):
        self.rng = rng or random.Random()
        self.clock = clock

    def current_time_factor(self) -> float:
        return time_factor(self.clock().hour)

    def _vary(self, base_speed: float) -> float:
        variation = self.rng.random() * 2 * config.SPEED_VARIATION - config.SPEED_VARIATION
        return max(0.0, base_speed + variation)

    def update_speed(self, group: VehicleGroup, density: float):
        direction = group.direction.value
        base_speed = group.max_speed * self.current_time_factor() * config.DIRECTION_FACTORS[direction]

        # Denser roads slow everyone down, never below 40%
        density_adjustment = max(config.MIN_DENSITY_ADJUSTMENT, 1 - max(0.0, density) / config.HEAVY_DENSITY)
        base_speed *= density_adjustment

        # Bigger groups move slower, up to 40%
        volume_adjustment = 1 - min(config.MAX_VOLUME_PENALTY, (group.volume or 0) / config.VOLUME_PENALTY_SCALE)
        base_speed *= volume_adjustment

        if group.is_second_group and not group.has_reached:
            base_speed /= 2

        group.speed = min(js_round(self._vary(base_speed)), group.max_speed)

        if group.has_reached and group.is_second_group:
            group.speed = min(group.speed * 2, group.max_speed)

    def update(self, group: VehicleGroup, density: float, distance_to_travel: float, dt: float):
        # First groups stop once they reach the intersection
        if group.has_reached and not group.is_second_group:
            return

        self.update_speed(group, density)
        group.time_elapsed += dt

        # km/h -> km/s
        group.distance_traveled += group.speed / 3600 * dt

        if group.distance_traveled >= distance_to_travel:
            group.has_reached = True

    def predict_speed(self, direction: str, max_speed: float) -> float:
        """One-off speed estimate for a direction, ignoring density and volume."""
        base_speed = max_speed * self.current_time_factor() * config.DIRECTION_FACTORS[direction]
        return min(js_round(self._vary(base_speed)), max_speed)

    def build_status(self, group: VehicleGroup, distance_to_travel: float) -> GroupStatus:
        if group.has_reached:
            eta = round(group.time_elapsed, 1)
        elif group.speed > 0:
            eta = round((distance_to_travel - group.distance_traveled) / (group.speed / 3600), 1)
        else:
            eta = None

        return GroupStatus(
            direction=group.direction,
            currentSpeed=group.speed,
            volume=group.volume,
            distanceTraveled=round(group.distance_traveled, 3),
            timeElapsed=round(group.time_elapsed, 1),
            hasReached=group.has_reached,
            estimatedTimeToReach=eta
        )
