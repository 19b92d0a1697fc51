from abc import ABC, abstractmethod
from typing import Any, Optional

class Command(ABC):
    @abstractmethod
    def execute(self, kernel: Any):
        pass

class SetDensityCommand(Command):
    def __init__(self, direction: str, density: float):
        self.direction = direction
        self.density = density

    def execute(self, kernel: Any):
        return kernel.set_density(self.direction, self.density)

class SetMaxSpeedCommand(Command):
    def __init__(self, direction: str, max_speed: float):
        self.direction = direction
        self.max_speed = max_speed

    def execute(self, kernel: Any):
        return kernel.set_max_speed(self.direction, self.max_speed)

class PredictSpeedCommand(Command):
    def __init__(self, direction: str, max_speed: Optional[float] = None):
        self.direction = direction
        self.max_speed = max_speed

    def execute(self, kernel: Any):
        return kernel.predict_speed(self.direction, self.max_speed)

class ResetSimulationCommand(Command):
    def execute(self, kernel: Any):
        kernel.reset()
        return kernel.get_status()
