from datetime import datetime

from crossroads.domain.models import Direction, DirectionStatus, GroupStatus, GroupVolumes

NOON = datetime(2024, 5, 14, 12, 0)

def noon_clock():
    return NOON

class FixedRandom:
    """Stands in for random.Random; 0.5 means zero speed variation."""
    def __init__(self, value=0.5):
        self.value = value

    def random(self):
        return self.value

    def seed(self, *args, **kwargs):
        pass

class FakeSocket:
    """Collects frames sent through send_json; fail=True mimics a dead socket."""
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def send_json(self, payload):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(payload)

    def types(self):
        return [frame["type"] for frame in self.sent]

    def last(self, kind):
        return [frame for frame in self.sent if frame["type"] == kind][-1]

def make_group(direction="North", eta=60.0, reached=False, speed=30.0):
    return GroupStatus(
        direction=Direction(direction),
        currentSpeed=speed,
        volume=10,
        distanceTraveled=0.5,
        timeElapsed=10.0,
        hasReached=reached,
        estimatedTimeToReach=eta
    )

def make_direction(direction="North", density=20.0, total=30, first_eta=60.0, second_eta=120.0,
                   first_reached=False, second_reached=False):
    return DirectionStatus(
        firstGroup=make_group(direction, first_eta, first_reached),
        secondGroup=make_group(direction, second_eta, second_reached),
        maxSpeed=60.0,
        density=density,
        volumes=GroupVolumes(total=total, first=total - total // 2, second=total // 2)
    )
