import networkx as nx
from typing import Any, Iterable, Tuple

from crossroads.domain import config

# Unit vectors pointing from the intersection towards each approach's start
_HEADINGS = {
    "North": (0.0, 1.0),
    "South": (0.0, -1.0),
    "East": (1.0, 0.0),
    "West": (-1.0, 0.0),
}

INTERSECTION_ID = "intersection"

class RoadNetwork:
    def __init__(self):
        self.graph = nx.DiGraph()

    @classmethod
    def four_way(cls, approach_length: float = config.DISTANCE_TO_TRAVEL,
                 directions: Iterable[str] = config.DIRECTIONS) -> "RoadNetwork":
        """One intersection at the origin fed by a straight approach per direction."""
        network = cls()
        network.add_intersection(INTERSECTION_ID, (0.0, 0.0))
        for direction in directions:
            dx, dy = _HEADINGS[direction]
            start = approach_node(direction)
            network.graph.add_node(start, pos=(dx * approach_length, dy * approach_length),
                                   type="approach", direction=direction)
            network.add_road(start, INTERSECTION_ID, length=approach_length)
        return network

    def add_intersection(self, intersection_id: str, pos: Tuple[float, float]):
        self.graph.add_node(intersection_id, pos=pos, type="intersection")

    def add_road(self, u: str, v: str, length: float, lanes: int = 1, geometry: Any = None):
        self.graph.add_edge(u, v, length=length, lanes=lanes, geometry=geometry)

    def approach_length(self, direction: str) -> float:
        """Shortest road distance (km) from a direction's start to the intersection."""
        return nx.shortest_path_length(self.graph, approach_node(direction), INTERSECTION_ID, weight="length")

def approach_node(direction: str) -> str:
    return f"approach-{direction}"
