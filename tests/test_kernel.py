import unittest

from crossroads.domain.errors import UnknownDirectionError, InvalidParameterError
from crossroads.domain.graph import RoadNetwork
from crossroads.kernel.simulation_kernel import SimulationKernel
from crossroads.application.commands import SetDensityCommand, SetMaxSpeedCommand, ResetSimulationCommand
from helpers import noon_clock

class TestRoadNetwork(unittest.TestCase):
    def test_four_way_approaches(self):
        network = RoadNetwork.four_way(1.5)
        self.assertEqual(network.graph.number_of_edges(), 4)
        for direction in ("North", "South", "East", "West"):
            self.assertEqual(network.approach_length(direction), 1.5)
        self.assertEqual(network.graph.nodes["approach-North"]["pos"], (0.0, 1.5))
        self.assertEqual(network.graph.nodes["approach-West"]["direction"], "West")

class TestSimulationKernel(unittest.TestCase):
    def setUp(self):
        self.kernel = SimulationKernel(clock=noon_clock)
        self.kernel.initialize(seed=7)

    def test_status_shape(self):
        status = self.kernel.get_status()
        self.assertEqual(list(status), ["North", "South", "East", "West"])
        north = status["North"]
        self.assertEqual(north.maxSpeed, 60)
        self.assertEqual(north.density, 20)
        self.assertEqual(north.firstGroup.currentSpeed, 60)
        self.assertEqual(north.secondGroup.currentSpeed, 30)
        self.assertEqual(north.firstGroup.distanceTraveled, 0)
        self.assertFalse(north.secondGroup.hasReached)

    def test_initial_volumes(self):
        status = self.kernel.get_status()
        self.assertEqual(status["North"].volumes.model_dump(), {"total": 30, "first": 18, "second": 12})
        # 15 veh/km * 1.5 km = 22.5 rounds up
        self.assertEqual(status["East"].volumes.model_dump(), {"total": 23, "first": 14, "second": 9})
        self.assertEqual(status["East"].firstGroup.volume, 14)

    def test_empty_road_still_has_one_vehicle(self):
        self.kernel.set_density("West", 0)
        volumes = self.kernel.get_status()["West"].volumes
        self.assertEqual((volumes.total, volumes.first, volumes.second), (1, 1, 0))

    def test_run_tick_advances_time(self):
        self.kernel.run_tick()
        self.kernel.run_tick()
        self.assertEqual(self.kernel.state.tick_id, 2)
        status = self.kernel.get_status()
        for info in status.values():
            self.assertEqual(info.firstGroup.timeElapsed, 2.0)
            self.assertEqual(info.secondGroup.timeElapsed, 2.0)
            self.assertGreater(info.firstGroup.distanceTraveled, 0)

    def test_first_groups_reach_and_freeze(self):
        for _ in range(400):
            self.kernel.run_tick()
        before = self.kernel.get_status()
        for info in before.values():
            self.assertTrue(info.firstGroup.hasReached)
            self.assertEqual(info.firstGroup.estimatedTimeToReach, info.firstGroup.timeElapsed)

        self.kernel.run_tick()
        after = self.kernel.get_status()
        for direction, info in after.items():
            self.assertEqual(info.firstGroup, before[direction].firstGroup)
            self.assertEqual(info.secondGroup.timeElapsed, before[direction].secondGroup.timeElapsed + 1)

    def test_set_density(self):
        self.assertEqual(self.kernel.set_density("north", 40), 40)
        status = self.kernel.get_status()
        self.assertEqual(status["North"].density, 40)
        self.assertEqual(status["North"].volumes.total, 60)

    def test_set_density_clamps_negative(self):
        self.assertEqual(self.kernel.execute(SetDensityCommand("South", -10)), 0)

    def test_set_density_rejects_non_finite_and_huge(self):
        before = self.kernel.get_status()["North"]
        for bad in (float("inf"), float("nan"), 1.7e308, "lots"):
            with self.assertRaises(InvalidParameterError):
                self.kernel.set_density("North", bad)
        after = self.kernel.get_status()["North"]
        self.assertEqual(after.density, before.density)
        self.assertEqual(after.volumes, before.volumes)
        self.kernel.run_tick()
        self.assertEqual(self.kernel.state.tick_id, 1)

    def test_set_max_speed_rejects_bad_values(self):
        for bad in (float("inf"), float("-inf"), 1e300, 0, -5):
            with self.assertRaises(InvalidParameterError):
                self.kernel.set_max_speed("East", bad)
        east = self.kernel.get_status()["East"]
        self.assertEqual(east.maxSpeed, 50)
        self.assertEqual(self.kernel.state.first_groups["East"].max_speed, 50)

    def test_predict_speed_rejects_bad_cap(self):
        with self.assertRaises(InvalidParameterError):
            self.kernel.predict_speed("North", float("inf"))
        with self.assertRaises(InvalidParameterError):
            self.kernel.predict_speed("North", 0)

    def test_unknown_direction(self):
        with self.assertRaises(UnknownDirectionError):
            self.kernel.set_density("Up", 10)
        with self.assertRaises(UnknownDirectionError):
            self.kernel.set_max_speed("Northeast", 10)

    def test_set_max_speed_caps_groups(self):
        status = self.kernel.execute(SetMaxSpeedCommand("East", 20))
        self.assertEqual(status.maxSpeed, 20)
        self.assertLessEqual(status.firstGroup.currentSpeed, 20)
        for _ in range(30):
            self.kernel.run_tick()
        east = self.kernel.get_status()["East"]
        self.assertLessEqual(east.firstGroup.currentSpeed, 20)
        self.assertLessEqual(east.secondGroup.currentSpeed, 20)

    def test_predict_speed_uses_current_cap(self):
        predicted = self.kernel.predict_speed("North")
        # 60 * 0.8 = 48 with +/- 5 km/h noise
        self.assertTrue(43 <= predicted <= 53)
        self.assertLessEqual(self.kernel.predict_speed("North", 10), 10)

    def test_reset_keeps_parameters(self):
        self.kernel.set_density("North", 35)
        self.kernel.set_max_speed("North", 45)
        for _ in range(10):
            self.kernel.run_tick()

        status = self.kernel.execute(ResetSimulationCommand())
        self.assertEqual(self.kernel.state.tick_id, 0)
        self.assertEqual(status["North"].firstGroup.distanceTraveled, 0)
        self.assertEqual(status["North"].density, 35)
        self.assertEqual(status["North"].maxSpeed, 45)
        self.assertEqual(status["North"].firstGroup.currentSpeed, 45)

    def test_lazy_initialization(self):
        kernel = SimulationKernel(clock=noon_clock)
        self.assertFalse(kernel.initialized)
        self.assertEqual(len(kernel.get_status()), 4)
        self.assertTrue(kernel.initialized)

if __name__ == '__main__':
    unittest.main()
