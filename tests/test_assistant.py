import unittest

from crossroads.application.assistant import build_reply, format_number, summarize
from helpers import make_direction

def calm_status():
    return {
        "North": make_direction("North", density=20, total=30, first_eta=12.5, second_eta=40),
        "South": make_direction("South", density=20, total=30),
        "East": make_direction("East", density=15, total=23),
        "West": make_direction("West", density=15, total=23),
    }

class TestFormatting(unittest.TestCase):
    def test_format_number(self):
        self.assertEqual(format_number(20.0), "20")
        self.assertEqual(format_number(20.5), "20.5")
        self.assertEqual(format_number(None), "n/a")

    def test_format_number_small_and_large(self):
        self.assertEqual(format_number(0.00001), "0.00001")
        self.assertEqual(format_number(0.000001234), "0.000001234")
        self.assertEqual(format_number(1e-7), "1e-7")
        self.assertEqual(format_number(2.5e-8), "2.5e-8")
        self.assertEqual(format_number(1e20), "100000000000000000000")
        self.assertEqual(format_number(1e21), "1e+21")
        self.assertEqual(format_number(-1.5e300), "-1.5e+300")

    def test_format_number_non_finite(self):
        self.assertEqual(format_number(float("inf")), "Infinity")
        self.assertEqual(format_number(float("-inf")), "-Infinity")
        self.assertEqual(format_number(float("nan")), "NaN")

    def test_summary_lines(self):
        lines, suggestions = summarize(calm_status())
        self.assertEqual(lines[0], "North: density 20 veh/km, total 30 vehicles; first ETA 12.5s, second ETA 40s")
        self.assertEqual(len(lines), 4)
        self.assertEqual(suggestions, [])

class TestSuggestions(unittest.TestCase):
    def test_high_density(self):
        status = calm_status()
        status["North"] = make_direction("North", density=45, total=68)
        _, suggestions = summarize(status)
        self.assertEqual(suggestions, ["North: high density - consider reducing inflow or rerouting traffic"])

    def test_high_volume_counts_as_high_density(self):
        status = calm_status()
        status["East"] = make_direction("East", density=10, total=70)
        _, suggestions = summarize(status)
        self.assertIn("high density", suggestions[0])

    def test_moderate_density(self):
        status = calm_status()
        status["West"] = make_direction("West", density=30, total=45)
        _, suggestions = summarize(status)
        self.assertEqual(suggestions, ["West: moderate density - monitor speed and volumes"])

    def test_first_group_arrived(self):
        status = calm_status()
        status["South"] = make_direction("South", first_reached=True)
        _, suggestions = summarize(status)
        self.assertEqual(
            suggestions,
            ["South: first group has reached; you may accelerate the second group or clear the path"]
        )

class TestReplies(unittest.TestCase):
    def test_no_prompt_returns_summary(self):
        result = build_reply(calm_status())
        self.assertTrue(result.reply.startswith("Traffic summary:\nNorth: density 20"))
        self.assertNotIn("Suggestions:", result.reply)
        self.assertEqual(list(result.statusSnapshot), ["North", "South", "East", "West"])

    def test_blank_prompt_returns_summary(self):
        self.assertEqual(build_reply(calm_status(), "   ").reply, build_reply(calm_status()).reply)

    def test_summary_lists_suggestions(self):
        status = calm_status()
        status["North"] = make_direction("North", density=45, total=68)
        result = build_reply(status)
        self.assertIn("\n\nSuggestions:\n- North: high density", result.reply)
        self.assertEqual(len(result.suggestions), 1)

    def test_congestion(self):
        status = calm_status()
        status["North"] = make_direction("North", density=45, total=68)
        reply = build_reply(status, "Is there CONGESTION anywhere?").reply
        self.assertTrue(reply.startswith("🚨 Congestion Status:\nHigh congestion detected in: North (45 veh/km)"))
        self.assertIn("Traffic summary:", reply)

    def test_no_congestion(self):
        reply = build_reply(calm_status(), "is the road blocked").reply
        self.assertIn("No major congestion detected.", reply)

    def test_eta(self):
        reply = build_reply(calm_status(), "When do the cars arrive?").reply
        self.assertTrue(reply.startswith("⏱️ Estimated Times:\nNorth: density 20"))
        self.assertNotIn("Traffic summary:", reply)

    def test_emergency(self):
        reply = build_reply(calm_status(), "there was an accident").reply
        self.assertTrue(reply.startswith("🚨 Emergency Protocol:\n- All lanes in affected directions have reduced speed"))

    def test_volume_report(self):
        reply = build_reply(calm_status(), "How many vehicles?").reply
        self.assertIn("📊 Traffic Volume Report:\nTotal Vehicles: 106\nAverage Density: 17.5 veh/km", reply)

    def test_speed(self):
        reply = build_reply(calm_status(), "am I too slow").reply
        self.assertTrue(reply.startswith("🚗 Speed Advisory:"))

    def test_route(self):
        status = calm_status()
        status["South"] = make_direction("South", density=30, total=45)
        reply = build_reply(status, "which route is best?").reply
        self.assertIn("Recommended directions: North, East, West", reply)

    def test_route_when_everything_is_busy(self):
        status = {d: make_direction(d, density=30, total=45) for d in ("North", "South", "East", "West")}
        reply = build_reply(status, "which route is best?").reply
        self.assertIn("Monitor all directions for best route.", reply)

    def test_fallback_echoes_question(self):
        reply = build_reply(calm_status(), "Hello there").reply
        self.assertTrue(reply.startswith('📍 Traffic Information:\nYour Question: "Hello there"\n\nTraffic summary:'))

    def test_first_matching_family_wins(self):
        # "congestion" is checked before "speed"
        reply = build_reply(calm_status(), "congestion and speed").reply
        self.assertTrue(reply.startswith("🚨 Congestion Status:"))

if __name__ == '__main__':
    unittest.main()
