# Simulation Configuration
import os

# Approach Geometry
DIRECTIONS = ("North", "South", "East", "West")
DISTANCE_TO_TRAVEL = 1.5  # km from group start to the stop line

# Speeds (km/h)
INITIAL_SPEEDS = {
    "North": 60.0,
    "South": 60.0,
    "East": 50.0,
    "West": 50.0,
}

# Default densities (vehicles per km)
DEFAULT_DENSITIES = {
    "North": 20.0,
    "South": 20.0,
    "East": 15.0,
    "West": 15.0,
}

# Some directions are busier than others
DIRECTION_FACTORS = {
    "North": 1.0,
    "South": 0.9,
    "East": 1.1,
    "West": 0.95,
}

# Time of day factors (inclusive hour ranges, checked in order)
MORNING_RUSH = (7, 9, 0.7)
EVENING_RUSH = (16, 18, 0.6)
NIGHT = (22, 5, 0.9)
NORMAL_FACTOR = 0.8

# Speed Model
SPEED_VARIATION = 5.0        # +/- km/h of noise per update
HEAVY_DENSITY = 50.0         # veh/km treated as fully saturated
MIN_DENSITY_ADJUSTMENT = 0.4
MAX_VOLUME_PENALTY = 0.4
VOLUME_PENALTY_SCALE = 100.0
FIRST_GROUP_SHARE = 0.6

# Accepted parameter ranges
MAX_DENSITY = 1000.0         # veh/km
MAX_SPEED_LIMIT = 1000.0     # km/h

# Assistant Thresholds
HIGH_DENSITY = 40.0
HIGH_VOLUME = 70
MODERATE_DENSITY = 25.0

# Chat
MESSAGE_HISTORY = int(os.environ.get("CROSSROADS_MESSAGE_HISTORY", "50"))
MESSAGE_LOG_LIMIT = int(os.environ.get("CROSSROADS_MESSAGE_LOG_LIMIT", "1000"))
EMERGENCY_CONTENT = "🚨 EMERGENCY ALERT: Traffic stopped for emergency vehicle"

# Server
HOST = os.environ.get("CROSSROADS_HOST", "0.0.0.0")
PORT = int(os.environ.get("CROSSROADS_PORT", "3001"))
TICK_INTERVAL = float(os.environ.get("CROSSROADS_TICK_INTERVAL", "1.0"))  # seconds between ticks
SIMULATION_SEED = int(os.environ.get("CROSSROADS_SEED", "42"))
CORS_ORIGINS = os.environ.get("CROSSROADS_CORS_ORIGINS", "*").split(",")

# Logging
LOG_LEVEL = os.environ.get("CROSSROADS_LOG_LEVEL", "INFO")
LOG_FILE = os.environ.get("CROSSROADS_LOG_FILE") or None
