# cloudburst/aerial/constants.py

class AerialConstants:
    """Launch triggers and flight profile of the aerial monitoring units."""
    PROBABILITY_THRESHOLD = 50.0
    THRESHOLD_DURATION_SEC = 30.0
    MAX_LAUNCH_WIND_SPEED_MS = 15.0

    TARGET_ALTITUDE_M = 3000.0
    ASCENT_RATE_MS = 5.0
    DESCENT_RATE_MS = 3.0

    BATTERY_DRAIN_PER_MIN = 0.25
    RECALL_BATTERY_LEVEL = 20.0
    FULL_BATTERY = 100.0
