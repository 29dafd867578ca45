# cloudburst/propagation/constants.py

class PropagationConstants:
    """Wind-driven spread of elevated probability between neighbouring sectors."""
    # Angle between wind direction and the bearing to a neighbour, in degrees
    DOWNWIND_MAX_ANGLE = 45
    CROSSWIND_FAVORABLE_MAX_ANGLE = 90
    CROSSWIND_MAX_ANGLE = 135

    DOWNWIND_FACTOR = 0.8
    CROSSWIND_FAVORABLE_FACTOR = 0.5
    CROSSWIND_FACTOR = 0.3
    UPWIND_FACTOR = 0.1

    DISTANCE_DECAY_COEFFICIENT = 0.2      # per km
    DELAY_COEFFICIENT = 0.06              # m/s -> km/min

    MIN_EVENT_PROBABILITY = 1.0
    DEFAULT_THRESHOLD = 30.0
    DEFAULT_MAX_HOPS = 4
    DEFAULT_HORIZON_MINUTES = 360.0
