# cloudburst/prediction/constants.py

class PredictionConstants:
    """Weights and thresholds for probability fusion and cloudburst detection."""
    # Ground probability weights
    RAINFALL_WEIGHT = 0.5
    PRESSURE_WEIGHT = 0.3
    HUMIDITY_WEIGHT = 0.2

    STANDARD_PRESSURE_HPA = 1013.0
    PRESSURE_DROP_SCALE_HPA = 50.0
    RAINFALL_SCALE_MM_HR = 100.0
    PWV_SCALE_MM = 50.0

    # Temperature-inversion proxy used in place of the pressure factor aloft
    INVERSION_MAX_TEMP_C = 10.0
    INVERSION_MIN_HUMIDITY = 80.0
    INVERSION_FACTOR_PRESENT = 80.0
    INVERSION_FACTOR_ABSENT = 40.0

    # Ground + aerial combination
    GROUND_COMBINED_WEIGHT = 0.4
    AERIAL_COMBINED_WEIGHT = 0.6
    AERIAL_CONFIDENCE = 0.85

    # Ground confidence from reading freshness
    FRESH_READING_MINUTES = 5
    RECENT_READING_MINUTES = 15
    FRESH_READING_CONFIDENCE = 0.4
    RECENT_READING_CONFIDENCE = 0.2
    SOURCE_PRESENT_CONFIDENCE = 0.1

    # Detection
    CLOUDBURST_RAINFALL_THRESHOLD_MM_HR = 100.0
    HIGH_CONFIDENCE_PRESSURE_DROP_HPA_HR = 3.0
    PRESSURE_HISTORY_WINDOW_HOURS = 3.0
    PRESSURE_HISTORY_MAX_SAMPLES = 720

    # Alert level boundaries
    ELEVATED_LEVEL_MIN = 25.0
    HIGH_LEVEL_MIN = 50.0
    CRITICAL_LEVEL_MIN = 75.0

    TREND_THRESHOLD = 5.0


class RiskScoreConstants:
    """Point tables of the manual risk score. Factor maxima sum to 100."""
    DEFAULT_TEMPERATURE_C = 25.0
    DEFAULT_PRESSURE_HPA = 1013.25
    DEFAULT_HUMIDITY = 50.0

    # (minimum value, points), checked top down
    HUMIDITY_POINTS = ((90, 30), (80, 25), (70, 15), (60, 8))
    HUMIDITY_BASELINE = 40
    HUMIDITY_SLOPE = 0.2

    # (pressure below, points)
    LOW_PRESSURE_POINTS = ((990, 25), (1000, 20), (1010, 10))
    # (drop above, points)
    PRESSURE_DROP_POINTS = ((10, 20), (5, 12), (2, 5))
    BELOW_STANDARD_PRESSURE_HPA = 1013
    BELOW_STANDARD_POINTS = 5

    # Wind speed in km/h
    WIND_POINTS = ((25, 20), (20, 15), (15, 10), (10, 5))
    WIND_SLOPE = 0.3

    # (standard deviation above, points)
    TEMPERATURE_SPREAD_POINTS = ((5, 15), (3, 10), (1.5, 5))
    # (temperature above, minimum points)
    HIGH_TEMPERATURE_POINTS = ((35, 8), (30, 5))

    # (rate above, points)
    RAINFALL_POINTS = ((50, 10), (30, 7), (15, 4), (5, 2))

    HISTORY_WINDOW = 5
    RECENT_SAMPLES = 3

    # (minimum probability, level)
    RISK_LEVELS = ((70, 'critical'), (50, 'high'), (30, 'moderate'))
    OCCURRENCE_THRESHOLD = 50.0
