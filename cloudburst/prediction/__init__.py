# cloudburst/prediction/__init__.py
"""
Probability fusion, cloudburst detection and the alert-level mapping.
"""
from .alert_levels import AlertLevel, get_alert_level
from .constants import PredictionConstants
from .data_models import (
    PredictionSource, WeatherReading, RainfallReading, AerialReading,
    ProbabilityFactors, ProbabilityCalculation, CloudburstDetection
)
from .fusion import (
    ProbabilityFusionEngine, rainfall_factor, pressure_factor, humidity_factor,
    pwv_factor, inversion_factor, combine_predictions, factor_breakdown, calculate_trend
)
from .detector import CloudburstDetector, PressureHistory, pressure_drop_rate
from .risk_score import ManualObservation, RiskAssessment, RiskLevel, RiskScoring, risk_description

__all__ = [
    "AlertLevel",
    "get_alert_level",
    "PredictionConstants",
    "PredictionSource",
    "WeatherReading",
    "RainfallReading",
    "AerialReading",
    "ProbabilityFactors",
    "ProbabilityCalculation",
    "CloudburstDetection",
    "ProbabilityFusionEngine",
    "rainfall_factor",
    "pressure_factor",
    "humidity_factor",
    "pwv_factor",
    "inversion_factor",
    "combine_predictions",
    "factor_breakdown",
    "calculate_trend",
    "CloudburstDetector",
    "PressureHistory",
    "pressure_drop_rate",
    "ManualObservation",
    "RiskAssessment",
    "RiskLevel",
    "RiskScoring",
    "risk_description"
]
