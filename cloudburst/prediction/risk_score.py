# cloudburst/prediction/risk_score.py
"""
Point-scored risk estimate for a single manually entered observation.

Independent of the sector fusion pipeline: each factor contributes a fixed
number of points and the total is read directly as a probability. Optional
history (oldest first) adds pressure-trend and temperature-spread points.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Sequence

import numpy as np

from .constants import RiskScoreConstants as RC


class RiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


RISK_DESCRIPTIONS = {
    RiskLevel.LOW: "Low Risk",
    RiskLevel.MODERATE: "Moderate Risk",
    RiskLevel.HIGH: "High Risk",
    RiskLevel.CRITICAL: "Critical Risk",
}

RISK_COLORS = {
    RiskLevel.LOW: "green",
    RiskLevel.MODERATE: "yellow",
    RiskLevel.HIGH: "orange",
    RiskLevel.CRITICAL: "red",
}


@dataclass(frozen=True)
class ManualObservation:
    """Missing values fall back to calm standard conditions."""
    temperature: Optional[float] = None     # Celsius
    pressure: Optional[float] = None        # hPa
    humidity: Optional[float] = None        # percent
    wind_speed: Optional[float] = None      # km/h
    rainfall: Optional[float] = None        # mm/hr


@dataclass
class RiskAssessment:
    probability: float
    risk_level: RiskLevel
    factors: Dict[str, float] = field(default_factory=dict)
    will_occur: bool = False

    @property
    def description(self) -> str:
        return risk_description(self.risk_level)

    def to_dict(self) -> Dict:
        return {
            'probability': self.probability,
            'riskLevel': self.risk_level.value,
            'riskColor': RISK_COLORS[self.risk_level],
            'description': self.description,
            'factors': dict(self.factors),
            'willOccur': self.will_occur
        }


def risk_description(risk_level) -> str:
    try:
        return RISK_DESCRIPTIONS[RiskLevel(risk_level)]
    except ValueError:
        return "Unknown"


def _recent(history: Sequence[ManualObservation], attribute: str):
    values = (getattr(obs, attribute) for obs in history[-RC.HISTORY_WINDOW:])
    return [value for value in values if value is not None]


class RiskScoring:
    """Per-factor point tables and the combined score."""

    @staticmethod
    def humidity_score(humidity: float) -> float:
        for minimum, points in RC.HUMIDITY_POINTS:
            if humidity >= minimum:
                return points
        return max(0.0, (humidity - RC.HUMIDITY_BASELINE) * RC.HUMIDITY_SLOPE)

    @staticmethod
    def pressure_score(pressure: float, history: Sequence[ManualObservation] = ()) -> float:
        """Absolute low pressure first; near-standard pressure scores on its recent drop."""
        for below, points in RC.LOW_PRESSURE_POINTS:
            if pressure < below:
                return points

        score = 0
        pressures = _recent(history, 'pressure')
        earlier = pressures[:-RC.RECENT_SAMPLES]
        if len(pressures) >= 2 and earlier:
            drop = float(np.mean(earlier) - np.mean(pressures[-RC.RECENT_SAMPLES:]))
            score = next((points for above, points in RC.PRESSURE_DROP_POINTS if drop > above), 0)

        if pressure < RC.BELOW_STANDARD_PRESSURE_HPA:
            score = max(score, RC.BELOW_STANDARD_POINTS)
        return score

    @staticmethod
    def wind_score(wind_speed_kmh: float) -> float:
        for minimum, points in RC.WIND_POINTS:
            if wind_speed_kmh >= minimum:
                return points
        return wind_speed_kmh * RC.WIND_SLOPE

    @staticmethod
    def temperature_score(temperature: float, history: Sequence[ManualObservation] = ()) -> float:
        score = 0
        temperatures = _recent(history, 'temperature')
        if len(temperatures) >= 2:
            spread = float(np.std(temperatures))
            score = next((points for above, points in RC.TEMPERATURE_SPREAD_POINTS if spread > above), 0)

        for above, points in RC.HIGH_TEMPERATURE_POINTS:
            if temperature > above:
                return max(score, points)
        return score

    @staticmethod
    def rainfall_score(rainfall: float) -> float:
        return next((points for above, points in RC.RAINFALL_POINTS if rainfall > above), 0)

    @staticmethod
    def calculate(observation: ManualObservation,
                  history: Sequence[ManualObservation] = ()) -> RiskAssessment:
        temperature = observation.temperature if observation.temperature is not None else RC.DEFAULT_TEMPERATURE_C
        pressure = observation.pressure if observation.pressure is not None else RC.DEFAULT_PRESSURE_HPA
        humidity = observation.humidity if observation.humidity is not None else RC.DEFAULT_HUMIDITY
        wind_speed = observation.wind_speed or 0.0
        rainfall = observation.rainfall or 0.0
        history = list(history)

        factors = {
            'humidity': RiskScoring.humidity_score(humidity),
            'pressure': RiskScoring.pressure_score(pressure, history),
            'windSpeed': RiskScoring.wind_score(wind_speed),
            'temperature': RiskScoring.temperature_score(temperature, history),
            'rainfall': RiskScoring.rainfall_score(rainfall),
        }
        probability = min(100.0, max(0.0, float(sum(factors.values()))))
        level = next((RiskLevel(name) for minimum, name in RC.RISK_LEVELS if probability >= minimum), RiskLevel.LOW)

        return RiskAssessment(
            probability=round(probability, 1),
            risk_level=level,
            factors=factors,
            will_occur=probability >= RC.OCCURRENCE_THRESHOLD
        )
