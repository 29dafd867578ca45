# cloudburst/prediction/fusion.py
"""
Weighted sensor fusion: turns ground weather/rainfall and optional aerial
readings into a 0-100 cloudburst probability and a 0-1 confidence.

Missing data degrades the prediction source (ground+aerial -> ground ->
unavailable) instead of failing.
"""
import logging
import math
import time
from typing import Dict, Optional, Sequence

from .constants import PredictionConstants as PC
from .data_models import (
    AerialReading, PredictionSource, ProbabilityCalculation, ProbabilityFactors,
    RainfallReading, WeatherReading
)

logger = logging.getLogger(__name__)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# --- Factor functions ---

def rainfall_factor(rate: float) -> float:
    """min(rate / 100, 1) * 100"""
    return _clamp(min(rate / PC.RAINFALL_SCALE_MM_HR, 1.0) * 100, 0.0, 100.0)


def pressure_factor(pressure: float) -> float:
    """max(0, (1013 - pressure) / 50) * 100. Falling pressure signals storm formation."""
    drop = PC.STANDARD_PRESSURE_HPA - pressure
    return _clamp(max(0.0, drop / PC.PRESSURE_DROP_SCALE_HPA) * 100, 0.0, 100.0)


def humidity_factor(humidity: float) -> float:
    return _clamp((humidity / 100) * 100, 0.0, 100.0)


def pwv_factor(pwv: float) -> float:
    return _clamp(min(pwv / PC.PWV_SCALE_MM, 1.0) * 100, 0.0, 100.0)


def inversion_factor(temperature: float, humidity: float) -> float:
    # Cold, saturated air aloft is treated as instability
    if temperature < PC.INVERSION_MAX_TEMP_C and humidity > PC.INVERSION_MIN_HUMIDITY:
        return PC.INVERSION_FACTOR_PRESENT
    return PC.INVERSION_FACTOR_ABSENT


def ground_factors(weather: Optional[WeatherReading], rainfall: Optional[RainfallReading]) -> ProbabilityFactors:
    return ProbabilityFactors(
        rainfall_factor=rainfall_factor(rainfall.rate) if rainfall else 0.0,
        pressure_factor=pressure_factor(weather.pressure) if weather else 0.0,
        humidity_factor=humidity_factor(weather.humidity) if weather else 0.0
    )


def aerial_factors(aerial: AerialReading) -> ProbabilityFactors:
    """PWV stands in for rainfall and the inversion proxy for pressure."""
    return ProbabilityFactors(
        rainfall_factor=pwv_factor(aerial.pwv),
        pressure_factor=inversion_factor(aerial.temperature, aerial.humidity),
        humidity_factor=humidity_factor(aerial.humidity)
    )


def weighted_probability(factors: ProbabilityFactors) -> float:
    probability = (factors.rainfall_factor * PC.RAINFALL_WEIGHT +
                   factors.pressure_factor * PC.PRESSURE_WEIGHT +
                   factors.humidity_factor * PC.HUMIDITY_WEIGHT)
    return _clamp(probability, 0.0, 100.0)


def factor_breakdown(factors: ProbabilityFactors) -> Dict[str, float]:
    """Weighted contribution of each factor to the probability."""
    return {
        'rainfall': round(factors.rainfall_factor * PC.RAINFALL_WEIGHT, 2),
        'pressure': round(factors.pressure_factor * PC.PRESSURE_WEIGHT, 2),
        'humidity': round(factors.humidity_factor * PC.HUMIDITY_WEIGHT, 2)
    }


def combine_predictions(ground_probability: float, ground_confidence: float,
                        aerial_probability: float, aerial_confidence: float):
    """Returns (probability, confidence); confidence is the RMS of the two inputs."""
    probability = (PC.GROUND_COMBINED_WEIGHT * ground_probability +
                   PC.AERIAL_COMBINED_WEIGHT * aerial_probability)
    confidence = math.sqrt((ground_confidence ** 2 + aerial_confidence ** 2) / 2)
    return _clamp(probability, 0.0, 100.0), _clamp(confidence, 0.0, 1.0)


def _freshness_score(timestamp: Optional[float], now: float) -> float:
    if timestamp is None:
        return 0.0
    age_minutes = (now - timestamp) / 60
    if age_minutes < PC.FRESH_READING_MINUTES:
        return PC.FRESH_READING_CONFIDENCE
    if age_minutes < PC.RECENT_READING_MINUTES:
        return PC.RECENT_READING_CONFIDENCE
    return 0.0


def ground_confidence(weather: Optional[WeatherReading], rainfall: Optional[RainfallReading],
                      now: Optional[float] = None) -> float:
    now = now if now is not None else time.time()
    score = 0.0
    sources = 0
    for reading in (weather, rainfall):
        if reading is None:
            continue
        score += _freshness_score(reading.timestamp, now)
        sources += 1
    if sources == 0:
        return 0.0
    return _clamp(score + sources * PC.SOURCE_PRESENT_CONFIDENCE, 0.0, 1.0)


def calculate_trend(history: Sequence[float], threshold: float = PC.TREND_THRESHOLD) -> str:
    """Compares the mean of the last three samples against the oldest one."""
    if len(history) < 2:
        return 'stable'
    recent = list(history)[-3:]
    change = sum(recent) / len(recent) - history[0]
    if change > threshold:
        return 'increasing'
    if change < -threshold:
        return 'decreasing'
    return 'stable'


class ProbabilityFusionEngine:
    """Stateless calculator; one instance can serve every sector."""

    def __init__(self, aerial_confidence: float = PC.AERIAL_CONFIDENCE):
        self.aerial_confidence = aerial_confidence

    def calculate(self, weather: Optional[WeatherReading] = None,
                  rainfall: Optional[RainfallReading] = None,
                  aerial: Optional[AerialReading] = None,
                  now: Optional[float] = None) -> ProbabilityCalculation:
        now = now if now is not None else time.time()

        g_factors = ground_factors(weather, rainfall)
        g_probability = weighted_probability(g_factors)
        g_confidence = ground_confidence(weather, rainfall, now)
        has_ground = weather is not None or rainfall is not None

        if aerial is None:
            source = PredictionSource.GROUND if has_ground else PredictionSource.UNAVAILABLE
            return ProbabilityCalculation(
                base_probability=g_probability,
                ground_factors=g_factors,
                combined_probability=g_probability if has_ground else 0.0,
                confidence=g_confidence if has_ground else 0.0,
                source=source,
                breakdown=factor_breakdown(g_factors)
            )

        a_factors = aerial_factors(aerial)
        a_probability = weighted_probability(a_factors)
        probability, confidence = combine_predictions(g_probability, g_confidence,
                                                      a_probability, self.aerial_confidence)
        logger.debug(f"Fused ground {g_probability:.1f}% with aerial {a_probability:.1f}% -> {probability:.1f}%")

        return ProbabilityCalculation(
            base_probability=g_probability,
            ground_factors=g_factors,
            combined_probability=probability,
            confidence=confidence,
            source=PredictionSource.GROUND_AERIAL,
            aerial_factors=a_factors,
            aerial_probability=a_probability,
            breakdown=factor_breakdown(g_factors)
        )
