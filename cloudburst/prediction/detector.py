# cloudburst/prediction/detector.py
"""
Threshold-based cloudburst detection from rainfall rate and pressure trend.
"""
import logging
import time
from collections import deque
from typing import Deque, Optional, Sequence, Tuple

from .constants import PredictionConstants as PC
from .data_models import CloudburstDetection, RainfallReading

logger = logging.getLogger(__name__)


def pressure_drop_rate(history: Sequence[float], time_span_hours: float) -> float:
    """
    (oldest - newest) / hours for a pressure history ordered oldest first.
    Positive means pressure is falling.
    """
    if len(history) < 2 or time_span_hours <= 0:
        return 0.0
    return (history[0] - history[-1]) / time_span_hours


class PressureHistory:
    """Rolling window of (timestamp, hPa) samples for one node."""

    def __init__(self, window_hours: float = PC.PRESSURE_HISTORY_WINDOW_HOURS,
                 max_samples: int = PC.PRESSURE_HISTORY_MAX_SAMPLES):
        self.window_hours = window_hours
        self._samples: Deque[Tuple[float, float]] = deque(maxlen=max_samples)

    def __len__(self) -> int:
        return len(self._samples)

    def add(self, pressure: float, timestamp: Optional[float] = None):
        timestamp = timestamp if timestamp is not None else time.time()
        # Out-of-order samples would corrupt the oldest/newest ordering
        if self._samples and timestamp < self._samples[-1][0]:
            logger.debug(f"Dropping out-of-order pressure sample at {timestamp}")
            return
        self._samples.append((timestamp, pressure))
        self._trim(timestamp)

    def _trim(self, now: float):
        cutoff = now - self.window_hours * 3600
        while self._samples and self._samples[0][0] < cutoff:
            self._samples.popleft()

    def drop_rate(self) -> float:
        if len(self._samples) < 2:
            return 0.0
        span_hours = (self._samples[-1][0] - self._samples[0][0]) / 3600
        return pressure_drop_rate([pressure for _, pressure in self._samples], span_hours)


class CloudburstDetector:
    def __init__(self,
                 rainfall_threshold: float = PC.CLOUDBURST_RAINFALL_THRESHOLD_MM_HR,
                 pressure_drop_threshold: float = PC.HIGH_CONFIDENCE_PRESSURE_DROP_HPA_HR):
        self.rainfall_threshold = rainfall_threshold
        self.pressure_drop_threshold = pressure_drop_threshold

    def detect(self, rainfall_rate: Optional[float], drop_rate: float = 0.0) -> CloudburstDetection:
        """
        Detected only when the rate is strictly above the threshold. Values are
        reported either way; a missing rainfall rate counts as 0.
        """
        rate = float(rainfall_rate) if rainfall_rate is not None else 0.0
        if not rate > self.rainfall_threshold:
            return CloudburstDetection(detected=False, confidence='low',
                                       rainfall_rate=rate, pressure_drop_rate=drop_rate)

        confidence = 'high' if drop_rate > self.pressure_drop_threshold else 'medium'
        logger.info(f"Cloudburst conditions: {rate:.1f} mm/hr, pressure falling {drop_rate:.2f} hPa/hr ({confidence})")
        return CloudburstDetection(detected=True, confidence=confidence,
                                   rainfall_rate=rate, pressure_drop_rate=drop_rate)

    def detect_reading(self, rainfall: Optional[RainfallReading], drop_rate: float = 0.0) -> CloudburstDetection:
        return self.detect(rainfall.rate if rainfall is not None else None, drop_rate)
