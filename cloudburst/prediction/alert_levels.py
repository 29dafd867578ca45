# cloudburst/prediction/alert_levels.py
"""
The one mapping from probability to alert level. Every component that needs
a level calls get_alert_level; the level is never stored independently.
"""
from enum import Enum

from .constants import PredictionConstants


class AlertLevel(str, Enum):
    NORMAL = "normal"
    ELEVATED = "elevated"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)


_LEVEL_ORDER = [AlertLevel.NORMAL, AlertLevel.ELEVATED, AlertLevel.HIGH, AlertLevel.CRITICAL]


def get_alert_level(probability: float) -> AlertLevel:
    """<25 normal, <50 elevated, <75 high, otherwise critical."""
    if probability < PredictionConstants.ELEVATED_LEVEL_MIN:
        return AlertLevel.NORMAL
    if probability < PredictionConstants.HIGH_LEVEL_MIN:
        return AlertLevel.ELEVATED
    if probability < PredictionConstants.CRITICAL_LEVEL_MIN:
        return AlertLevel.HIGH
    return AlertLevel.CRITICAL
