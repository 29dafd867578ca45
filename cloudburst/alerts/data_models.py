# cloudburst/alerts/data_models.py
"""
Alerts are immutable records. The acknowledgement fields are the only ones
that ever change, and they change by replacing the record.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..propagation.data_models import WindData
from ..utils.timestamps import to_iso


class AlertType(str, Enum):
    CLOUDBURST_DETECTED = "cloudburst_detected"
    HIGH_PROBABILITY = "high_probability"
    AERIAL_DEPLOYED = "aerial_deployed"
    AERIAL_RECALLED = "aerial_recalled"
    SYSTEM_WARNING = "system_warning"


class AlertSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class Alert:
    alert_id: str
    sector_id: str
    type: AlertType
    severity: AlertSeverity
    title: str
    message: str
    probability: float
    timestamp: float
    wind: Optional[WindData] = None
    aerial_status: Optional[str] = None
    acknowledged: bool = False
    acknowledged_at: Optional[float] = None
    acknowledged_by: Optional[str] = None

    def to_dict(self) -> dict:
        wind = None
        if self.wind is not None:
            wind = {'speed': self.wind.speed, 'direction': self.wind.direction,
                    'timestamp': to_iso(self.wind.timestamp)}
        return {
            'alertId': self.alert_id,
            'sectorId': self.sector_id,
            'type': self.type.value,
            'severity': self.severity.value,
            'title': self.title,
            'message': self.message,
            'probability': round(self.probability, 2),
            'wind': wind,
            'aerialStatus': self.aerial_status,
            'timestamp': to_iso(self.timestamp),
            'acknowledged': self.acknowledged,
            'acknowledgedAt': to_iso(self.acknowledged_at),
            'acknowledgedBy': self.acknowledged_by
        }
