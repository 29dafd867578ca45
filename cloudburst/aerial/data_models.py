# cloudburst/aerial/data_models.py
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..geo.data_models import Coordinates
from ..prediction.data_models import AerialReading
from ..utils.timestamps import to_iso


class AerialStatus(str, Enum):
    STANDBY = "standby"
    DEPLOYING = "deploying"
    ACTIVE = "active"
    DESCENDING = "descending"


@dataclass
class AerialUnit:
    """
    A tethered or free-flying sensor payload. `status` only changes through
    the controller's transitions; altitude and battery are integrated by
    AerialDeploymentController.update.
    """
    unit_id: str
    status: AerialStatus = AerialStatus.STANDBY
    assigned_sector_id: Optional[str] = None
    position: Optional[Coordinates] = None
    altitude: float = 0.0
    ascent_rate: float = 0.0         # m/s, negative while descending
    battery_level: float = 100.0
    status_since: float = field(default_factory=time.time)
    last_updated: float = field(default_factory=time.time)
    estimated_max_altitude_time: Optional[float] = None
    readings: Optional[AerialReading] = None

    @property
    def is_airborne(self) -> bool:
        return self.status != AerialStatus.STANDBY

    def to_dict(self) -> dict:
        readings = None
        if self.readings is not None:
            readings = {
                'altitude': self.readings.altitude,
                'temperature': self.readings.temperature,
                'pressure': self.readings.pressure,
                'humidity': self.readings.humidity,
                'pwv': self.readings.pwv,
                'timestamp': to_iso(self.readings.timestamp)
            }
        return {
            'payloadId': self.unit_id,
            'status': self.status.value,
            'assignedSectorId': self.assigned_sector_id,
            'position': self.position.to_dict() if self.position else None,
            'altitude': round(self.altitude, 1),
            'ascentRate': self.ascent_rate,
            'batteryLevel': round(self.battery_level, 1),
            'estimatedMaxAltitudeTime': to_iso(self.estimated_max_altitude_time),
            'readings': readings,
            'lastUpdated': to_iso(self.last_updated)
        }


@dataclass(frozen=True)
class DeploymentDecision:
    sector_id: str
    should_deploy: bool
    reason: Optional[str]
    probability: float
    duration: float
    wind_speed: float

    def to_dict(self) -> dict:
        return {
            'sectorId': self.sector_id,
            'canDeploy': self.should_deploy,
            'reason': self.reason,
            'probability': self.probability,
            'duration': self.duration,
            'windSpeed': self.wind_speed
        }
