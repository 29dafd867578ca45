# cloudburst/monitor/data_models.py
"""
Runtime configuration of the monitoring service and the per-node reading
cache it keeps between recomputations.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..aerial.constants import AerialConstants
from ..prediction.data_models import AerialReading, RainfallReading, WeatherReading
from ..propagation.constants import PropagationConstants
from ..sectors.constants import PartitionConstants, RegistryConstants


@dataclass
class MonitorConfig:
    """Overrides for the component defaults. Every field has a working default."""
    # Propagation
    propagation_threshold: float = PropagationConstants.DEFAULT_THRESHOLD
    max_hops: int = PropagationConstants.DEFAULT_MAX_HOPS
    horizon_minutes: Optional[float] = PropagationConstants.DEFAULT_HORIZON_MINUTES
    use_cascade: bool = True

    # Partitioning and node health
    min_sector_radius_km: float = PartitionConstants.MIN_SECTOR_RADIUS_KM
    max_sector_radius_km: float = PartitionConstants.MAX_SECTOR_RADIUS_KM
    node_timeout_minutes: float = RegistryConstants.NODE_TIMEOUT_MINUTES

    # Aerial deployment
    deploy_probability_threshold: float = AerialConstants.PROBABILITY_THRESHOLD
    deploy_duration_sec: float = AerialConstants.THRESHOLD_DURATION_SEC
    max_launch_wind_speed: float = AerialConstants.MAX_LAUNCH_WIND_SPEED_MS
    auto_deploy: bool = False

    # Background ticker
    tick_interval_sec: float = 5.0


@dataclass
class NodeReadings:
    """Latest reading of each kind received from one node."""
    weather: Optional[WeatherReading] = None
    rainfall: Optional[RainfallReading] = None
    aerial: Optional[AerialReading] = None
    # Newest reading timestamp and last raw store record ingested
    reported_at: Optional[float] = None
    record: Optional[Dict[str, Any]] = None

    @property
    def is_empty(self) -> bool:
        return self.weather is None and self.rainfall is None and self.aerial is None

    def is_newer(self, record: Dict[str, Any], reported_at: Optional[float]) -> bool:
        """A record is new when it carries a later timestamp or, lacking one, differs from the last record."""
        if reported_at is not None and self.reported_at is not None:
            return reported_at > self.reported_at
        return record != self.record
