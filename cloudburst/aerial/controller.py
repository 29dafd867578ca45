# cloudburst/aerial/controller.py
"""
State machine for the aerial monitoring units:

    standby -> deploying -> active -> descending -> standby

Launches are gated by sustained probability, launch wind and unit
availability. Ascent and descent are simulated from fixed rates, so
deploying -> active and descending -> standby happen inside update().
"""
import logging
import math
import threading
import time
from typing import Callable, Dict, List, Optional

from .constants import AerialConstants as AC
from .data_models import AerialStatus, AerialUnit, DeploymentDecision
from .exceptions import (
    DeploymentRejectedError, InvalidTransitionError, NoAvailableUnitError, UnitNotFoundError
)
from ..alerts.data_models import AlertType
from ..alerts.manager import AlertManager
from ..prediction.data_models import AerialReading, PredictionSource
from ..sectors.data_models import Sector
from ..sectors.exceptions import SectorNotFoundError

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    AerialStatus.STANDBY: AerialStatus.DEPLOYING,
    AerialStatus.DEPLOYING: AerialStatus.ACTIVE,
    AerialStatus.ACTIVE: AerialStatus.DESCENDING,
    AerialStatus.DESCENDING: AerialStatus.STANDBY,
}

RecallPolicy = Callable[[AerialUnit, Optional[Sector]], bool]


def battery_recall_policy(unit: AerialUnit, sector: Optional[Sector]) -> bool:
    """Default policy: bring the unit down before the battery runs out."""
    return unit.battery_level < AC.RECALL_BATTERY_LEVEL


class AerialDeploymentController:
    def __init__(self, alert_manager: AlertManager,
                 sector_lookup: Optional[Callable[[str], Optional[Sector]]] = None,
                 probability_threshold: float = AC.PROBABILITY_THRESHOLD,
                 threshold_duration_sec: float = AC.THRESHOLD_DURATION_SEC,
                 max_wind_speed: float = AC.MAX_LAUNCH_WIND_SPEED_MS,
                 target_altitude: float = AC.TARGET_ALTITUDE_M,
                 ascent_rate: float = AC.ASCENT_RATE_MS,
                 descent_rate: float = AC.DESCENT_RATE_MS,
                 recall_policy: Optional[RecallPolicy] = battery_recall_policy):
        self.alert_manager = alert_manager
        self.sector_lookup = sector_lookup or (lambda sector_id: None)
        self.probability_threshold = probability_threshold
        self.threshold_duration_sec = threshold_duration_sec
        self.max_wind_speed = max_wind_speed
        self.target_altitude = target_altitude
        self.ascent_rate = ascent_rate
        self.descent_rate = descent_rate
        self.recall_policy = recall_policy

        self._units: Dict[str, AerialUnit] = {}
        self._above_since: Dict[str, float] = {}
        self._lock = threading.RLock()

    # --- Units ---

    def register_unit(self, unit_id: str, battery_level: float = AC.FULL_BATTERY,
                      now: Optional[float] = None) -> AerialUnit:
        now = now if now is not None else time.time()
        with self._lock:
            unit = self._units.get(unit_id)
            if unit is None:
                unit = AerialUnit(unit_id=unit_id, battery_level=battery_level, status_since=now, last_updated=now)
                self._units[unit_id] = unit
                logger.info(f"Registered aerial unit {unit_id} (battery {battery_level:.0f}%).")
        return unit

    def add_unit(self, unit: AerialUnit) -> AerialUnit:
        """Adopts a unit restored from the store, keeping its current state."""
        with self._lock:
            self._units[unit.unit_id] = unit
        return unit

    def get_unit(self, unit_id: str) -> AerialUnit:
        unit = self._units.get(unit_id)
        if unit is None:
            raise UnitNotFoundError(unit_id)
        return unit

    def units(self) -> List[AerialUnit]:
        return sorted(self._units.values(), key=lambda u: u.unit_id)

    def unit_for_sector(self, sector_id: str) -> Optional[AerialUnit]:
        for unit in self._units.values():
            if unit.assigned_sector_id == sector_id and unit.is_airborne:
                return unit
        return None

    def active_count(self) -> int:
        return sum(1 for u in self._units.values() if u.status in (AerialStatus.DEPLOYING, AerialStatus.ACTIVE))

    def ingest_reading(self, unit_id: str, reading: AerialReading) -> AerialUnit:
        unit = self.get_unit(unit_id)
        unit.readings = reading
        return unit

    # --- Trigger tracking ---

    def observe(self, sector_id: str, probability: float, now: Optional[float] = None):
        """Tracks how long a sector has continuously stayed at or above the launch threshold."""
        now = now if now is not None else time.time()
        if probability >= self.probability_threshold:
            self._above_since.setdefault(sector_id, now)
        else:
            self._above_since.pop(sector_id, None)

    def duration_above_threshold(self, sector_id: str, now: Optional[float] = None) -> float:
        since = self._above_since.get(sector_id)
        if since is None:
            return 0.0
        now = now if now is not None else time.time()
        return max(0.0, now - since)

    def evaluate(self, sector_id: str, probability: float, duration: float,
                 wind_speed: Optional[float]) -> DeploymentDecision:
        """All launch conditions must hold; the first failing one is reported as the reason."""
        wind_speed = wind_speed if wind_speed is not None else 0.0

        def decision(should_deploy, reason=None):
            return DeploymentDecision(sector_id=sector_id, should_deploy=should_deploy, reason=reason,
                                      probability=probability, duration=duration, wind_speed=wind_speed)

        if self.unit_for_sector(sector_id) is not None:
            return decision(False, f"Aerial unit already assigned to {sector_id}")
        if probability < self.probability_threshold:
            return decision(False, f"Probability {probability:.1f}% below {self.probability_threshold:g}% threshold")
        if duration < self.threshold_duration_sec:
            remaining = math.ceil(self.threshold_duration_sec - duration)
            return decision(False, f"Need {remaining}s more above threshold")
        if not wind_speed < self.max_wind_speed:
            return decision(False, f"Wind speed {wind_speed:.1f} m/s too high for safe launch "
                                   f"(limit {self.max_wind_speed:g})")
        return decision(True)

    # --- Transitions ---

    def _transition(self, unit: AerialUnit, target: AerialStatus, now: float):
        if ALLOWED_TRANSITIONS.get(unit.status) != target:
            raise InvalidTransitionError(unit.unit_id, unit.status, target)
        logger.info(f"Aerial unit {unit.unit_id}: {unit.status.value} -> {target.value}")
        unit.status = target
        unit.status_since = now
        unit.last_updated = now

    def _emit(self, unit: AerialUnit, alert_type: AlertType, title: str, message: str,
              sector: Optional[Sector], now: float):
        self.alert_manager.create(
            sector_id=unit.assigned_sector_id or "",
            alert_type=alert_type,
            title=title,
            message=message,
            probability=sector.current_probability if sector else 0.0,
            aerial_status=unit.status.value,
            now=now
        )

    def deploy(self, sector_id: str, now: Optional[float] = None, wind_speed: Optional[float] = None,
               force: bool = False) -> AerialUnit:
        """
        Launches a standby unit to the sector. Unless forced, the launch
        conditions are checked first and DeploymentRejectedError carries the
        reason when they fail.
        """
        now = now if now is not None else time.time()
        with self._lock:
            sector = self.sector_lookup(sector_id)
            if sector is None:
                raise SectorNotFoundError(sector_id)

            decision = self.evaluate(sector_id, sector.current_probability,
                                     self.duration_above_threshold(sector_id, now), wind_speed)
            if not decision.should_deploy:
                already_assigned = self.unit_for_sector(sector_id) is not None
                if not force or already_assigned:
                    raise DeploymentRejectedError(decision)
                logger.warning(f"Forced deployment to {sector_id} despite: {decision.reason}")

            unit = next((u for u in self.units() if u.status == AerialStatus.STANDBY), None)
            if unit is None:
                raise NoAvailableUnitError(sector_id)

            self._transition(unit, AerialStatus.DEPLOYING, now)
            unit.assigned_sector_id = sector_id
            unit.position = sector.centroid
            unit.altitude = 0.0
            unit.ascent_rate = self.ascent_rate
            unit.estimated_max_altitude_time = now + self.target_altitude / self.ascent_rate

            sector.aerial_deployed = True
            sector.last_updated = now

        self._emit(unit, AlertType.AERIAL_DEPLOYED, f"Aerial unit launching over {sector.name}",
                   f"Unit {unit.unit_id} is ascending to {self.target_altitude:.0f} m.", sector, now)
        return unit

    def recall(self, unit_id: str, now: Optional[float] = None) -> AerialUnit:
        """Starts the descent of an active unit. Any other state raises InvalidTransitionError."""
        now = now if now is not None else time.time()
        with self._lock:
            unit = self.get_unit(unit_id)
            self._transition(unit, AerialStatus.DESCENDING, now)
            unit.ascent_rate = -self.descent_rate

            sector = self.sector_lookup(unit.assigned_sector_id) if unit.assigned_sector_id else None
            if sector is not None:
                sector.aerial_deployed = False
                sector.prediction_source = PredictionSource.GROUND
                sector.last_updated = now

        self._emit(unit, AlertType.AERIAL_RECALLED, "Aerial unit recalled",
                   f"Unit {unit.unit_id} is descending from {unit.altitude:.0f} m.", sector, now)
        return unit

    def update(self, now: Optional[float] = None) -> List[AerialUnit]:
        """
        Integrates altitude and battery since the last update and performs the
        automatic transitions. Returns the units whose status changed.
        """
        now = now if now is not None else time.time()
        changed = []
        with self._lock:
            for unit in self.units():
                elapsed = max(0.0, now - unit.last_updated)
                previous = unit.status

                if unit.status == AerialStatus.STANDBY:
                    unit.last_updated = now
                    continue

                unit.battery_level = max(0.0, unit.battery_level - AC.BATTERY_DRAIN_PER_MIN * elapsed / 60)
                sector = self.sector_lookup(unit.assigned_sector_id) if unit.assigned_sector_id else None

                if unit.status == AerialStatus.DEPLOYING:
                    unit.altitude = min(self.target_altitude, unit.altitude + self.ascent_rate * elapsed)
                    unit.last_updated = now
                    if now - unit.status_since >= self.target_altitude / self.ascent_rate:
                        self._transition(unit, AerialStatus.ACTIVE, now)
                        unit.altitude = self.target_altitude
                        unit.ascent_rate = 0.0
                        self._emit(unit, AlertType.AERIAL_DEPLOYED, "Aerial unit on station",
                                   f"Unit {unit.unit_id} reached {self.target_altitude:.0f} m and is monitoring.",
                                   sector, now)

                elif unit.status == AerialStatus.ACTIVE:
                    unit.last_updated = now
                    if self.recall_policy is not None and self.recall_policy(unit, sector):
                        logger.warning(f"Recall policy triggered for unit {unit.unit_id} "
                                       f"(battery {unit.battery_level:.0f}%).")
                        self.recall(unit.unit_id, now)

                elif unit.status == AerialStatus.DESCENDING:
                    unit.altitude = max(0.0, unit.altitude - self.descent_rate * elapsed)
                    unit.last_updated = now
                    if unit.altitude <= 0.0:
                        self._transition(unit, AerialStatus.STANDBY, now)
                        unit.ascent_rate = 0.0
                        self._emit(unit, AlertType.AERIAL_RECALLED, "Aerial unit landed",
                                   f"Unit {unit.unit_id} is back on standby.", sector, now)
                        unit.assigned_sector_id = None
                        unit.estimated_max_altitude_time = None
                        unit.readings = None

                if unit.status != previous:
                    changed.append(unit)
        return changed
