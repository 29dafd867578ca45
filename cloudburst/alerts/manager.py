# cloudburst/alerts/manager.py
"""
Creates alerts from detector, alert-level and aerial transitions and tracks
their acknowledgement.
"""
import logging
import threading
import time
import uuid
from collections import OrderedDict
from dataclasses import replace
from typing import Iterable, List, Optional

from .constants import AlertConstants
from .data_models import Alert, AlertSeverity, AlertType
from .exceptions import AlertNotFoundError
from ..prediction.alert_levels import AlertLevel
from ..prediction.data_models import CloudburstDetection
from ..propagation.data_models import WindData
from ..sectors.data_models import Sector

logger = logging.getLogger(__name__)


def severity_for(alert_type: AlertType, level: Optional[AlertLevel] = None) -> AlertSeverity:
    """Detection or a critical level -> critical, high level or system -> warning, aerial -> info."""
    if alert_type == AlertType.CLOUDBURST_DETECTED:
        return AlertSeverity.CRITICAL
    if alert_type == AlertType.HIGH_PROBABILITY:
        return AlertSeverity.CRITICAL if level == AlertLevel.CRITICAL else AlertSeverity.WARNING
    if alert_type == AlertType.SYSTEM_WARNING:
        return AlertSeverity.WARNING
    return AlertSeverity.INFO


class AlertManager:
    def __init__(self, max_history: int = AlertConstants.MAX_ALERT_HISTORY):
        self.max_history = max_history
        self._alerts: "OrderedDict[str, Alert]" = OrderedDict()
        self._changed: "OrderedDict[str, None]" = OrderedDict()
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._alerts)

    def create(self, sector_id: str, alert_type: AlertType, title: str, message: str,
               probability: float = 0.0, severity: Optional[AlertSeverity] = None,
               wind: Optional[WindData] = None, aerial_status: Optional[str] = None,
               now: Optional[float] = None) -> Alert:
        alert = Alert(
            alert_id=f"{AlertConstants.ALERT_ID_PREFIX}{uuid.uuid4().hex[:12]}",
            sector_id=sector_id,
            type=alert_type,
            severity=severity or severity_for(alert_type),
            title=title,
            message=message,
            probability=probability,
            timestamp=now if now is not None else time.time(),
            wind=wind,
            aerial_status=aerial_status
        )
        with self._lock:
            self._alerts[alert.alert_id] = alert
            self._changed[alert.alert_id] = None
            self._evict()
        log = logger.warning if alert.severity == AlertSeverity.CRITICAL else logger.info
        log(f"ALERT [{alert.severity.value}] {alert.title}: {alert.message}")
        return alert

    def _evict(self):
        # Oldest acknowledged alerts go first; unacknowledged ones are kept
        while len(self._alerts) > self.max_history:
            victim = next((a for a in self._alerts.values() if a.acknowledged), None)
            if victim is None:
                break
            del self._alerts[victim.alert_id]

    def get(self, alert_id: str) -> Alert:
        alert = self._alerts.get(alert_id)
        if alert is None:
            raise AlertNotFoundError(alert_id)
        return alert

    def list_alerts(self, unacknowledged_only: bool = False, sector_id: Optional[str] = None) -> List[Alert]:
        """Newest first."""
        with self._lock:
            alerts = list(self._alerts.values())
        if unacknowledged_only:
            alerts = [a for a in alerts if not a.acknowledged]
        if sector_id is not None:
            alerts = [a for a in alerts if a.sector_id == sector_id]
        return sorted(alerts, key=lambda a: a.timestamp, reverse=True)

    def unacknowledged_count(self) -> int:
        return sum(1 for a in self._alerts.values() if not a.acknowledged)

    def acknowledge(self, alert_id: str, user_id: str, now: Optional[float] = None) -> Alert:
        """
        One-way acknowledgement. Acknowledging again returns the alert with its
        original acknowledger and time untouched.
        """
        with self._lock:
            alert = self.get(alert_id)
            if alert.acknowledged:
                logger.debug(f"Alert {alert_id} already acknowledged by {alert.acknowledged_by}.")
                return alert
            alert = replace(alert, acknowledged=True,
                            acknowledged_at=now if now is not None else time.time(),
                            acknowledged_by=user_id)
            self._alerts[alert_id] = alert
            self._changed[alert_id] = None
        logger.info(f"Alert {alert_id} acknowledged by {user_id}.")
        return alert

    # --- Transition helpers ---

    def on_detection(self, sector: Sector, detection: CloudburstDetection, previous_detected: bool,
                     wind: Optional[WindData] = None, now: Optional[float] = None) -> Optional[Alert]:
        """Raises a detection alert only on the false -> true edge."""
        if not detection.detected or previous_detected:
            return None
        return self.create(
            sector_id=sector.sector_id,
            alert_type=AlertType.CLOUDBURST_DETECTED,
            title=f"Cloudburst detected in {sector.name}",
            message=(f"Rainfall {detection.rainfall_rate:.1f} mm/hr with pressure falling "
                     f"{detection.pressure_drop_rate:.1f} hPa/hr ({detection.confidence} confidence)."),
            probability=sector.current_probability,
            wind=wind,
            now=now
        )

    def on_level_change(self, sector: Sector, previous_level: AlertLevel,
                        wind: Optional[WindData] = None, now: Optional[float] = None) -> Optional[Alert]:
        """Raises an alert when the sector climbs into the high or critical level."""
        level = sector.alert_level
        if level.value not in AlertConstants.ALERTING_LEVELS or level.rank <= previous_level.rank:
            return None
        return self.create(
            sector_id=sector.sector_id,
            alert_type=AlertType.HIGH_PROBABILITY,
            severity=severity_for(AlertType.HIGH_PROBABILITY, level),
            title=f"{level.value.capitalize()} cloudburst risk in {sector.name}",
            message=(f"Probability rose to {sector.current_probability:.1f}% "
                     f"(was {previous_level.value})."),
            probability=sector.current_probability,
            wind=wind,
            now=now
        )

    # --- Store synchronisation ---

    def pop_changed(self) -> List[Alert]:
        """Alerts created or acknowledged since the last call."""
        with self._lock:
            changed = [self._alerts[a] for a in self._changed if a in self._alerts]
            self._changed.clear()
        return changed

    def mark_changed(self, alert_ids: Iterable[str]):
        with self._lock:
            for alert_id in alert_ids:
                self._changed[alert_id] = None
