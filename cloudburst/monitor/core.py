# cloudburst/monitor/core.py
"""
MonitoringService wires the engine together and owns all mutable state:
the node registry, the sector map, cached readings, the propagation
scheduler, aerial units and alerts.

Each cycle is an explicit pull/refresh: readings are normalised and stored,
the affected sector is recomputed, and changed state is published to the
store. Store failures flip `connection_status` to "disconnected"; in-memory
state is kept and republished by the next successful publish.
"""
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

from .data_models import MonitorConfig, NodeReadings
from ..aerial.controller import AerialDeploymentController
from ..aerial.data_models import AerialStatus, DeploymentDecision
from ..aerial.exceptions import AerialError, NoAvailableUnitError
from ..alerts.data_models import AlertType
from ..alerts.exceptions import AlertError
from ..alerts.manager import AlertManager
from ..geo.data_models import GeoBounds
from ..prediction.data_models import AerialReading, RainfallReading, WeatherReading
from ..prediction.detector import CloudburstDetector, PressureHistory
from ..prediction.fusion import ProbabilityFusionEngine
from ..prediction.risk_score import ManualObservation, RiskScoring
from ..propagation.data_models import PropagationResult, WindData
from ..propagation.scheduler import WindPropagationScheduler
from ..sectors.builder import create_sectors, get_sector, sector_id_for
from ..sectors.data_models import Sector, VoronoiCell
from ..sectors.exceptions import SectorError
from ..sectors.partitioner import SpatialPartitioner, needs_regeneration, total_monitored_area_km2
from ..sectors.registry import NodeRegistry
from ..store import codec
from ..store.base import KeyValueStore
from ..store.constants import StorePaths
from ..store.exceptions import StoreUnavailableError
from ..utils.timestamps import to_iso

logger = logging.getLogger(__name__)

CONNECTED = "connected"
DISCONNECTED = "disconnected"


def _reported_at(*readings) -> Optional[float]:
    timestamps = [r.timestamp for r in readings if r is not None and r.timestamp is not None]
    return max(timestamps) if timestamps else None


class MonitoringService:
    """Public entry point of the engine."""

    def __init__(self, store: KeyValueStore, config: Optional[MonitorConfig] = None):
        if not logging.getLogger().hasHandlers():
            logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

        self.store = store
        self.config = config or MonitorConfig()
        cfg = self.config

        self.registry = NodeRegistry(timeout_minutes=cfg.node_timeout_minutes)
        self.partitioner = SpatialPartitioner(min_radius_km=cfg.min_sector_radius_km,
                                              max_radius_km=cfg.max_sector_radius_km)
        self.fusion = ProbabilityFusionEngine()
        self.detector = CloudburstDetector()
        self.scheduler = WindPropagationScheduler(threshold=cfg.propagation_threshold,
                                                  max_hops=cfg.max_hops,
                                                  horizon_minutes=cfg.horizon_minutes)
        self.alerts = AlertManager()
        self.aerial = AerialDeploymentController(
            self.alerts,
            sector_lookup=lambda sector_id: self._sectors.get(sector_id),
            probability_threshold=cfg.deploy_probability_threshold,
            threshold_duration_sec=cfg.deploy_duration_sec,
            max_wind_speed=cfg.max_launch_wind_speed
        )

        self.connection_status = CONNECTED
        self._sectors: Dict[str, Sector] = {}
        self._cells: List[VoronoiCell] = []
        self._bounds: Optional[GeoBounds] = None
        self._readings: Dict[str, NodeReadings] = {}
        self._pressure: Dict[str, PressureHistory] = {}
        self._wind: Optional[WindData] = None
        self._dirty: Dict[str, None] = {}
        self._geometry_dirty = False
        self._last_tick: Optional[float] = None

        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._unsubscribers: List[Callable[[], None]] = []
        logger.info("MonitoringService initialized.")

    # --- Store access ---

    def _store_call(self, method: Callable, *args):
        try:
            result = method(*args)
        except StoreUnavailableError as e:
            if self.connection_status != DISCONNECTED:
                logger.warning("Store unreachable; marking connection as disconnected.")
                self.connection_status = DISCONNECTED
                self.raise_system_warning(f"Connection to the data store lost ({e}); changes are kept locally.")
            raise
        if self.connection_status != CONNECTED:
            logger.info("Store reachable again.")
        self.connection_status = CONNECTED
        return result

    def _format_response(self, success: bool, message: str, data: Dict) -> Dict[str, Any]:
        return {
            "module": "monitor",
            "success": success,
            "message": message,
            "data": data,
            "timestamp": time.time()
        }

    # --- State accessors ---

    @property
    def sectors(self) -> Dict[str, Sector]:
        return dict(self._sectors)

    @property
    def wind(self) -> Optional[WindData]:
        return self._wind

    def get_sector(self, sector_id: str) -> Sector:
        return get_sector(self._sectors, sector_id)

    # --- Loading ---

    def load_from_store(self, now: Optional[float] = None) -> Dict[str, Any]:
        """Reads the node registry, wind, aerial units and seeded sector state."""
        now = now if now is not None else time.time()
        try:
            nodes = self._store_call(self.store.get, StorePaths.NODES)
            wind = self._store_call(self.store.get, StorePaths.WIND)
            units = self._store_call(self.store.get, StorePaths.AERIAL)
            seeded = self._store_call(self.store.get, StorePaths.SECTORS)
        except StoreUnavailableError as e:
            return self._format_response(False, str(e), {"connection_status": self.connection_status})

        with self._lock:
            loaded = self.registry.load_records(nodes or {})
            parsed_wind = codec.wind_from_record(wind)
            if parsed_wind is not None:
                self._wind = parsed_wind
            for unit_id, record in (units or {}).items():
                unit = codec.unit_from_record(unit_id, record)
                if unit is not None:
                    self.aerial.add_unit(unit)

        response = self.refresh_partition(force=True, now=now)

        seeded_count = 0
        with self._lock:
            for sector_id, record in (seeded or {}).items():
                sector = self._sectors.get(sector_id)
                if sector is not None and codec.seed_sector_from_record(sector, record):
                    seeded_count += 1
                    self.aerial.observe(sector_id, sector.current_probability, now)
                    self._dirty[sector_id] = None
        if seeded_count:
            self.publish()

        return self._format_response(
            response["success"],
            f"Loaded {loaded} nodes, {len(self.aerial.units())} aerial units, {seeded_count} seeded sectors",
            {"nodes": loaded, "sectors": len(self._sectors), "seeded": seeded_count,
             "connection_status": self.connection_status}
        )

    def subscribe_to_store(self) -> int:
        """
        Turns store changes into pipeline input: readings are normalised and
        ingested, wind replaces the current wind, and node changes trigger a
        partition refresh.
        """
        def on_readings(path: str, value):
            for node_id, record in (value or {}).items():
                if node_id in self.registry:
                    self.ingest_reading_record(node_id, record)

        def on_wind(path: str, value):
            wind = codec.wind_from_record(value)
            if wind is not None:
                self.set_wind(wind)

        def on_nodes(path: str, value):
            self.registry.load_records(value or {})
            self.refresh_partition()

        self._unsubscribers = [
            self.store.subscribe(StorePaths.READINGS, on_readings),
            self.store.subscribe(StorePaths.WIND, on_wind),
            self.store.subscribe(StorePaths.NODES, on_nodes),
        ]
        return len(self._unsubscribers)

    def unsubscribe_from_store(self):
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    # --- Partitioning ---

    def refresh_partition(self, force: bool = False, now: Optional[float] = None) -> Dict[str, Any]:
        """Regenerates sectors when the active node set changed (or when forced) and publishes them."""
        now = now if now is not None else time.time()
        with self._lock:
            active = self.registry.active_nodes()
            if not force and self._sectors and not needs_regeneration(self._cells, active):
                return self._format_response(True, "Partition unchanged", {"sectors": len(self._sectors)})

            result = self.partitioner.partition(active)
            self._sectors = create_sectors(result, active, previous=self._sectors, now=now)
            self._cells = result.cells
            self._bounds = result.bounds
            # Pending delays were computed against the old geometry
            self.scheduler.clear_pending_events()
            self._geometry_dirty = True

        synced = self.publish()
        return self._format_response(
            True,
            f"Partition regenerated with {len(self._sectors)} sectors",
            {"sectors": len(self._sectors), "bounds": self._bounds.to_dict(),
             "synced": synced, "connection_status": self.connection_status}
        )

    # --- Readings ---

    def set_wind(self, wind: WindData):
        with self._lock:
            self._wind = wind
        logger.debug(f"Wind set to {wind.speed:.1f} m/s from {wind.direction:.0f} deg")

    def ingest_readings(self, node_id: str, weather: Optional[WeatherReading] = None,
                        rainfall: Optional[RainfallReading] = None, aerial: Optional[AerialReading] = None,
                        now: Optional[float] = None) -> Optional[Sector]:
        """Caches a node's latest readings and recomputes its sector. Unknown nodes raise NodeNotFoundError."""
        now = now if now is not None else time.time()
        reported_at = _reported_at(weather, rainfall, aerial)
        with self._lock:
            was_active = self.registry.get(node_id).is_active
            node = self.registry.mark_seen(node_id, now=now, seen_at=reported_at)
            cached = self._readings.setdefault(node_id, NodeReadings())
            if reported_at is not None:
                cached.reported_at = reported_at if cached.reported_at is None else max(cached.reported_at, reported_at)
            if weather is not None:
                cached.weather = weather
                history = self._pressure.setdefault(node_id, PressureHistory())
                history.add(weather.pressure, weather.timestamp if weather.timestamp is not None else now)
            if rainfall is not None:
                cached.rainfall = rainfall
            if aerial is not None:
                cached.aerial = aerial

            if node.is_active and not was_active:
                self.refresh_partition(now=now)

            sector_id = sector_id_for(node_id)
            if sector_id not in self._sectors:
                logger.debug(f"Readings for {node_id} cached; no sector yet.")
                return None
            return self.recompute_sector(sector_id, now)

    def ingest_reading_record(self, node_id: str, record: Dict[str, Any], now: Optional[float] = None):
        """Ingests a store record unless it is no newer than the last one ingested for the node."""
        if not isinstance(record, dict):
            return None
        weather = codec.weather_from_record(record.get('weather'))
        rainfall = codec.rainfall_from_record(record.get('rainfall'))
        aerial = codec.aerial_reading_from_record(record.get('aerial'))
        with self._lock:
            cached = self._readings.get(node_id)
            if cached is not None and not cached.is_newer(record, _reported_at(weather, rainfall, aerial)):
                logger.debug(f"Record for {node_id} already ingested; skipping.")
                return None
            sector = self.ingest_readings(node_id, weather=weather, rainfall=rainfall, aerial=aerial, now=now)
            self._readings[node_id].record = record
        return sector

    # --- Recomputation ---

    def recompute_sector(self, sector_id: str, now: Optional[float] = None) -> Sector:
        """Fusion -> detection -> alerts -> propagation and deployment triggers for one sector."""
        now = now if now is not None else time.time()
        with self._lock:
            sector = self.get_sector(sector_id)
            readings = self._readings.get(sector.node_id, NodeReadings())
            unit = self.aerial.unit_for_sector(sector_id)
            aerial = unit.readings if unit is not None and unit.status == AerialStatus.ACTIVE else None
            aerial = aerial or readings.aerial
            if readings.weather is None and readings.rainfall is None and aerial is None:
                return sector

            previous_level = sector.alert_level
            previous_detected = sector.cloudburst_detected

            calculation = self.fusion.calculate(readings.weather, readings.rainfall, aerial, now)
            sector.set_probability(calculation.combined_probability, calculation.confidence, now)
            sector.prediction_source = calculation.source

            history = self._pressure.get(sector.node_id)
            detection = self.detector.detect_reading(readings.rainfall, history.drop_rate() if history else 0.0)
            sector.cloudburst_detected = detection.detected
            sector.cloudburst_confidence = detection.confidence

            self.alerts.on_detection(sector, detection, previous_detected, self._wind, now)
            self.alerts.on_level_change(sector, previous_level, self._wind, now)
            self.aerial.observe(sector_id, sector.current_probability, now)
            self._dirty[sector_id] = None

            if self._wind is not None:
                self.propagate_from(sector_id, now)
            if self.config.auto_deploy:
                self._auto_deploy(sector, now)
        return sector

    def propagate_from(self, sector_id: str, now: Optional[float] = None) -> PropagationResult:
        now = now if now is not None else time.time()
        with self._lock:
            sector = self.get_sector(sector_id)
            if self._wind is None:
                return PropagationResult()
            if self.config.use_cascade:
                return self.scheduler.propagate_cascade(sector, self._sectors, self._wind, now)
            return self.scheduler.propagate(sector, self._sectors, self._wind, now)

    def manual_prediction(self, observation: ManualObservation,
                          history: Sequence[ManualObservation] = ()) -> Dict[str, Any]:
        """Scores an operator-entered observation; no sector state is touched."""
        assessment = RiskScoring.calculate(observation, history)
        return self._format_response(
            True,
            f"{assessment.description}: {assessment.probability}% cloudburst probability",
            assessment.to_dict()
        )

    def evaluate_deployment(self, sector_id: str, now: Optional[float] = None) -> DeploymentDecision:
        now = now if now is not None else time.time()
        sector = self.get_sector(sector_id)
        return self.aerial.evaluate(sector_id, sector.current_probability,
                                    self.aerial.duration_above_threshold(sector_id, now),
                                    self._wind.speed if self._wind else None)

    def _auto_deploy(self, sector: Sector, now: float):
        decision = self.evaluate_deployment(sector.sector_id, now)
        if not decision.should_deploy:
            return
        try:
            self.aerial.deploy(sector.sector_id, now, self._wind.speed if self._wind else None)
        except NoAvailableUnitError as e:
            logger.warning(str(e))

    # --- Tick ---

    def tick(self, now: Optional[float] = None) -> Dict[str, Any]:
        """One scheduling cycle: node health, due propagation, aerial progress, publish."""
        now = now if now is not None else time.time()
        with self._lock:
            stale = self.registry.check_stale(now)
            if stale or needs_regeneration(self._cells, self.registry.active_nodes()):
                self.refresh_partition(now=now)

            levels = {sector_id: sector.alert_level for sector_id, sector in self._sectors.items()}
            applied = self.scheduler.apply_due_events(self._sectors, now)
            for sector_id in applied:
                sector = self._sectors[sector_id]
                self.alerts.on_level_change(sector, levels[sector_id], self._wind, now)
                self._dirty[sector_id] = None

            for sector_id, sector in self._sectors.items():
                self.aerial.observe(sector_id, sector.current_probability, now)
            changed_units = self.aerial.update(now)
            for unit in changed_units:
                if unit.assigned_sector_id in self._sectors:
                    self._dirty[unit.assigned_sector_id] = None

            if self.config.auto_deploy:
                for sector in list(self._sectors.values()):
                    self._auto_deploy(sector, now)
            self._last_tick = now

        synced = self.publish()
        return {
            "applied": applied,
            "units_changed": [unit.unit_id for unit in changed_units],
            "pending_events": len(self.scheduler.pending_events()),
            "synced": synced
        }

    # --- Publishing ---

    def publish(self) -> bool:
        """Writes changed sectors, aerial units and alerts. Returns False if the store is unreachable."""
        with self._lock:
            if self._geometry_dirty:
                sector_values = {sid: codec.sector_record(s) for sid, s in self._sectors.items()}
            else:
                sector_values = {}
                for sector_id in self._dirty:
                    sector = self._sectors.get(sector_id)
                    if sector is None:
                        continue
                    for field_name, value in codec.sector_state_record(sector).items():
                        sector_values[f"{sector_id}/{field_name}"] = value
            unit_values = {unit.unit_id: codec.unit_to_record(unit) for unit in self.aerial.units()}
            alerts = self.alerts.pop_changed()
            geometry_dirty = self._geometry_dirty
            published = list(self._dirty)

        try:
            if geometry_dirty:
                self._store_call(self.store.set, StorePaths.SECTORS, sector_values)
            elif sector_values:
                self._store_call(self.store.update, StorePaths.SECTORS, sector_values)
            if unit_values:
                self._store_call(self.store.update, StorePaths.AERIAL, unit_values)
            for alert in alerts:
                self._store_call(self.store.set, StorePaths.alert(alert.alert_id), alert.to_dict())
        except StoreUnavailableError as e:
            logger.warning(f"Publish failed, will retry on next cycle: {e}")
            self.alerts.mark_changed(alert.alert_id for alert in alerts)
            return False

        with self._lock:
            for sector_id in published:
                self._dirty.pop(sector_id, None)
            if geometry_dirty:
                self._geometry_dirty = False
        return True

    # --- Actuators ---

    def deploy(self, sector_id: str, force: bool = False, now: Optional[float] = None) -> Dict[str, Any]:
        now = now if now is not None else time.time()
        with self._lock:
            wind_speed = self._wind.speed if self._wind else None
            try:
                unit = self.aerial.deploy(sector_id, now, wind_speed, force=force)
            except (AerialError, SectorError) as e:
                decision = getattr(e, 'decision', None)
                return self._format_response(False, str(e), {
                    "sector_id": sector_id,
                    "reason": decision.reason if decision else str(e),
                    "error_type": type(e).__name__
                })
            self._dirty[sector_id] = None

        synced = self.publish()
        return self._format_response(True, f"Aerial unit {unit.unit_id} deploying to {sector_id}", {
            "unit": unit.to_dict(), "synced": synced, "connection_status": self.connection_status
        })

    def recall(self, unit_id: str, now: Optional[float] = None) -> Dict[str, Any]:
        now = now if now is not None else time.time()
        with self._lock:
            try:
                unit = self.aerial.recall(unit_id, now)
            except AerialError as e:
                return self._format_response(False, str(e), {"unit_id": unit_id, "error_type": type(e).__name__})
            if unit.assigned_sector_id:
                self._dirty[unit.assigned_sector_id] = None

        synced = self.publish()
        return self._format_response(True, f"Aerial unit {unit_id} recalled", {
            "unit": unit.to_dict(), "synced": synced, "connection_status": self.connection_status
        })

    def acknowledge_alert(self, alert_id: str, user_id: str, now: Optional[float] = None) -> Dict[str, Any]:
        if not alert_id or not user_id:
            return self._format_response(False, "alert_id and user_id are required", {"alert_id": alert_id})
        with self._lock:
            try:
                already = self.alerts.get(alert_id).acknowledged
                alert = self.alerts.acknowledge(alert_id, user_id, now)
            except AlertError as e:
                return self._format_response(False, str(e), {"alert_id": alert_id, "error_type": type(e).__name__})

        synced = self.publish()
        message = "Alert was already acknowledged" if already else f"Alert {alert_id} acknowledged"
        return self._format_response(True, message, {
            "alert_id": alert_id,
            "acknowledged_at": to_iso(alert.acknowledged_at),
            "acknowledged_by": alert.acknowledged_by,
            "synced": synced
        })

    def raise_system_warning(self, message: str, sector_id: str = "", now: Optional[float] = None):
        return self.alerts.create(sector_id=sector_id, alert_type=AlertType.SYSTEM_WARNING,
                                  title="System warning", message=message, now=now)

    # --- Background ticker ---

    def start(self):
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="cloudburst-ticker", daemon=True)
        self._thread.start()
        logger.info(f"Background ticker started (every {self.config.tick_interval_sec}s).")

    def stop(self, timeout: float = 5.0):
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        self.unsubscribe_from_store()
        logger.info("Background ticker stopped.")

    def _run(self):
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception as e:
                logger.error(f"Tick failed: {e}", exc_info=True)
            self._stop_event.wait(self.config.tick_interval_sec)

    # --- Status ---

    def system_status(self) -> Dict[str, Any]:
        with self._lock:
            nodes = self.registry.all_nodes()
            return {
                "connection_status": self.connection_status,
                "nodes_total": len(nodes),
                "nodes_active": sum(1 for node in nodes if node.is_active),
                "sectors": len(self._sectors),
                "monitored_area_km2": round(total_monitored_area_km2(self._cells), 1),
                "pending_events": len(self.scheduler.pending_events()),
                "aerial_active": self.aerial.active_count(),
                "unacknowledged_alerts": self.alerts.unacknowledged_count(),
                "wind": codec.wind_to_record(self._wind) if self._wind else None,
                "last_tick": to_iso(self._last_tick)
            }
