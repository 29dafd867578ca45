# cloudburst/store/codec.py
"""
Conversion between store records (camelCase, ISO-8601 or epoch-ms
timestamps) and the engine's dataclasses (snake_case, epoch seconds).
Readers are lenient: a malformed record yields None rather than an error.
"""
import logging
import math
from typing import Any, Mapping, Optional

from ..aerial.data_models import AerialStatus, AerialUnit
from ..geo.data_models import Coordinates
from ..prediction.data_models import AerialReading, PredictionSource, RainfallReading, WeatherReading
from ..propagation.data_models import WindData
from ..sectors.builder import sector_to_geojson
from ..sectors.data_models import Sector
from ..utils.timestamps import to_epoch_seconds, to_iso

logger = logging.getLogger(__name__)

_LEGACY_SOURCES = {
    'aerial': PredictionSource.GROUND_AERIAL,
    'ground+aerial': PredictionSource.GROUND_AERIAL,
    'ground': PredictionSource.GROUND,
    'unavailable': PredictionSource.UNAVAILABLE,
}


def _number(value: Any, default: Optional[float] = None) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return default if math.isnan(number) else number


def normalize_prediction_source(value: Any) -> PredictionSource:
    if isinstance(value, PredictionSource):
        return value
    return _LEGACY_SOURCES.get(str(value).strip().lower(), PredictionSource.UNAVAILABLE)


def normalize_cloudburst_confidence(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip().lower()
    return text if text in ('high', 'medium', 'low') else None


# --- Readings ---

def weather_from_record(record: Optional[Mapping]) -> Optional[WeatherReading]:
    if not isinstance(record, Mapping):
        return None
    pressure = _number(record.get('pressure'))
    humidity = _number(record.get('humidity'))
    if pressure is None or humidity is None:
        return None
    return WeatherReading(
        temperature=_number(record.get('temperature'), 0.0),
        pressure=pressure,
        humidity=humidity,
        timestamp=to_epoch_seconds(record.get('timestamp'))
    )


def rainfall_from_record(record: Optional[Mapping]) -> Optional[RainfallReading]:
    if not isinstance(record, Mapping):
        return None
    rate = _number(record.get('rate'))
    if rate is None:
        return None
    return RainfallReading(
        rate=rate,
        cumulative=_number(record.get('cumulative'), 0.0),
        timestamp=to_epoch_seconds(record.get('timestamp'))
    )


def aerial_reading_from_record(record: Optional[Mapping]) -> Optional[AerialReading]:
    if not isinstance(record, Mapping):
        return None
    pwv = _number(record.get('pwv'))
    humidity = _number(record.get('humidity'))
    if pwv is None or humidity is None:
        return None
    return AerialReading(
        altitude=_number(record.get('altitude'), 0.0),
        temperature=_number(record.get('temperature'), 0.0),
        pressure=_number(record.get('pressure'), 0.0),
        humidity=humidity,
        pwv=pwv,
        timestamp=to_epoch_seconds(record.get('timestamp'))
    )


def wind_from_record(record: Optional[Mapping]) -> Optional[WindData]:
    if not isinstance(record, Mapping):
        return None
    speed = _number(record.get('speed'))
    direction = _number(record.get('direction'))
    if speed is None or direction is None:
        return None
    return WindData(speed=max(0.0, speed), direction=direction % 360,
                    timestamp=to_epoch_seconds(record.get('timestamp')))


def wind_to_record(wind: WindData) -> dict:
    return {'speed': wind.speed, 'direction': wind.direction, 'timestamp': to_iso(wind.timestamp)}


# --- Sectors ---

def sector_state_record(sector: Sector) -> dict:
    """The dynamic fields written back after every recomputation."""
    return {
        'probability': round(sector.current_probability, 2),
        'confidence': round(sector.confidence, 3),
        'alertLevel': sector.alert_level.value,
        'cloudburstDetected': sector.cloudburst_detected,
        'cloudburstConfidence': sector.cloudburst_confidence,
        'predictionSource': sector.prediction_source.value,
        'aerialDeployed': sector.aerial_deployed,
        'lastUpdated': to_iso(sector.last_updated)
    }


def sector_record(sector: Sector) -> dict:
    """Full record including geometry, written when the partition is regenerated."""
    feature = sector_to_geojson(sector)
    record = sector_state_record(sector)
    record.update({
        'nodeId': sector.node_id,
        'name': sector.name,
        'geometry': feature['geometry'],
        'centroid': sector.centroid.to_dict(),
        'neighbors': list(sector.neighbors)
    })
    return record


def seed_sector_from_record(sector: Sector, record: Optional[Mapping]) -> bool:
    """Copies externally seeded probability state onto a sector. Returns True if anything was applied."""
    if not isinstance(record, Mapping):
        return False
    probability = _number(record.get('probability', record.get('currentProbability')))
    if probability is None:
        return False
    sector.set_probability(probability, _number(record.get('confidence')),
                           to_epoch_seconds(record.get('lastUpdated'), sector.last_updated))
    if 'predictionSource' in record:
        sector.prediction_source = normalize_prediction_source(record.get('predictionSource'))
    sector.cloudburst_detected = bool(record.get('cloudburstDetected', sector.cloudburst_detected))
    sector.cloudburst_confidence = normalize_cloudburst_confidence(record.get('cloudburstConfidence'))
    sector.aerial_deployed = bool(record.get('aerialDeployed', sector.aerial_deployed))
    return True


# --- Aerial units ---

def unit_from_record(unit_id: str, record: Optional[Mapping]) -> Optional[AerialUnit]:
    if not isinstance(record, Mapping):
        return None
    try:
        status = AerialStatus(str(record.get('status', 'standby')).lower())
    except ValueError:
        logger.warning(f"Aerial unit '{unit_id}' has unknown status {record.get('status')!r}; assuming standby.")
        status = AerialStatus.STANDBY

    position = record.get('position')
    coordinates = None
    if isinstance(position, Mapping) and _number(position.get('lat')) is not None:
        coordinates = Coordinates(lat=_number(position.get('lat')), lng=_number(position.get('lng'), 0.0))

    readings = record.get('readings')
    last_updated = to_epoch_seconds(record.get('lastUpdated'))
    unit = AerialUnit(
        unit_id=str(unit_id),
        status=status,
        assigned_sector_id=record.get('assignedSectorId') or None,
        position=coordinates,
        altitude=_number(record.get('altitude'), _number((readings or {}).get('altitude'), 0.0)),
        ascent_rate=_number(record.get('ascentRate'), 0.0),
        battery_level=_number(record.get('batteryLevel'), 100.0),
        estimated_max_altitude_time=to_epoch_seconds(record.get('estimatedMaxAltitudeTime')),
        readings=aerial_reading_from_record(readings)
    )
    if last_updated is not None:
        unit.last_updated = last_updated
        unit.status_since = last_updated
    return unit


def unit_to_record(unit: AerialUnit) -> dict:
    return unit.to_dict()
