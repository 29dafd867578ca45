# cloudburst/geo/data_models.py
"""
Geographic value types. Both are frozen so they can be shared freely between
nodes, cells and sectors.
"""
from dataclasses import dataclass
from typing import Tuple

from .constants import GeoConstants


@dataclass(frozen=True)
class Coordinates:
    """A point in degrees. Valid when lat is in [-90, 90] and lng in [-180, 180]."""
    lat: float
    lng: float

    def as_lng_lat(self) -> Tuple[float, float]:
        return (self.lng, self.lat)

    def to_dict(self) -> dict:
        return {'lat': self.lat, 'lng': self.lng}


@dataclass(frozen=True)
class GeoBounds:
    """Axis-aligned lat/lng box. min_lat <= max_lat and min_lng <= max_lng."""
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    @classmethod
    def default(cls) -> "GeoBounds":
        return cls(**GeoConstants.DEFAULT_BOUNDS)

    def to_dict(self) -> dict:
        return {
            'minLat': self.min_lat, 'maxLat': self.max_lat,
            'minLng': self.min_lng, 'maxLng': self.max_lng
        }
