# cloudburst/geo/bounds.py
"""
Bounding-box helpers for the monitored region.
"""
import math
from typing import Iterable

from .constants import GeoConstants
from .data_models import Coordinates, GeoBounds


def bounds_from_coordinates(coords: Iterable[Coordinates]) -> GeoBounds:
    """Tightest box around the given points, or the placeholder region when empty."""
    coords = list(coords)
    if not coords:
        return GeoBounds.default()

    lats = [c.lat for c in coords]
    lngs = [c.lng for c in coords]
    return GeoBounds(min_lat=min(lats), max_lat=max(lats), min_lng=min(lngs), max_lng=max(lngs))


def pad_bounds(bounds: GeoBounds, padding_km: float) -> GeoBounds:
    """Grows the box by `padding_km` on every side (degree approximation)."""
    padding_lat = padding_km / GeoConstants.KM_PER_DEGREE_LAT
    avg_lat = (bounds.min_lat + bounds.max_lat) / 2
    padding_lng = padding_km / (GeoConstants.KM_PER_DEGREE_LAT * math.cos(math.radians(avg_lat)))

    return GeoBounds(
        min_lat=bounds.min_lat - padding_lat,
        max_lat=bounds.max_lat + padding_lat,
        min_lng=bounds.min_lng - padding_lng,
        max_lng=bounds.max_lng + padding_lng
    )


def bounds_center(bounds: GeoBounds) -> Coordinates:
    return Coordinates(lat=(bounds.min_lat + bounds.max_lat) / 2, lng=(bounds.min_lng + bounds.max_lng) / 2)


def is_within_bounds(point: Coordinates, bounds: GeoBounds) -> bool:
    return (bounds.min_lat <= point.lat <= bounds.max_lat and
            bounds.min_lng <= point.lng <= bounds.max_lng)
