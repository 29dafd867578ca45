"""
Geo utilities: distance, bearing, projection and bounding-box math.
"""

from .data_models import Coordinates, GeoBounds
from .constants import GeoConstants
from .coordinates import (
    haversine_distance, calculate_distance, calculate_bearing, get_bearing,
    angle_difference, normalize_angle, cardinal_direction, destination_point,
    get_midpoint, to_projected, from_projected, polygon_area_km2,
    is_valid_latitude, is_valid_longitude, is_valid_coordinates
)
from .bounds import bounds_from_coordinates, pad_bounds, bounds_center, is_within_bounds

__all__ = [
    "Coordinates",
    "GeoBounds",
    "GeoConstants",
    "haversine_distance",
    "calculate_distance",
    "calculate_bearing",
    "get_bearing",
    "angle_difference",
    "normalize_angle",
    "cardinal_direction",
    "destination_point",
    "get_midpoint",
    "to_projected",
    "from_projected",
    "polygon_area_km2",
    "is_valid_latitude",
    "is_valid_longitude",
    "is_valid_coordinates",
    "bounds_from_coordinates",
    "pad_bounds",
    "bounds_center",
    "is_within_bounds"
]
