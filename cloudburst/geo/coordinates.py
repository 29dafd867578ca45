# cloudburst/geo/coordinates.py
"""
Core coordinate geometry: great-circle distance, bearings, angle arithmetic
and the local equirectangular projection used by the partitioner.
Logging is omitted here as these are high-frequency, pure functions; invalid
input propagates as NaN and callers validate coordinates first.
"""
import math
from typing import List, Sequence, Tuple

from .constants import GeoConstants
from .data_models import Coordinates

R = GeoConstants.EARTH_RADIUS_KM


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometers."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = math.sin(d_lat / 2)**2 + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2)**2
    # Rounding can push `a` a hair past 1 for antipodal points
    if a > 1.0:
        a = 1.0
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return R * c


def calculate_distance(origin: Coordinates, target: Coordinates) -> float:
    return haversine_distance(origin.lat, origin.lng, target.lat, target.lng)


def calculate_bearing(from_lat: float, from_lng: float, to_lat: float, to_lng: float) -> float:
    """Initial bearing in degrees [0, 360), 0 = North, 90 = East."""
    lat1_rad, lat2_rad = math.radians(from_lat), math.radians(to_lat)
    d_lng = math.radians(to_lng - from_lng)
    y = math.sin(d_lng) * math.cos(lat2_rad)
    x = math.cos(lat1_rad) * math.sin(lat2_rad) - math.sin(lat1_rad) * math.cos(lat2_rad) * math.cos(d_lng)
    return (math.degrees(math.atan2(y, x)) + 360) % 360


def get_bearing(origin: Coordinates, target: Coordinates) -> float:
    return calculate_bearing(origin.lat, origin.lng, target.lat, target.lng)


def angle_difference(angle1: float, angle2: float) -> float:
    """Absolute difference between two headings, in [0, 180]."""
    diff = abs(angle1 - angle2) % 360
    return 360 - diff if diff > 180 else diff


def normalize_angle(angle: float) -> float:
    return ((angle % 360) + 360) % 360


def cardinal_direction(degrees: float, full: bool = False) -> str:
    """Eight-point compass label for a heading, e.g. 315 -> 'NW'."""
    names = GeoConstants.CARDINAL_DIRECTIONS_FULL if full else GeoConstants.CARDINAL_DIRECTIONS
    index = int(round(normalize_angle(degrees) / 45)) % 8
    return names[index]


def destination_point(origin: Coordinates, distance_km: float, bearing_deg: float) -> Coordinates:
    """Point reached travelling `distance_km` from origin along `bearing_deg`."""
    lat_rad = math.radians(origin.lat)
    lng_rad = math.radians(origin.lng)
    bearing_rad = math.radians(bearing_deg)
    angular_distance = distance_km / R

    dest_lat_rad = math.asin(math.sin(lat_rad) * math.cos(angular_distance) +
                             math.cos(lat_rad) * math.sin(angular_distance) * math.cos(bearing_rad))
    dest_lng_rad = lng_rad + math.atan2(math.sin(bearing_rad) * math.sin(angular_distance) * math.cos(lat_rad),
                                        math.cos(angular_distance) - math.sin(lat_rad) * math.sin(dest_lat_rad))
    return Coordinates(lat=math.degrees(dest_lat_rad), lng=math.degrees(dest_lng_rad))


def get_midpoint(origin: Coordinates, target: Coordinates) -> Coordinates:
    # Plain average is accurate enough at sector scale
    return Coordinates(lat=(origin.lat + target.lat) / 2, lng=(origin.lng + target.lng) / 2)


# --- Local planar projection ---

def to_projected(lat: float, lng: float, center_lat: float) -> Tuple[float, float]:
    """
    Equirectangular projection to (x, y) kilometers. Valid for regions that
    do not cross a pole or the antimeridian.
    """
    x = R * math.radians(lng) * math.cos(math.radians(center_lat))
    y = R * math.radians(lat)
    return x, y


def from_projected(x: float, y: float, center_lat: float) -> Tuple[float, float]:
    """Inverse of to_projected; returns (lat, lng)."""
    lat = math.degrees(y / R)
    lng = math.degrees(x / (R * math.cos(math.radians(center_lat))))
    return lat, lng


def polygon_area_km2(ring: Sequence[Tuple[float, float]]) -> float:
    """Approximate area of a (lng, lat) ring using the shoelace formula on projected points."""
    if len(ring) < 3:
        return 0.0
    center_lat = sum(p[1] for p in ring) / len(ring)
    projected: List[Tuple[float, float]] = [to_projected(lat, lng, center_lat) for lng, lat in ring]
    area = 0.0
    for i in range(len(projected)):
        j = (i + 1) % len(projected)
        area += projected[i][0] * projected[j][1] - projected[j][0] * projected[i][1]
    return abs(area) / 2


# --- Validation ---

def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and not math.isnan(value)


def is_valid_latitude(lat) -> bool:
    return _is_number(lat) and -90 <= lat <= 90


def is_valid_longitude(lng) -> bool:
    return _is_number(lng) and -180 <= lng <= 180


def is_valid_coordinates(coords: Coordinates) -> bool:
    return coords is not None and is_valid_latitude(coords.lat) and is_valid_longitude(coords.lng)
