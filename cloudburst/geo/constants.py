# cloudburst/geo/constants.py
"""
Static geodesy constants shared by the coordinate and bounds helpers.
"""
import math


class GeoConstants:
    EARTH_RADIUS_KM: float = 6371.0
    KM_PER_DEGREE_LAT: float = 111.0
    DEG_TO_RAD: float = math.pi / 180
    RAD_TO_DEG: float = 180 / math.pi

    # Placeholder region used when no node carries usable coordinates (India)
    DEFAULT_BOUNDS = {
        'min_lat': 20.0, 'max_lat': 35.0,
        'min_lng': 70.0, 'max_lng': 90.0
    }

    CARDINAL_DIRECTIONS = ['N', 'NE', 'E', 'SE', 'S', 'SW', 'W', 'NW']
    CARDINAL_DIRECTIONS_FULL = [
        'North', 'Northeast', 'East', 'Southeast',
        'South', 'Southwest', 'West', 'Northwest'
    ]
