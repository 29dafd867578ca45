#!/usr/bin/env python3
# cloudburst/geo/tests/test_geo_coordinates.py
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent.parent.parent
sys.path.append(str(project_root))

import math
import unittest

from cloudburst.geo import (
    Coordinates, GeoBounds, haversine_distance, calculate_distance, calculate_bearing,
    angle_difference, normalize_angle, cardinal_direction, destination_point, to_projected,
    from_projected, polygon_area_km2, is_valid_latitude, is_valid_longitude, is_valid_coordinates,
    bounds_from_coordinates, pad_bounds, bounds_center, is_within_bounds
)


class TestDistanceAndBearing(unittest.TestCase):
    def test_zero_distance(self):
        self.assertEqual(haversine_distance(30.0, 78.0, 30.0, 78.0), 0.0)

    def test_one_degree_latitude(self):
        """One degree of latitude is ~111.2 km on a 6371 km sphere"""
        self.assertAlmostEqual(haversine_distance(30.0, 78.0, 31.0, 78.0), 111.19, places=1)

    def test_distance_is_symmetric(self):
        a = Coordinates(30.1, 78.2)
        b = Coordinates(30.4, 77.9)
        self.assertAlmostEqual(calculate_distance(a, b), calculate_distance(b, a))

    def test_nan_propagates(self):
        self.assertTrue(math.isnan(haversine_distance(float('nan'), 78.0, 30.0, 78.0)))

    def test_cardinal_bearings(self):
        self.assertAlmostEqual(calculate_bearing(30.0, 78.0, 31.0, 78.0), 0.0, places=6)
        self.assertAlmostEqual(calculate_bearing(30.0, 78.0, 30.0, 79.0), 90.0, delta=0.5)
        self.assertAlmostEqual(calculate_bearing(30.0, 78.0, 29.0, 78.0), 180.0, places=6)
        self.assertAlmostEqual(calculate_bearing(30.0, 78.0, 30.0, 77.0), 270.0, delta=0.5)

    def test_bearing_range(self):
        bearing = calculate_bearing(30.0, 78.0, 29.5, 77.5)
        self.assertGreaterEqual(bearing, 0.0)
        self.assertLess(bearing, 360.0)


class TestAngles(unittest.TestCase):
    def test_angle_difference_wraps(self):
        self.assertEqual(angle_difference(350, 10), 20)
        self.assertEqual(angle_difference(10, 350), 20)
        self.assertEqual(angle_difference(0, 180), 180)
        self.assertEqual(angle_difference(90, 90), 0)

    def test_normalize_angle(self):
        self.assertEqual(normalize_angle(-90), 270)
        self.assertEqual(normalize_angle(720), 0)

    def test_cardinal_direction(self):
        self.assertEqual(cardinal_direction(0), 'N')
        self.assertEqual(cardinal_direction(315), 'NW')
        self.assertEqual(cardinal_direction(359), 'N')


class TestDestinationAndProjection(unittest.TestCase):
    def test_destination_point_distance(self):
        origin = Coordinates(30.0, 78.0)
        for bearing in (0, 45, 137, 270):
            dest = destination_point(origin, 10.0, bearing)
            self.assertAlmostEqual(calculate_distance(origin, dest), 10.0, places=6)

    def test_projection_round_trip(self):
        x, y = to_projected(30.25, 78.4, 30.0)
        lat, lng = from_projected(x, y, 30.0)
        self.assertAlmostEqual(lat, 30.25, places=9)
        self.assertAlmostEqual(lng, 78.4, places=9)

    def test_projection_units_are_km(self):
        x0, y0 = to_projected(30.0, 78.0, 30.0)
        _, y1 = to_projected(31.0, 78.0, 30.0)
        self.assertAlmostEqual(y1 - y0, 111.19, places=1)

    def test_polygon_area_of_square(self):
        # ~10 km square near the equator
        side = 10.0 / 111.19
        ring = [(0, 0), (side, 0), (side, side), (0, side), (0, 0)]
        self.assertAlmostEqual(polygon_area_km2(ring), 100.0, delta=0.5)


class TestValidation(unittest.TestCase):
    def test_latitude_bounds(self):
        self.assertTrue(is_valid_latitude(90))
        self.assertTrue(is_valid_latitude(-90))
        self.assertFalse(is_valid_latitude(90.01))
        self.assertFalse(is_valid_latitude(None))
        self.assertFalse(is_valid_latitude(float('nan')))
        self.assertFalse(is_valid_latitude(True))

    def test_longitude_bounds(self):
        self.assertTrue(is_valid_longitude(180))
        self.assertFalse(is_valid_longitude(-180.5))
        self.assertFalse(is_valid_longitude("78"))

    def test_coordinates(self):
        self.assertTrue(is_valid_coordinates(Coordinates(30, 78)))
        self.assertFalse(is_valid_coordinates(Coordinates(95, 78)))
        self.assertFalse(is_valid_coordinates(None))


class TestBounds(unittest.TestCase):
    def test_empty_gives_placeholder(self):
        bounds = bounds_from_coordinates([])
        self.assertEqual(bounds, GeoBounds(min_lat=20, max_lat=35, min_lng=70, max_lng=90))

    def test_tight_bounds(self):
        bounds = bounds_from_coordinates([Coordinates(30, 78), Coordinates(31, 77), Coordinates(30.5, 79)])
        self.assertEqual((bounds.min_lat, bounds.max_lat, bounds.min_lng, bounds.max_lng), (30, 31, 77, 79))

    def test_padding(self):
        bounds = pad_bounds(GeoBounds(30, 30, 78, 78), 111.0)
        self.assertAlmostEqual(bounds.min_lat, 29.0)
        self.assertAlmostEqual(bounds.max_lat, 31.0)
        self.assertGreater(bounds.max_lng - 78, 1.0)  # longitude degrees shrink with latitude

    def test_center_and_containment(self):
        bounds = GeoBounds(30, 32, 78, 80)
        self.assertEqual(bounds_center(bounds), Coordinates(31, 79))
        self.assertTrue(is_within_bounds(Coordinates(31, 79), bounds))
        self.assertFalse(is_within_bounds(Coordinates(33, 79), bounds))


if __name__ == '__main__':
    unittest.main()
