#!/usr/bin/env python3
# cloudburst/sectors/tests/test_partitioner.py
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent.parent.parent
sys.path.append(str(project_root))

import unittest

import pytest

from cloudburst.geo import Coordinates, GeoBounds, calculate_distance
from cloudburst.sectors import (
    SensorNode, SpatialPartitioner, needs_regeneration, cell_at_point, find_nearby_cells,
    total_monitored_area_km2
)

TOLERANCE_KM = 1e-6


def make_nodes(points):
    return [SensorNode(node_id=f"n{i}", name=f"Node {i}", lat=lat, lng=lng) for i, (lat, lng) in enumerate(points)]


GRID_POINTS = [
    (30.00, 78.00), (30.05, 78.02), (30.10, 77.95), (29.95, 78.10),
    (30.02, 78.15), (30.12, 78.08), (29.90, 77.98), (30.20, 78.20),
]


class TestPartitioner(unittest.TestCase):
    def setUp(self):
        self.partitioner = SpatialPartitioner()

    def assert_radius_invariant(self, result):
        for cell in result.cells:
            for lng, lat in cell.polygon:
                distance = calculate_distance(cell.centroid, Coordinates(lat, lng))
                self.assertGreaterEqual(distance, 2.0 - TOLERANCE_KM, f"{cell.id} vertex too close")
                self.assertLessEqual(distance, 10.0 + TOLERANCE_KM, f"{cell.id} vertex too far")

    def assert_symmetric(self, result):
        neighbors = {cell.id: set(cell.neighbors) for cell in result.cells}
        for cell_id, linked in neighbors.items():
            self.assertNotIn(cell_id, linked)
            for other in linked:
                self.assertIn(cell_id, neighbors[other], f"{cell_id} -> {other} is not symmetric")

    def test_single_node(self):
        """A lone node at (30, 78) gets one cell clipped to 10 km"""
        result = self.partitioner.partition(make_nodes([(30.0, 78.0)]))
        self.assertEqual(len(result.cells), 1)
        cell = result.cells[0]
        self.assertEqual(cell.neighbors, [])
        self.assertGreaterEqual(len(cell.polygon), 4)
        for lng, lat in cell.polygon:
            self.assertLessEqual(calculate_distance(Coordinates(30.0, 78.0), Coordinates(lat, lng)), 10.0 + TOLERANCE_KM)

    def test_empty_input(self):
        result = self.partitioner.partition([])
        self.assertEqual(result.cells, [])
        self.assertEqual(result.bounds, GeoBounds.default())

    def test_invalid_nodes_filtered(self):
        nodes = make_nodes([(30.0, 78.0), (30.1, 78.1)])
        nodes.append(SensorNode(node_id="bad_lat", name="x", lat=120.0, lng=78.0))
        nodes.append(SensorNode(node_id="missing", name="x", lat=None, lng=78.0))
        result = self.partitioner.partition(nodes)
        self.assertEqual(sorted(cell.id for cell in result.cells), ["n0", "n1"])

    def test_only_invalid_nodes(self):
        result = self.partitioner.partition([SensorNode(node_id="x", name="x", lat=float('nan'), lng=78.0)])
        self.assertEqual(result.cells, [])

    def test_grid_cell_count_and_symmetry(self):
        nodes = make_nodes(GRID_POINTS)
        result = self.partitioner.partition(nodes)
        self.assertEqual(len(result.cells), len(nodes))
        self.assert_symmetric(result)
        self.assertTrue(all(cell.neighbors for cell in result.cells))

    def test_grid_radius_invariant(self):
        result = self.partitioner.partition(make_nodes(GRID_POINTS))
        self.assert_radius_invariant(result)

    def test_two_nodes_are_neighbors(self):
        result = self.partitioner.partition(make_nodes([(30.0, 78.0), (30.05, 78.05)]))
        by_id = {cell.id: cell for cell in result.cells}
        self.assertEqual(by_id["n0"].neighbors, ["n1"])
        self.assertEqual(by_id["n1"].neighbors, ["n0"])
        self.assert_radius_invariant(result)

    def test_collinear_nodes_form_chain(self):
        result = self.partitioner.partition(make_nodes([(30.0, 78.0), (30.0, 78.2), (30.0, 78.1)]))
        by_id = {cell.id: cell for cell in result.cells}
        self.assertEqual(by_id["n0"].neighbors, ["n2"])
        self.assertEqual(by_id["n1"].neighbors, ["n2"])
        self.assertEqual(by_id["n2"].neighbors, ["n0", "n1"])
        self.assert_radius_invariant(result)

    def test_coincident_nodes(self):
        result = self.partitioner.partition(make_nodes([(30.0, 78.0), (30.0, 78.0), (30.1, 78.1)]))
        self.assertEqual(len(result.cells), 3)
        self.assert_symmetric(result)
        by_id = {cell.id: cell for cell in result.cells}
        self.assertIn("n1", by_id["n0"].neighbors)

    def test_dense_nodes_pushed_out_to_minimum_radius(self):
        """Nodes a few hundred meters apart still get 2 km sectors"""
        result = self.partitioner.partition(make_nodes([(30.0, 78.0), (30.003, 78.0), (30.0, 78.003)]))
        self.assert_radius_invariant(result)

    def test_polygon_is_closed_ring(self):
        result = self.partitioner.partition(make_nodes(GRID_POINTS[:3]))
        for cell in result.cells:
            self.assertAlmostEqual(cell.polygon[0][0], cell.polygon[-1][0], places=9)
            self.assertAlmostEqual(cell.polygon[0][1], cell.polygon[-1][1], places=9)

    def test_explicit_bounds_are_kept(self):
        bounds = GeoBounds(29.5, 30.5, 77.5, 78.5)
        result = self.partitioner.partition(make_nodes([(30.0, 78.0)]), bounds=bounds)
        self.assertEqual(result.bounds, bounds)

    def test_cells_stay_inside_explicit_bounds(self):
        bounds = GeoBounds(29.95, 30.05, 77.95, 78.10)
        result = self.partitioner.partition(make_nodes([(30.0, 78.0), (30.0, 78.05)]), bounds=bounds)
        for cell in result.cells:
            self.assertTrue(cell.polygon)
            for lng, lat in cell.polygon:
                self.assertGreaterEqual(lat, bounds.min_lat - 1e-7)
                self.assertLessEqual(lat, bounds.max_lat + 1e-7)
                self.assertGreaterEqual(lng, bounds.min_lng - 1e-7)
                self.assertLessEqual(lng, bounds.max_lng + 1e-7)

    def test_node_outside_bounds_logs_empty_cell(self):
        bounds = GeoBounds(29.9, 30.1, 78.1, 78.2)
        with self.assertLogs('cloudburst.sectors.partitioner', level='WARNING') as logs:
            result = self.partitioner.partition(make_nodes([(30.0, 78.0), (30.0, 78.05)]), bounds=bounds)
        cells = {cell.id: cell for cell in result.cells}
        self.assertEqual(cells["n0"].polygon, [])
        self.assertTrue(cells["n1"].polygon)
        self.assertIn("n0", logs.output[0])

    def test_invalid_radius_range(self):
        with self.assertRaises(ValueError):
            SpatialPartitioner(min_radius_km=5.0, max_radius_km=2.0)


class TestRegenerationAndQueries(unittest.TestCase):
    def setUp(self):
        self.nodes = make_nodes(GRID_POINTS[:4])
        self.result = SpatialPartitioner().partition(self.nodes)

    def test_unchanged_nodes(self):
        self.assertFalse(needs_regeneration(self.result.cells, self.nodes))

    def test_node_added(self):
        self.assertTrue(needs_regeneration(self.result.cells, make_nodes(GRID_POINTS[:5])))

    def test_node_replaced(self):
        nodes = list(self.nodes)
        nodes[0] = SensorNode(node_id="other", name="x", lat=nodes[0].lat, lng=nodes[0].lng)
        self.assertTrue(needs_regeneration(self.result.cells, nodes))

    def test_small_move_ignored_large_move_detected(self):
        nodes = list(self.nodes)
        nodes[0] = SensorNode(node_id="n0", name="x", lat=30.0005, lng=78.0)   # ~55 m
        self.assertFalse(needs_regeneration(self.result.cells, nodes))
        nodes[0] = SensorNode(node_id="n0", name="x", lat=30.002, lng=78.0)    # ~220 m
        self.assertTrue(needs_regeneration(self.result.cells, nodes))

    def test_cell_at_point(self):
        cell = cell_at_point(self.result.cells, Coordinates(30.049, 78.021))
        self.assertEqual(cell.id, "n1")
        self.assertIsNone(cell_at_point([], Coordinates(30, 78)))

    def test_find_nearby_cells_sorted(self):
        nearby = find_nearby_cells(self.result.cells, Coordinates(30.0, 78.0), 12.0)
        self.assertEqual(nearby[0].id, "n0")
        self.assertNotIn("n3", [c.id for c in find_nearby_cells(self.result.cells, Coordinates(30.0, 78.0), 1.0)])

    def test_total_area_is_bounded(self):
        area = total_monitored_area_km2(self.result.cells)
        self.assertGreater(area, 0.0)
        self.assertLessEqual(area, len(self.result.cells) * 3.1416 * 10.0 ** 2 * 1.05)


@pytest.mark.parametrize("points", [
    [(30.0, 78.0)],
    [(30.0, 78.0), (30.3, 78.3)],
    GRID_POINTS,
    [(31.0 + 0.07 * i, 77.0 + 0.11 * ((i * 7) % 5)) for i in range(12)],
])
def test_partition_properties(points):
    nodes = make_nodes(points)
    result = SpatialPartitioner().partition(nodes)
    assert len(result.cells) == len(nodes)
    linked = {cell.id: set(cell.neighbors) for cell in result.cells}
    for cell in result.cells:
        for other in cell.neighbors:
            assert cell.id in linked[other]
        for lng, lat in cell.polygon:
            distance = calculate_distance(cell.centroid, Coordinates(lat, lng))
            assert 2.0 - TOLERANCE_KM <= distance <= 10.0 + TOLERANCE_KM


if __name__ == '__main__':
    unittest.main()
