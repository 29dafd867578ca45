# cloudburst/sectors/partitioner.py
"""
Turns a set of sensor node locations into Voronoi sector polygons and the
sector adjacency graph.

Nodes are projected into a local planar frame, triangulated with Delaunay,
and each node's cell is built as the dual of its Delaunay neighbourhood: the
clip box intersected with the bisector half-plane of every Delaunay
neighbour. Cell vertices are then reprojected and radius-clipped so every
sector stays between MIN_SECTOR_RADIUS_KM and MAX_SECTOR_RADIUS_KM from its
node, regardless of node density.
"""
import logging
import math
from typing import List, Optional, Sequence, Set, Tuple

import numpy as np
from scipy.spatial import Delaunay, QhullError
from shapely.geometry import Polygon, box
from shapely.geometry.polygon import orient

from .constants import PartitionConstants
from .data_models import SensorNode, VoronoiCell, VoronoiResult
from ..geo.bounds import bounds_center, bounds_from_coordinates, pad_bounds
from ..geo.coordinates import (
    calculate_distance, destination_point, from_projected, get_bearing,
    is_valid_latitude, is_valid_longitude, polygon_area_km2, to_projected
)
from ..geo.data_models import Coordinates, GeoBounds

logger = logging.getLogger(__name__)


def valid_nodes(nodes: Sequence[SensorNode]) -> List[SensorNode]:
    """Nodes with usable coordinates; everything else is silently dropped."""
    return [
        node for node in (nodes or [])
        if node is not None and is_valid_latitude(node.lat) and is_valid_longitude(node.lng)
    ]


class SpatialPartitioner:
    """Computes Voronoi sectors and their adjacency from node coordinates."""

    def __init__(self,
                 min_radius_km: float = PartitionConstants.MIN_SECTOR_RADIUS_KM,
                 max_radius_km: float = PartitionConstants.MAX_SECTOR_RADIUS_KM,
                 padding_km: float = PartitionConstants.DEFAULT_PADDING_KM):
        if min_radius_km <= 0 or max_radius_km < min_radius_km:
            raise ValueError(f"Invalid sector radius range: [{min_radius_km}, {max_radius_km}] km")
        self.min_radius_km = min_radius_km
        self.max_radius_km = max_radius_km
        self.padding_km = padding_km

    def partition(self, nodes: Sequence[SensorNode], bounds: Optional[GeoBounds] = None) -> VoronoiResult:
        """Builds one cell per valid node. An empty node set yields no cells and placeholder bounds."""
        nodes = valid_nodes(nodes)
        if not nodes:
            logger.info("No nodes with valid coordinates; returning empty partition.")
            return VoronoiResult(cells=[], bounds=GeoBounds.default())

        region = bounds or pad_bounds(bounds_from_coordinates(n.coordinates for n in nodes), self.padding_km)
        center_lat = bounds_center(region).lat

        points = np.array([to_projected(n.lat, n.lng, center_lat) for n in nodes], dtype=float)
        min_x, min_y = to_projected(region.min_lat, region.min_lng, center_lat)
        max_x, max_y = to_projected(region.max_lat, region.max_lng, center_lat)
        clip_box = box(min_x, min_y, max_x, max_y)

        adjacency = self._delaunay_adjacency(points)

        cells = []
        for index, node in enumerate(nodes):
            cell_polygon = self._voronoi_cell(index, points, adjacency[index], clip_box)
            if cell_polygon is None:
                logger.warning(f"Node {node.node_id} has no cell inside the clip bounds; sector left without geometry.")
            ring = self._to_lng_lat_ring(cell_polygon, center_lat)
            cells.append(VoronoiCell(
                id=node.node_id,
                centroid=node.coordinates,
                polygon=self.clip_to_radius(ring, node.coordinates),
                neighbors=[nodes[j].node_id for j in sorted(adjacency[index])]
            ))

        logger.info(f"Partitioned {len(nodes)} nodes into {len(cells)} sectors.")
        return VoronoiResult(cells=cells, bounds=region)

    # --- Radius constraint ---

    def clip_to_radius(self, ring: List[Tuple[float, float]], centroid: Coordinates) -> List[Tuple[float, float]]:
        """
        Moves each (lng, lat) vertex along its bearing from the centroid so its
        distance lies in [min_radius_km, max_radius_km].
        """
        clipped = []
        for lng, lat in ring:
            vertex = Coordinates(lat=lat, lng=lng)
            distance = calculate_distance(centroid, vertex)
            if distance < self.min_radius_km:
                vertex = destination_point(centroid, self.min_radius_km, get_bearing(centroid, vertex))
            elif distance > self.max_radius_km:
                vertex = destination_point(centroid, self.max_radius_km, get_bearing(centroid, vertex))
            clipped.append((vertex.lng, vertex.lat))
        return clipped

    # --- Delaunay adjacency ---

    def _delaunay_adjacency(self, points: np.ndarray) -> List[Set[int]]:
        """
        Neighbour sets per input point. Coincident points are triangulated once
        and share the neighbourhood of their site, plus each other.
        """
        groups: List[List[int]] = []
        for index, point in enumerate(points):
            for members in groups:
                if np.hypot(*(points[members[0]] - point)) <= PartitionConstants.COINCIDENT_TOLERANCE_KM:
                    members.append(index)
                    break
            else:
                groups.append([index])

        sites = points[[members[0] for members in groups]]
        site_adjacency = self._site_adjacency(sites)

        adjacency: List[Set[int]] = [set() for _ in range(len(points))]
        for site, members in enumerate(groups):
            linked = {j for neighbor in site_adjacency[site] for j in groups[neighbor]}
            for index in members:
                adjacency[index] = (linked | set(members)) - {index}
        return adjacency

    @staticmethod
    def _site_adjacency(sites: np.ndarray) -> List[Set[int]]:
        count = len(sites)
        if count == 1:
            return [set()]
        if count == 2:
            return [{1}, {0}]

        try:
            triangulation = Delaunay(sites)
        except (QhullError, ValueError):
            # Collinear sites: the triangulation degenerates to a chain along the line
            origin = sites[0]
            far = sites[int(np.argmax(np.hypot(*(sites - origin).T)))]
            order = np.argsort((sites - origin) @ (far - origin))
            adjacency = [set() for _ in range(count)]
            for a, b in zip(order[:-1], order[1:]):
                adjacency[a].add(int(b))
                adjacency[b].add(int(a))
            return adjacency

        indptr, indices = triangulation.vertex_neighbor_vertices
        adjacency = [set(int(j) for j in indices[indptr[k]:indptr[k + 1]]) for k in range(count)]

        # Points Qhull left out of the triangulation attach to their nearest vertex
        for point_index, _, nearest in triangulation.coplanar:
            adjacency[point_index] |= (adjacency[nearest] | {int(nearest)}) - {int(point_index)}
            for j in adjacency[point_index]:
                adjacency[j].add(int(point_index))
        return adjacency

    # --- Voronoi cells ---

    @staticmethod
    def _voronoi_cell(index: int, points: np.ndarray, neighbors: Set[int], clip_box: Polygon) -> Optional[Polygon]:
        """Clip box intersected with the bisector half-plane of each Delaunay neighbour."""
        cell = clip_box
        min_x, min_y, max_x, max_y = clip_box.bounds
        box_center = np.array([(min_x + max_x) / 2, (min_y + max_y) / 2])
        diagonal = math.hypot(max_x - min_x, max_y - min_y)
        site = points[index]

        for j in neighbors:
            offset = points[j] - site
            separation = float(np.hypot(*offset))
            if separation <= PartitionConstants.COINCIDENT_TOLERANCE_KM:
                continue
            unit = offset / separation
            normal = np.array([-unit[1], unit[0]])
            midpoint = (site + points[j]) / 2
            reach = 2 * (diagonal + float(np.hypot(*(midpoint - box_center))))
            half_plane = Polygon(np.array([
                midpoint + normal * reach,
                midpoint + normal * reach - unit * reach,
                midpoint - normal * reach - unit * reach,
                midpoint - normal * reach
            ]))
            cell = cell.intersection(half_plane)
            if cell.is_empty:
                return None

        if cell.is_empty or cell.geom_type != 'Polygon':
            return None
        return cell

    @staticmethod
    def _to_lng_lat_ring(cell: Optional[Polygon], center_lat: float) -> List[Tuple[float, float]]:
        if cell is None:
            return []
        ring = []
        for x, y in orient(cell, sign=1.0).exterior.coords:
            lat, lng = from_projected(x, y, center_lat)
            ring.append((lng, lat))
        return ring


def needs_regeneration(current_cells: Sequence[VoronoiCell], nodes: Sequence[SensorNode],
                       move_threshold_km: float = PartitionConstants.REGENERATION_MOVE_THRESHOLD_KM) -> bool:
    """True when the node count, the id set, or any node position (> 100 m) changed."""
    nodes = valid_nodes(nodes)
    if len(current_cells) != len(nodes):
        return True

    cells_by_id = {cell.id: cell for cell in current_cells}
    if set(cells_by_id) != {node.node_id for node in nodes}:
        return True

    for node in nodes:
        if calculate_distance(cells_by_id[node.node_id].centroid, node.coordinates) > move_threshold_km:
            return True
    return False


def find_nearby_cells(cells: Sequence[VoronoiCell], point: Coordinates, radius_km: float) -> List[VoronoiCell]:
    """Cells whose node lies within `radius_km` of the point, nearest first."""
    with_distance = [(calculate_distance(point, cell.centroid), cell) for cell in cells]
    nearby = [(distance, cell) for distance, cell in with_distance if distance <= radius_km]
    nearby.sort(key=lambda item: item[0])
    return [cell for _, cell in nearby]


def cell_at_point(cells: Sequence[VoronoiCell], point: Coordinates) -> Optional[VoronoiCell]:
    # Nearest generating node wins, which is the Voronoi definition of membership
    if not cells:
        return None
    return min(cells, key=lambda cell: calculate_distance(point, cell.centroid))


def total_monitored_area_km2(cells: Sequence[VoronoiCell]) -> float:
    return sum(polygon_area_km2(cell.polygon) for cell in cells)
