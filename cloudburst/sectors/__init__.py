# cloudburst/sectors/__init__.py
"""
Spatial layer: node registry, Voronoi partitioning and the Sector objects
built from it.
"""
from .data_models import NodeStatus, SensorNode, VoronoiCell, VoronoiResult, Sector
from .constants import PartitionConstants, RegistryConstants
from .exceptions import SectorError, SectorNotFoundError, NodeNotFoundError
from .partitioner import (
    SpatialPartitioner, needs_regeneration, find_nearby_cells, cell_at_point, total_monitored_area_km2
)
from .builder import (
    create_sectors, sector_id_for, get_sector, neighbor_sectors, sector_at_point,
    sector_to_geojson, sectors_to_feature_collection
)
from .registry import NodeRegistry, node_from_record

__all__ = [
    "NodeStatus",
    "SensorNode",
    "VoronoiCell",
    "VoronoiResult",
    "Sector",
    "PartitionConstants",
    "RegistryConstants",
    "SectorError",
    "SectorNotFoundError",
    "NodeNotFoundError",
    "SpatialPartitioner",
    "needs_regeneration",
    "find_nearby_cells",
    "cell_at_point",
    "total_monitored_area_km2",
    "create_sectors",
    "sector_id_for",
    "get_sector",
    "neighbor_sectors",
    "sector_at_point",
    "sector_to_geojson",
    "sectors_to_feature_collection",
    "NodeRegistry",
    "node_from_record"
]
