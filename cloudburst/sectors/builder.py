# cloudburst/sectors/builder.py
"""
Turns partition cells into Sector objects and renders sectors as GeoJSON for
store writes.
"""
import logging
import time
from typing import Dict, Iterable, List, Optional, Sequence

from .constants import PartitionConstants
from .data_models import Sector, SensorNode, VoronoiResult
from .exceptions import SectorNotFoundError
from ..geo.coordinates import calculate_distance
from ..geo.data_models import Coordinates

logger = logging.getLogger(__name__)


def sector_id_for(node_id: str) -> str:
    return f"{PartitionConstants.SECTOR_ID_PREFIX}{node_id}"


def create_sectors(result: VoronoiResult, nodes: Sequence[SensorNode],
                   previous: Optional[Dict[str, Sector]] = None,
                   now: Optional[float] = None) -> Dict[str, Sector]:
    """
    Builds the sector map for a fresh partition. Geometry always comes from
    `result`; probability, confidence and flags survive for sector ids that
    existed in `previous`.
    """
    now = now if now is not None else time.time()
    names = {node.node_id: node.name for node in nodes}
    previous = previous or {}
    sectors: Dict[str, Sector] = {}

    for cell in result.cells:
        sector_id = sector_id_for(cell.id)
        sector = Sector(
            sector_id=sector_id,
            node_id=cell.id,
            name=names.get(cell.id) or cell.id,
            polygon=list(cell.polygon),
            centroid=cell.centroid,
            neighbors=[sector_id_for(neighbor) for neighbor in cell.neighbors],
            last_updated=now
        )
        old = previous.get(sector_id)
        if old is not None:
            sector.current_probability = old.current_probability
            sector.confidence = old.confidence
            sector.prediction_source = old.prediction_source
            sector.cloudburst_detected = old.cloudburst_detected
            sector.cloudburst_confidence = old.cloudburst_confidence
            sector.aerial_deployed = old.aerial_deployed
            sector.last_updated = old.last_updated
        sectors[sector_id] = sector

    carried = sum(1 for sector_id in sectors if sector_id in previous)
    logger.info(f"Built {len(sectors)} sectors ({carried} carried over from previous partition).")
    return sectors


def get_sector(sectors: Dict[str, Sector], sector_id: str) -> Sector:
    try:
        return sectors[sector_id]
    except KeyError:
        raise SectorNotFoundError(sector_id) from None


def neighbor_sectors(sectors: Dict[str, Sector], sector_id: str) -> List[Sector]:
    """Resolved neighbours of a sector; ids missing from the map are skipped."""
    source = get_sector(sectors, sector_id)
    return [sectors[n] for n in source.neighbors if n in sectors]


def sector_at_point(sectors: Dict[str, Sector], point: Coordinates) -> Optional[Sector]:
    if not sectors:
        return None
    return min(sectors.values(), key=lambda sector: calculate_distance(point, sector.centroid))


# --- GeoJSON rendering ---

def _closed_ring(polygon: Sequence) -> List[List[float]]:
    ring = [[float(lng), float(lat)] for lng, lat in polygon]
    if ring and ring[0] != ring[-1]:
        ring.append(list(ring[0]))
    return ring


def sector_to_geojson(sector: Sector) -> dict:
    """A GeoJSON Feature with the sector's dynamic state in `properties`."""
    return {
        "type": "Feature",
        "id": sector.sector_id,
        "geometry": {
            "type": "Polygon",
            "coordinates": [_closed_ring(sector.polygon)]
        },
        "properties": {
            "sectorId": sector.sector_id,
            "nodeId": sector.node_id,
            "name": sector.name,
            "centroid": sector.centroid.to_dict(),
            "neighbors": list(sector.neighbors),
            "currentProbability": round(sector.current_probability, 2),
            "confidence": round(sector.confidence, 3),
            "alertLevel": sector.alert_level.value,
            "predictionSource": sector.prediction_source.value,
            "cloudburstDetected": sector.cloudburst_detected,
            "cloudburstConfidence": sector.cloudburst_confidence,
            "aerialDeployed": sector.aerial_deployed
        }
    }


def sectors_to_feature_collection(sectors: Iterable[Sector]) -> dict:
    return {
        "type": "FeatureCollection",
        "features": [sector_to_geojson(sector) for sector in sectors]
    }
