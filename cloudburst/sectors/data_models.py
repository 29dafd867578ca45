# cloudburst/sectors/data_models.py
"""
Defines the data structures of the spatial layer: sensor nodes as held by the
registry, the raw Voronoi cells produced by the partitioner and the Sector
objects the rest of the engine mutates.
"""
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from ..geo.data_models import Coordinates, GeoBounds
from ..prediction.alert_levels import AlertLevel, get_alert_level
from ..prediction.data_models import PredictionSource


class NodeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


@dataclass(frozen=True)
class SensorNode:
    """A registered ground station. Owned by the NodeRegistry, referenced by sectors."""
    node_id: str
    name: str
    lat: Optional[float]
    lng: Optional[float]
    status: NodeStatus = NodeStatus.ACTIVE
    last_seen: Optional[float] = None
    node_type: str = "sensor"

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(lat=self.lat, lng=self.lng)

    @property
    def is_active(self) -> bool:
        return self.status == NodeStatus.ACTIVE


@dataclass
class VoronoiCell:
    """One partition cell. `polygon` is a closed ring of (lng, lat) pairs."""
    id: str
    centroid: Coordinates
    polygon: List[Tuple[float, float]]
    neighbors: List[str] = field(default_factory=list)


@dataclass
class VoronoiResult:
    cells: List[VoronoiCell]
    bounds: GeoBounds


@dataclass
class Sector:
    """
    Region of responsibility around one sensor node. Geometry is fixed for the
    life of a partition; the probability fields are mutated by the fusion
    engine, the detector, the propagation scheduler and the aerial controller.
    """
    sector_id: str
    node_id: str
    name: str
    polygon: List[Tuple[float, float]]
    centroid: Coordinates
    neighbors: List[str] = field(default_factory=list)
    current_probability: float = 0.0
    confidence: float = 0.0
    prediction_source: PredictionSource = PredictionSource.GROUND
    cloudburst_detected: bool = False
    cloudburst_confidence: Optional[str] = None
    aerial_deployed: bool = False
    last_updated: float = field(default_factory=time.time)

    @property
    def alert_level(self) -> AlertLevel:
        return get_alert_level(self.current_probability)

    def set_probability(self, probability: float, confidence: Optional[float] = None,
                        timestamp: Optional[float] = None):
        """Single write path for probability, keeping it inside [0, 100]."""
        self.current_probability = max(0.0, min(100.0, float(probability)))
        if confidence is not None:
            self.confidence = max(0.0, min(1.0, float(confidence)))
        self.last_updated = timestamp if timestamp is not None else time.time()
