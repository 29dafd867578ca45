# cloudburst/propagation/data_models.py
from dataclasses import dataclass, field
from typing import List, Optional

from ..utils.timestamps import to_iso


@dataclass(frozen=True)
class WindData:
    """Speed in m/s; direction in degrees, 0 = North, 90 = East."""
    speed: float
    direction: float
    timestamp: Optional[float] = None


@dataclass(frozen=True)
class PropagationEvent:
    """
    A pending probability transfer to one sector. `delay_minutes` is measured
    from the moment the cascade was computed, so multi-hop events include the
    travel time of every earlier hop.
    """
    source_sector_id: str
    target_sector_id: str
    probability: float
    wind_factor: float
    distance_decay: float
    delay_minutes: float
    scheduled_time: float
    hop: int = 1

    def to_dict(self) -> dict:
        return {
            'sourceSectorId': self.source_sector_id,
            'targetSectorId': self.target_sector_id,
            'probability': round(self.probability, 2),
            'windFactor': self.wind_factor,
            'distanceDecay': round(self.distance_decay, 4),
            'delayMinutes': round(self.delay_minutes, 2),
            'scheduledTime': to_iso(self.scheduled_time),
            'hop': self.hop
        }


@dataclass
class PropagationResult:
    events: List[PropagationEvent] = field(default_factory=list)
    affected_sectors: List[str] = field(default_factory=list)
