# cloudburst/propagation/calculations.py
"""
Pure propagation math: how much of a source sector's probability reaches a
neighbour, and how long the weather takes to get there.
"""
import math
import time
from collections import deque
from typing import Dict, List, Mapping, Optional

from .constants import PropagationConstants as PC
from .data_models import PropagationEvent, PropagationResult, WindData
from ..geo.coordinates import angle_difference, calculate_distance, get_bearing
from ..sectors.data_models import Sector


def wind_factor(wind_direction: float, neighbor_bearing: float) -> float:
    """Stepped alignment factor; never increases as the angle difference grows."""
    diff = angle_difference(wind_direction, neighbor_bearing)
    if diff <= PC.DOWNWIND_MAX_ANGLE:
        return PC.DOWNWIND_FACTOR
    if diff <= PC.CROSSWIND_FAVORABLE_MAX_ANGLE:
        return PC.CROSSWIND_FAVORABLE_FACTOR
    if diff <= PC.CROSSWIND_MAX_ANGLE:
        return PC.CROSSWIND_FACTOR
    return PC.UPWIND_FACTOR


def distance_decay(distance_km: float) -> float:
    return 1 / (1 + distance_km * PC.DISTANCE_DECAY_COEFFICIENT)


def propagation_delay(distance_km: float, wind_speed_ms: float) -> float:
    """Minutes for the weather to cover the distance; math.inf for calm or invalid wind."""
    if wind_speed_ms is None or not math.isfinite(wind_speed_ms) or wind_speed_ms <= 1e-9:
        return math.inf
    return distance_km / (wind_speed_ms * PC.DELAY_COEFFICIENT)


def propagated_probability(source_probability: float, w_factor: float, decay: float) -> float:
    return max(0.0, min(100.0, source_probability * w_factor * decay))


def propagate_to_neighbor(source: Sector, target: Sector, wind: WindData, now: Optional[float] = None,
                          source_probability: Optional[float] = None, elapsed_minutes: float = 0.0,
                          hop: int = 1) -> Optional[PropagationEvent]:
    """
    Event for one neighbour, or None when the transmitted probability is
    below 1 % or the wind cannot carry it (infinite delay).
    """
    now = now if now is not None else time.time()
    probability = source.current_probability if source_probability is None else source_probability

    distance = calculate_distance(source.centroid, target.centroid)
    w_factor = wind_factor(wind.direction, get_bearing(source.centroid, target.centroid))
    decay = distance_decay(distance)
    delay = propagation_delay(distance, wind.speed)

    transmitted = propagated_probability(probability, w_factor, decay)
    if transmitted < PC.MIN_EVENT_PROBABILITY or not math.isfinite(delay):
        return None

    total_delay = elapsed_minutes + delay
    return PropagationEvent(
        source_sector_id=source.sector_id,
        target_sector_id=target.sector_id,
        probability=transmitted,
        wind_factor=w_factor,
        distance_decay=decay,
        delay_minutes=total_delay,
        scheduled_time=now + total_delay * 60,
        hop=hop
    )


def propagate_from_sector(source: Sector, sectors: Mapping[str, Sector], wind: WindData,
                          now: Optional[float] = None) -> List[PropagationEvent]:
    """Single hop to every resolvable neighbour."""
    events = []
    for neighbor_id in source.neighbors:
        neighbor = sectors.get(neighbor_id)
        if neighbor is None:
            continue
        event = propagate_to_neighbor(source, neighbor, wind, now)
        if event is not None:
            events.append(event)
    return events


def propagation_cascade(source: Sector, sectors: Mapping[str, Sector], wind: WindData,
                        now: Optional[float] = None, max_hops: int = PC.DEFAULT_MAX_HOPS) -> PropagationResult:
    """
    Breadth-first spread up to `max_hops`. `best` records the highest
    probability seen per sector in this cascade; a sector is expanded again
    only when reached with a strictly higher probability, so cycles terminate.
    """
    now = now if now is not None else time.time()
    best: Dict[str, float] = {source.sector_id: source.current_probability}
    events: Dict[str, PropagationEvent] = {}
    affected: List[str] = []

    queue = deque([(source.sector_id, 0, source.current_probability, 0.0)])
    while queue:
        sector_id, hop, probability, elapsed = queue.popleft()
        if hop >= max_hops:
            continue
        current = sectors.get(sector_id)
        if current is None:
            continue

        for neighbor_id in current.neighbors:
            neighbor = sectors.get(neighbor_id)
            if neighbor is None:
                continue
            event = propagate_to_neighbor(current, neighbor, wind, now, source_probability=probability,
                                          elapsed_minutes=elapsed, hop=hop + 1)
            if event is None or best.get(neighbor_id, -1.0) >= event.probability:
                continue

            best[neighbor_id] = event.probability
            events[neighbor_id] = event
            if neighbor_id not in affected:
                affected.append(neighbor_id)
            queue.append((neighbor_id, hop + 1, event.probability, event.delay_minutes))

    return PropagationResult(events=[events[sector_id] for sector_id in affected], affected_sectors=affected)


# --- Wind path queries ---

def is_in_wind_path(source: Sector, target: Sector, wind_direction: float,
                    tolerance_degrees: float = PC.DOWNWIND_MAX_ANGLE) -> bool:
    return angle_difference(wind_direction, get_bearing(source.centroid, target.centroid)) <= tolerance_degrees


def downwind_sectors(source: Sector, sectors: Mapping[str, Sector], wind_direction: float) -> List[Sector]:
    """Every other sector, neighbour or not, whose bearing from the source is within 45 deg of the wind."""
    return [sector for sector in sectors.values()
            if sector.sector_id != source.sector_id and is_in_wind_path(source, sector, wind_direction)]
