# cloudburst/propagation/scheduler.py
"""
Holds pending propagation events and applies them when they fall due.

Events live in two structures: an index (target sector id -> best pending
event) that enforces the merge rule, and a min-heap ordered by scheduled
time that the tick polls. Heap entries are never removed eagerly; an entry
whose sequence number no longer matches the index, or whose generation
predates the last clear, is discarded when popped.
"""
import heapq
import itertools
import logging
import math
import threading
import time
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .calculations import propagate_from_sector, propagation_cascade
from .constants import PropagationConstants as PC
from .data_models import PropagationEvent, PropagationResult, WindData
from ..sectors.data_models import Sector

logger = logging.getLogger(__name__)


class WindPropagationScheduler:
    def __init__(self,
                 threshold: float = PC.DEFAULT_THRESHOLD,
                 max_hops: int = PC.DEFAULT_MAX_HOPS,
                 horizon_minutes: float = PC.DEFAULT_HORIZON_MINUTES):
        self.threshold = threshold
        self.max_hops = max_hops
        self.horizon_minutes = horizon_minutes

        self._lock = threading.RLock()
        self._pending: Dict[str, Tuple[PropagationEvent, int]] = {}
        self._heap: List[Tuple[float, int, int, str]] = []
        self._sequence = itertools.count()
        self._generation = 0

    # --- Scheduling ---

    def should_propagate(self, sector: Sector) -> bool:
        return sector.current_probability >= self.threshold

    def propagate(self, source: Sector, sectors: Mapping[str, Sector], wind: WindData,
                  now: Optional[float] = None) -> PropagationResult:
        """Single-hop propagation from `source` if it is at or above the threshold."""
        if not self.should_propagate(source):
            return PropagationResult()
        events = propagate_from_sector(source, sectors, wind, now)
        self.schedule(events)
        return PropagationResult(events=events, affected_sectors=[e.target_sector_id for e in events])

    def propagate_cascade(self, source: Sector, sectors: Mapping[str, Sector], wind: WindData,
                          now: Optional[float] = None) -> PropagationResult:
        if not self.should_propagate(source):
            return PropagationResult()
        result = propagation_cascade(source, sectors, wind, now, self.max_hops)
        self.schedule(result.events)
        return result

    def schedule(self, events: Iterable[PropagationEvent]) -> int:
        """Offers events to the pending set; returns how many were accepted."""
        accepted = 0
        with self._lock:
            for event in events:
                if self._offer(event):
                    accepted += 1
        if accepted:
            logger.info(f"Scheduled {accepted} propagation event(s); {len(self._pending)} pending.")
        return accepted

    def _offer(self, event: PropagationEvent) -> bool:
        if not math.isfinite(event.delay_minutes):
            return False
        if self.horizon_minutes is not None and event.delay_minutes > self.horizon_minutes:
            logger.debug(f"Event for {event.target_sector_id} arrives after the horizon "
                         f"({event.delay_minutes:.0f} min); not scheduled.")
            return False

        existing = self._pending.get(event.target_sector_id)
        # Only a strictly stronger event may replace a pending one
        if existing is not None and event.probability <= existing[0].probability:
            return False

        sequence = next(self._sequence)
        self._pending[event.target_sector_id] = (event, sequence)
        heapq.heappush(self._heap, (event.scheduled_time, sequence, self._generation, event.target_sector_id))
        return True

    # --- Application ---

    def apply_due_events(self, sectors: Mapping[str, Sector], now: Optional[float] = None) -> Dict[str, float]:
        """
        Applies every due event in one batch. Per target the highest due
        probability wins and the sector only ever rises: max(existing, incoming).
        Returns {sector_id: new probability} for sectors that changed.
        """
        now = now if now is not None else time.time()
        applied: Dict[str, float] = {}

        with self._lock:
            due: Dict[str, float] = {}
            while self._heap and self._heap[0][0] <= now:
                _, sequence, generation, target = heapq.heappop(self._heap)
                if generation != self._generation:
                    continue
                entry = self._pending.get(target)
                if entry is None or entry[1] != sequence:
                    continue  # superseded
                del self._pending[target]
                due[target] = max(due.get(target, 0.0), entry[0].probability)

            for target, probability in due.items():
                sector = sectors.get(target)
                if sector is None:
                    logger.debug(f"Due event for unknown sector {target} discarded.")
                    continue
                if probability > sector.current_probability:
                    sector.set_probability(probability, timestamp=now)
                    applied[target] = sector.current_probability

        if applied:
            logger.info(f"Applied propagation to {len(applied)} sector(s): {', '.join(sorted(applied))}")
        return applied

    def clear_pending_events(self) -> int:
        """Drops every pending event. Safe to call repeatedly."""
        with self._lock:
            cleared = len(self._pending)
            self._pending.clear()
            self._heap.clear()
            self._generation += 1
        if cleared:
            logger.info(f"Cleared {cleared} pending propagation event(s).")
        return cleared

    # --- Queries ---

    def pending_events(self) -> List[PropagationEvent]:
        with self._lock:
            return sorted((event for event, _ in self._pending.values()), key=lambda e: e.scheduled_time)

    def pending_event_for(self, sector_id: str) -> Optional[PropagationEvent]:
        entry = self._pending.get(sector_id)
        return entry[0] if entry else None

    def has_pending_events(self, sector_id: Optional[str] = None) -> bool:
        if sector_id is None:
            return bool(self._pending)
        return sector_id in self._pending

    def event_count_for_sector(self, sector_id: str) -> int:
        return 1 if sector_id in self._pending else 0

    def estimated_arrival_minutes(self, sector_id: str, now: Optional[float] = None) -> Optional[int]:
        """Whole minutes until the pending event for the sector lands, 0 if already due."""
        event = self.pending_event_for(sector_id)
        if event is None:
            return None
        now = now if now is not None else time.time()
        remaining = event.scheduled_time - now
        return math.ceil(remaining / 60) if remaining > 0 else 0

    def next_due_time(self) -> Optional[float]:
        with self._lock:
            times = [event.scheduled_time for event, _ in self._pending.values()]
        return min(times) if times else None
