# cloudburst/sectors/registry.py
"""
Owns the set of registered sensor nodes. Sectors reference nodes by id; the
registry is the only place a SensorNode is created, replaced or removed.
"""
import logging
import math
import threading
import time
from dataclasses import replace
from typing import Dict, List, Mapping, Optional

from .constants import RegistryConstants
from .data_models import NodeStatus, SensorNode
from .exceptions import NodeNotFoundError
from ..utils.timestamps import to_epoch_seconds

logger = logging.getLogger(__name__)

_INACTIVE_STATUSES = ("inactive", "offline")


def _coerce_float(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def node_from_record(node_id: str, record: Mapping) -> Optional[SensorNode]:
    """
    Parses a store node record. Coordinates may sit at the top level
    (`latitude`/`longitude` or `lat`/`lng`) or under `location`/`metadata`.
    Returns None when no usable coordinates exist.
    """
    if not isinstance(record, Mapping):
        return None

    lat = lng = None
    for source in (record, record.get('location') or {}, record.get('metadata') or {}):
        if not isinstance(source, Mapping):
            continue
        lat = _coerce_float(source.get('latitude', source.get('lat')))
        lng = _coerce_float(source.get('longitude', source.get('lng')))
        if lat is not None and lng is not None:
            break
    if lat is None or lng is None:
        return None

    status_value = str(record.get('status', '')).lower()
    status = NodeStatus.INACTIVE if status_value in _INACTIVE_STATUSES else NodeStatus.ACTIVE
    metadata = record.get('metadata') if isinstance(record.get('metadata'), Mapping) else {}

    return SensorNode(
        node_id=str(node_id),
        name=record.get('name') or metadata.get('name') or str(node_id),
        lat=lat,
        lng=lng,
        status=status,
        last_seen=to_epoch_seconds(record.get('lastSeen')),
        node_type='gateway' if record.get('type') == 'gateway' else 'sensor'
    )


class NodeRegistry:
    """Thread-safe registry of sensor nodes keyed by node id."""

    def __init__(self, timeout_minutes: float = RegistryConstants.NODE_TIMEOUT_MINUTES):
        self.timeout_minutes = timeout_minutes
        self._nodes: Dict[str, SensorNode] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id) -> bool:
        return node_id in self._nodes

    def register(self, node: SensorNode) -> SensorNode:
        with self._lock:
            if node.node_id in self._nodes:
                logger.debug(f"Node {node.node_id} re-registered; replacing previous record.")
            self._nodes[node.node_id] = node
        logger.info(f"Registered node {node.node_id} at ({node.lat}, {node.lng}).")
        return node

    def deregister(self, node_id: str) -> SensorNode:
        with self._lock:
            node = self._nodes.pop(node_id, None)
        if node is None:
            raise NodeNotFoundError(node_id)
        logger.info(f"Deregistered node {node_id}.")
        return node

    def get(self, node_id: str) -> SensorNode:
        node = self._nodes.get(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    def move(self, node_id: str, lat: float, lng: float) -> SensorNode:
        with self._lock:
            node = replace(self.get(node_id), lat=lat, lng=lng)
            self._nodes[node_id] = node
        return node

    def mark_seen(self, node_id: str, now: Optional[float] = None, seen_at: Optional[float] = None) -> SensorNode:
        """
        Records data from a node taken at `seen_at` (defaults to `now`).
        `last_seen` only moves forward and never past `now`. A timed-out node
        is reactivated only by data newer than the timeout.
        """
        now = now if now is not None else time.time()
        seen_at = min(seen_at, now) if seen_at is not None else now
        with self._lock:
            node = self.get(node_id)
            last_seen = seen_at if node.last_seen is None else max(node.last_seen, seen_at)
            status = node.status
            if last_seen >= now - self.timeout_minutes * 60:
                if status == NodeStatus.INACTIVE:
                    logger.info(f"Node {node_id} is reporting again; marking active.")
                status = NodeStatus.ACTIVE
            node = replace(node, last_seen=last_seen, status=status)
            self._nodes[node_id] = node
        return node

    def all_nodes(self) -> List[SensorNode]:
        with self._lock:
            return list(self._nodes.values())

    def active_nodes(self) -> List[SensorNode]:
        with self._lock:
            return [node for node in self._nodes.values() if node.is_active]

    def load_records(self, records: Optional[Mapping], replace_existing: bool = True) -> int:
        """Loads nodes from a store snapshot keyed by node id. Unusable records are skipped."""
        parsed: Dict[str, SensorNode] = {}
        for node_id, record in (records or {}).items():
            node = node_from_record(node_id, record)
            if node is None:
                logger.warning(f"Skipping node record '{node_id}': no usable coordinates.")
                continue
            parsed[node.node_id] = node

        with self._lock:
            if replace_existing:
                self._nodes = parsed
            else:
                self._nodes.update(parsed)
        logger.info(f"Loaded {len(parsed)} node records into the registry.")
        return len(parsed)

    def check_stale(self, now: Optional[float] = None, timeout_minutes: Optional[float] = None) -> List[str]:
        """
        Marks active nodes with no data for longer than the timeout as inactive.
        A node that has never reported counts as stale. Returns the ids changed.
        """
        now = now if now is not None else time.time()
        cutoff = now - (timeout_minutes if timeout_minutes is not None else self.timeout_minutes) * 60
        changed = []
        with self._lock:
            for node_id, node in list(self._nodes.items()):
                if not node.is_active:
                    continue
                if node.last_seen is None or node.last_seen < cutoff:
                    self._nodes[node_id] = replace(node, status=NodeStatus.INACTIVE)
                    changed.append(node_id)
        if changed:
            logger.warning(f"{len(changed)} node(s) timed out and were marked inactive: {', '.join(changed)}")
        return changed
