# cloudburst/store/memory.py
"""
Thread-safe in-process implementation of the store contract. Used by the
example runner and the tests; `online = False` simulates an unreachable
backend.
"""
import copy
import itertools
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Tuple

from .base import KeyValueStore, Unsubscribe
from .exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


def _split(path: str) -> List[str]:
    return [part for part in path.strip("/").split("/") if part]


def _is_related(a: List[str], b: List[str]) -> bool:
    """True when one path is a prefix of the other."""
    shortest = min(len(a), len(b))
    return a[:shortest] == b[:shortest]


class InMemoryStore(KeyValueStore):
    def __init__(self, initial: Dict[str, Any] = None):
        self.online = True
        self._root: Dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self._subscribers: Dict[int, Tuple[List[str], Callable[[str, Any], None]]] = {}
        self._ids = itertools.count()
        self._push_counter = itertools.count()
        self._lock = threading.RLock()

    def _check_online(self, path: str):
        if not self.online:
            raise StoreUnavailableError(path)

    def _read(self, parts: List[str]) -> Any:
        node = self._root
        for part in parts:
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def _parent(self, parts: List[str]) -> Dict[str, Any]:
        node = self._root
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        return node

    def get(self, path: str) -> Any:
        self._check_online(path)
        with self._lock:
            return copy.deepcopy(self._read(_split(path)))

    def set(self, path: str, value: Any) -> None:
        self._check_online(path)
        parts = _split(path)
        with self._lock:
            if not parts:
                self._root = copy.deepcopy(value) if isinstance(value, dict) else {}
            elif value is None:
                self._parent(parts).pop(parts[-1], None)
            else:
                self._parent(parts)[parts[-1]] = copy.deepcopy(value)
        self._notify(parts)

    def update(self, path: str, values: Dict[str, Any]) -> None:
        self._check_online(path)
        parts = _split(path)
        with self._lock:
            target = self._read(parts) if parts else self._root
            if not isinstance(target, dict):
                target = {}
                if parts:
                    self._parent(parts)[parts[-1]] = target
            for key, value in values.items():
                child_parts = _split(key)
                if value is None:
                    parent = target
                    for part in child_parts[:-1]:
                        parent = parent.get(part, {})
                    parent.pop(child_parts[-1], None)
                    continue
                node = target
                for part in child_parts[:-1]:
                    node = node.setdefault(part, {})
                node[child_parts[-1]] = copy.deepcopy(value)
        self._notify(parts)

    def push(self, path: str, value: Any) -> str:
        key = f"{int(time.time() * 1000):013d}{next(self._push_counter):05d}"
        self.set(f"{path}/{key}", value)
        return key

    def subscribe(self, path: str, callback: Callable[[str, Any], None]) -> Unsubscribe:
        subscription_id = next(self._ids)
        with self._lock:
            self._subscribers[subscription_id] = (_split(path), callback)

        def unsubscribe():
            with self._lock:
                self._subscribers.pop(subscription_id, None)
        return unsubscribe

    def _notify(self, written: List[str]):
        with self._lock:
            targets = [(parts, callback) for parts, callback in self._subscribers.values()
                       if _is_related(parts, written)]
            snapshots = [("/".join(parts), copy.deepcopy(self._read(parts))) for parts, _ in targets]
        # Callbacks run outside the lock so they may write back to the store
        for (_, callback), (path, value) in zip(targets, snapshots):
            try:
                callback(path, value)
            except Exception as e:
                logger.error(f"Store subscriber for '{path}' failed: {e}")
