# cloudburst/store/base.py
"""
Contract of the realtime key-value store the engine reads from and writes to.
Paths are '/'-separated; values are JSON-compatible dicts, lists and scalars.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict

Unsubscribe = Callable[[], None]


class KeyValueStore(ABC):

    @abstractmethod
    def get(self, path: str) -> Any:
        """Value at `path`, or None when absent."""

    @abstractmethod
    def set(self, path: str, value: Any) -> None:
        """Replaces the value at `path`."""

    @abstractmethod
    def update(self, path: str, values: Dict[str, Any]) -> None:
        """Merges the given children into the value at `path`."""

    @abstractmethod
    def push(self, path: str, value: Any) -> str:
        """Appends a child under `path` with a generated key and returns that key."""

    @abstractmethod
    def subscribe(self, path: str, callback: Callable[[str, Any], None]) -> Unsubscribe:
        """Calls `callback(path, value)` after every write at or below `path`."""
