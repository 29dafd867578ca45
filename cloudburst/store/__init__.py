# cloudburst/store/__init__.py
"""
Realtime key-value store contract, an in-memory implementation and the
record codec used at the store boundary.
"""
from .base import KeyValueStore
from .memory import InMemoryStore
from .constants import StorePaths
from .exceptions import StoreError, StoreUnavailableError

__all__ = [
    "KeyValueStore",
    "InMemoryStore",
    "StorePaths",
    "StoreError",
    "StoreUnavailableError"
]
