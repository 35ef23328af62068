"""
utils.py — Shared utility classes for the Quran API.
"""
import threading
from collections import OrderedDict


class LRUCache:
    """Thread-safe LRU cache with a maximum size (upstream payload cache)."""

    def __init__(self, max_size: int = 500):
        self._store: OrderedDict = OrderedDict()
        self._max_size = max_size
        self._lock = threading.Lock()

    def get(self, key: str):
        with self._lock:
            if key not in self._store:
                return None
            self._store.move_to_end(key)
            return self._store[key]

    def set(self, key: str, value) -> None:
        with self._lock:
            if key in self._store:
                self._store.move_to_end(key)
            self._store[key] = value
            if len(self._store) > self._max_size:
                self._store.popitem(last=False)

