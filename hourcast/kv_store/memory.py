"""In-memory key-value store, intended for development and tests."""

import threading
from typing import Optional

from hourcast.kv_store.base import KeyValueStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="kv_store/in_memory")


class InMemoryKeyValueStore(KeyValueStore):
    """Thread-safe dict-backed store."""

    def __init__(self) -> None:
        logger.debug("Initializing InMemoryKeyValueStore")
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
