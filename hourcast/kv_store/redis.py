"""Redis-backed key-value store."""

from typing import Optional

from hourcast.kv_store.base import KeyValueStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="kv_store/redis")


class RedisKeyValueStore(KeyValueStore):
    """Stores each key as a plain Redis string under a shared prefix.

    Reads degrade to "absent" when Redis misbehaves; writes propagate errors so
    a caller never believes an unsaved task list was persisted.
    """

    def __init__(self, client, prefix: str = "hourcast:") -> None:
        """Initialize with a redis-py client and a key prefix."""
        logger.debug("Initializing RedisKeyValueStore")
        self.client = client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        """Return the namespaced Redis key."""
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        try:
            raw = self.client.get(self._key(key))
        except Exception as exc:  # pragma: no cover
            logger.error("Failed to read key from Redis: %s", exc)
            return None
        if raw is None:
            return None
        if isinstance(raw, bytes):
            return raw.decode("utf-8")
        return str(raw)

    def set(self, key: str, value: str) -> None:
        try:
            self.client.set(self._key(key), value.encode("utf-8"))
        except Exception as exc:
            logger.error("Failed to write key to Redis: %s", exc)
            raise

    def remove(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except Exception as exc:
            logger.error("Failed to delete key from Redis: %s", exc)
            raise

    def clear(self) -> None:
        """Best-effort clear for all keys under the configured prefix."""
        try:
            for key in self.client.scan_iter(f"{self.prefix}*"):
                self.client.delete(key)
        except Exception as exc:  # pragma: no cover
            logger.error("Failed to clear keys from Redis: %s", exc)
