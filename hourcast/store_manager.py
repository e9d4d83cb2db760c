"""Process-wide key-value store selection."""
import redis

from hourcast.config import Settings, settings
from hourcast.kv_store import InMemoryKeyValueStore, KeyValueStore, RedisKeyValueStore
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="store_manager")


def build_store(cfg: Settings | None = None) -> KeyValueStore:
    """Initialize the backing store based on configuration."""
    cfg = cfg or settings
    masked = mask_url(cfg.store_redis_url)
    logger.debug(f"Initializing key-value store: redis_url='{masked or 'None'}'")
    if cfg.store_redis_url:
        try:
            client = redis.Redis.from_url(cfg.store_redis_url)
            client.ping()
            logger.info("Using RedisKeyValueStore", extra={"redis_url": masked})
            return RedisKeyValueStore(client, prefix=cfg.store_prefix)
        except redis.RedisError as exc:
            logger.warning("Falling back to InMemoryKeyValueStore (Redis unavailable)", extra={"error": str(exc)})
    return InMemoryKeyValueStore()


_store: KeyValueStore | None = None


def get_store() -> KeyValueStore:
    """Return the shared store, creating it on first use."""
    global _store
    if _store is None:
        _store = build_store()
    return _store


def use_in_memory_store_for_tests() -> InMemoryKeyValueStore:
    """Swap in a fresh in-memory store for test isolation and return it."""
    global _store
    store = InMemoryKeyValueStore()
    _store = store
    return store
