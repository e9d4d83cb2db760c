"""Holds the latest preview per location for the HTTP layer.

The engine itself is stateless; this registry is where the caller-side
duties live: dropping results from superseded fetches and applying task
mutations one at a time, in arrival order.

Entries expire `ttl_seconds` after their last use and the registry never holds
more than `max_entries` locations; the least recently used one goes first.
"""

import itertools
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from hourcast.domain import ForecastPreview, HourRecord
from hourcast.forecast_service import summarize
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="preview_registry")

Mutation = Callable[[list[HourRecord]], list[HourRecord]]


@dataclass
class _Entry:
    token: int
    expires_at: float
    preview: Optional[ForecastPreview] = None


class PreviewRegistry:
    """Thread-safe, TTL-aware map of location key -> latest ForecastPreview."""

    def __init__(
        self,
        ttl_seconds: float = 3600,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            self._evict_expired()
            return len(self._entries)

    def _evict_expired(self) -> None:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.expires_at < now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Expired forecast previews", extra={"count": len(expired)})

    def _touch(self, key: str, entry: _Entry) -> None:
        """Refresh the TTL and mark `key` as most recently used."""
        entry.expires_at = self._clock() + self.ttl
        self._entries.pop(key, None)
        self._entries[key] = entry

    def _lookup(self, key: str) -> Optional[_Entry]:
        self._evict_expired()
        return self._entries.get(key)

    def begin_fetch(self, key: str) -> int:
        """Register a new fetch for `key`; only the newest token may commit."""
        with self._lock:
            entry = self._lookup(key)
            token = next(self._counter)
            if entry is None:
                entry = _Entry(token=token, expires_at=0.0)
            entry.token = token
            self._touch(key, entry)
            while len(self._entries) > self.max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                logger.debug("Evicted least recently used preview", extra={"location_key": oldest})
            return token

    def commit(self, key: str, token: int, preview: ForecastPreview) -> bool:
        """Store `preview` unless a newer fetch has started since `token` was issued."""
        with self._lock:
            entry = self._lookup(key)
            if entry is None or entry.token != token:
                logger.info("Discarding stale forecast result", extra={"location_key": key})
                return False
            entry.preview = preview
            self._touch(key, entry)
            return True

    def discard(self, key: str, token: Optional[int] = None) -> None:
        """Forget `key` (after a failed fetch) unless `token` is stale."""
        with self._lock:
            entry = self._lookup(key)
            if entry is None:
                return
            if token is not None and entry.token != token:
                return
            del self._entries[key]

    def get(self, key: str) -> Optional[ForecastPreview]:
        with self._lock:
            entry = self._lookup(key)
            if entry is None or entry.preview is None:
                return None
            self._touch(key, entry)
            return entry.preview

    def mutate(self, key: str, fn: Mutation, now: datetime | None = None) -> Optional[tuple[ForecastPreview, bool]]:
        """
        Apply `fn` to the stored records and keep the recomputed preview.

        Returns (preview, changed), or None when `key` has no preview. The lock
        is held for the whole call so overlapping mutations never interleave.
        """
        with self._lock:
            entry = self._lookup(key)
            if entry is None or entry.preview is None:
                return None
            current = entry.preview
            self._touch(key, entry)
            records = current.records
            updated = fn(records)
            if updated is records:
                return current, False
            preview = summarize(current.location, updated, now)
            entry.preview = preview
            return preview, True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
