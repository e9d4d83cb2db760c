"""Shared protocol for key-value storage backends."""

from typing import Optional, Protocol


class KeyValueStore(Protocol):
    """String-to-string store; every call is synchronous and durable on return."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""

    def set(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value."""

    def remove(self, key: str) -> None:
        """Delete `key` without raising if it is absent."""

    def clear(self) -> None:
        """Remove every key owned by this store."""
