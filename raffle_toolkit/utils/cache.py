"""
Short-lived in-memory TTL cache for raffle address lists and collections.

One TTL applies uniformly to every entry (no per-entry override). An entry
read at or after `inserted_at + ttl` is a miss and is evicted. Entries are
replaced wholesale on set, never merged.

Keys:
- raffle_addresses:{chain_id}                       address list per chain
- raffles:{chain_id}:{platform}:{max_items}         assembled collection
"""

import time
from typing import Any, Callable, Dict, Optional

from raffle_toolkit.shared.constants import GlobalConstants


def address_list_key(chain_id: int) -> str:
    return f"raffle_addresses:{chain_id}"


def collection_key(chain_id: int, platform: str, max_items: int) -> str:
    return f"raffles:{chain_id}:{platform}:{max_items}"


class CacheEntry:
    """A cache entry with its insertion time."""

    def __init__(self, value: Any, inserted_at: float):
        self.value = value
        self.inserted_at = inserted_at

    def is_expired(self, now: float, ttl: float) -> bool:
        """Check if this cache entry has expired."""
        return now - self.inserted_at >= ttl


class ResultCache:
    """TTL cache keyed by chain/platform-scoped strings."""

    def __init__(
        self,
        ttl: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            ttl: Time-to-live in seconds (default: RAFFLE_CACHE_TTL, 300)
            clock: Monotonic time source, injectable for tests
        """
        self.ttl = ttl if ttl is not None else GlobalConstants.CACHE_TTL
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache if not expired, else None."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock(), self.ttl):
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store a value, replacing any previous entry for the key."""
        self._entries[key] = CacheEntry(value, self._clock())

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop everything (forced refresh, chain switch)."""
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        now = self._clock()
        active = [
            key
            for key, entry in self._entries.items()
            if not entry.is_expired(now, self.ttl)
        ]
        return {
            "total_entries": len(self._entries),
            "active_entries": len(active),
            "expired_entries": len(self._entries) - len(active),
            "keys": sorted(active),
            "ttl": self.ttl,
        }
