"""
Destination Cache Engine

Process-wide TTL cache mapping a lookup domain to the destination hostname
published in its TXT record. Entries expire on read; nothing is evicted in
the background.
"""

import asyncio
import time
from typing import Any, Callable, Dict, List, Optional

from ..dns_logging import get_logger
from .entry import CacheEntry
from .stats import CacheStatsManager

DEFAULT_CACHE_TTL = 3600


class TTLCache:
    """Destination cache with expiry-on-read semantics"""

    def __init__(
        self,
        ttl: float = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize destination cache

        Args:
            ttl: Seconds an entry stays fresh after it is stored
            clock: Time source, injectable for tests
        """
        if ttl <= 0:
            raise ValueError(f"Cache TTL must be positive: {ttl}")

        self.ttl = ttl
        self._clock = clock
        self._cache: Dict[str, CacheEntry] = {}
        # Guards map operations only; never held across a DNS query
        self._lock = asyncio.Lock()

        self.stats = CacheStatsManager()
        self.logger = get_logger("dns_cache")

    def __len__(self) -> int:
        return len(self._cache)

    def keys(self) -> List[str]:
        return list(self._cache.keys())

    def now(self) -> float:
        return self._clock()

    def is_fresh(self, entry: CacheEntry) -> bool:
        """Check entry age against the cache TTL"""
        return entry.is_fresh(self.now(), self.ttl)

    async def get(self, key: str) -> Optional[CacheEntry]:
        """Get raw entry for key, fresh or not"""
        async with self._lock:
            return self._cache.get(key)

    async def lookup(self, key: str) -> Optional[str]:
        """Get cached destination for key, evicting it if stale"""
        entry = await self.lookup_entry(key)
        return entry.value if entry else None

    async def lookup_entry(self, key: str) -> Optional[CacheEntry]:
        """Get the fresh entry for key, evicting it if stale"""
        async with self._lock:
            entry = self._cache.get(key)

            if entry is None:
                self.stats.record_miss()
                return None

            if not self.is_fresh(entry):
                del self._cache[key]
                self.stats.record_miss(expired=True)
                self.logger.debug("Evicted stale cache entry", key=key)
                return None

            self.stats.record_hit()
            return entry

    async def put(
        self, key: str, value: str, timestamp: Optional[float] = None
    ) -> None:
        """Store destination for key.

        timestamp defaults to now; pass the source entry's timestamp when
        copying a cached value so the copy expires with it.
        """
        if timestamp is None:
            timestamp = self.now()
        entry = CacheEntry(value=value, timestamp=timestamp)

        async with self._lock:
            self._cache[key] = entry
            self.stats.record_store()

    async def delete(self, key: str) -> bool:
        """Remove key, returning whether it was present"""
        async with self._lock:
            return self._cache.pop(key, None) is not None

    async def flush(self) -> int:
        """Flush entire cache"""
        async with self._lock:
            count = len(self._cache)
            self._cache.clear()
            self.stats.record_flush()

        self.logger.info("Flushed destination cache", entries=count)
        return count

    async def get_cache_info(self) -> Dict[str, Any]:
        """Get cache size, TTL and statistics"""
        async with self._lock:
            now = self.now()
            fresh = sum(
                1 for entry in self._cache.values() if entry.is_fresh(now, self.ttl)
            )
            info = {
                "entries": len(self._cache),
                "fresh_entries": fresh,
                "ttl_seconds": self.ttl,
            }
            info.update(self.stats.get_stats())

        return info
