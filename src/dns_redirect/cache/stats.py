"""
Destination Cache Statistics
"""

import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict


@dataclass
class CacheStats:
    """Cache statistics data structure"""

    total_requests: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    ttl_expirations: int = 0
    stores: int = 0
    flushes: int = 0
    start_time: float = field(default_factory=time.time)

    def hit_ratio(self) -> float:
        """Calculate cache hit ratio"""
        if self.total_requests == 0:
            return 0.0
        return self.cache_hits / self.total_requests

    def miss_ratio(self) -> float:
        """Calculate cache miss ratio"""
        if self.total_requests == 0:
            return 0.0
        return self.cache_misses / self.total_requests

    def uptime_seconds(self) -> float:
        """Get cache uptime in seconds"""
        return time.time() - self.start_time

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("start_time")
        data["hit_ratio"] = round(self.hit_ratio(), 4)
        data["miss_ratio"] = round(self.miss_ratio(), 4)
        data["uptime_seconds"] = round(self.uptime_seconds(), 2)
        return data


class CacheStatsManager:
    """Manager for cache statistics tracking

    Counters are only touched while the owning cache holds its lock.
    """

    def __init__(self):
        self.stats = CacheStats()

    def record_hit(self) -> None:
        self.stats.total_requests += 1
        self.stats.cache_hits += 1

    def record_miss(self, expired: bool = False) -> None:
        self.stats.total_requests += 1
        self.stats.cache_misses += 1
        if expired:
            self.stats.ttl_expirations += 1

    def record_store(self) -> None:
        self.stats.stores += 1

    def record_flush(self) -> None:
        self.stats.flushes += 1

    def get_stats(self) -> Dict[str, Any]:
        return self.stats.to_dict()

    def reset_stats(self) -> None:
        self.stats = CacheStats()
