"""
Destination Cache Entry
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CacheEntry:
    """Resolved destination for a lookup domain and when it was stored"""

    value: str
    timestamp: float

    def age(self, now: float) -> float:
        """Seconds since the entry was stored"""
        return now - self.timestamp

    def is_fresh(self, now: float, ttl: float) -> bool:
        """Check if entry is still inside its TTL window"""
        return self.age(now) < ttl

    def remaining_ttl(self, now: float, ttl: float) -> int:
        """Get remaining TTL in seconds"""
        return max(0, int(ttl - self.age(now)))
