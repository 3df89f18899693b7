"""
Destination Cache Module

TTL cache of resolved redirect destinations, keyed by the domain whose TXT
record carried the destination.
"""

from .engine import DEFAULT_CACHE_TTL, TTLCache
from .entry import CacheEntry
from .stats import CacheStats, CacheStatsManager

__all__ = [
    "TTLCache",
    "DEFAULT_CACHE_TTL",
    "CacheEntry",
    "CacheStats",
    "CacheStatsManager",
]
