"""
Destination Resolution Engine

Finds the redirect destination for a hostname by walking from the full
hostname toward its parent domains and asking the resolver for each level's
redirect TXT record. The first valid destination wins. It is cached under the
domain that published it, so sibling subdomains share one entry, and under
the requested hostname, so repeat requests skip the walk.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional

from ..cache import TTLCache
from ..dns_logging import get_logger, log_exception
from .hostname import is_valid_destination, is_valid_hostname
from .resolver import DNSResolver

DESTINATION_PREFIX = "destination="
DEFAULT_MAX_LOOKUPS = 5

logger = get_logger(__name__)


@dataclass
class ResolutionRequest:
    """Per-call state of a suffix walk"""

    hostname: str
    labels: List[str]
    remaining_lookups: int

    @classmethod
    def start(cls, hostname: str, max_lookups: int) -> "ResolutionRequest":
        return cls(hostname, hostname.split("."), max_lookups)

    @property
    def current_domain(self) -> str:
        return ".".join(self.labels)

    def can_continue(self) -> bool:
        """At least a two-label domain left and budget remaining"""
        return len(self.labels) >= 2 and self.remaining_lookups > 0

    def advance(self) -> None:
        self.labels = self.labels[1:]


def iter_destinations(records: List[str]) -> Iterator[str]:
    """Yield the value of each destination= record in order, whitespace stripped"""
    for record in records:
        if record.startswith(DESTINATION_PREFIX):
            yield record[len(DESTINATION_PREFIX) :].strip()


class DestinationResolutionEngine:
    """Cached, bounded suffix-walking lookup of redirect destinations"""

    def __init__(
        self,
        resolver: DNSResolver,
        cache: TTLCache,
        max_lookups: int = DEFAULT_MAX_LOOKUPS,
    ):
        self.resolver = resolver
        self.cache = cache
        self.max_lookups = max_lookups

    async def resolve(self, hostname: str) -> Optional[str]:
        """
        Get the redirect destination for hostname.

        Returns None when the hostname is invalid or no level of the suffix
        walk publishes a valid destination. Misses are not cached.
        """
        if not hostname or not is_valid_hostname(hostname):
            return None

        cached = await self.cache.lookup(hostname)
        if cached:
            logger.debug("Cache hit", hostname=hostname, destination=cached)
            return cached

        request = ResolutionRequest.start(hostname, self.max_lookups)

        while request.can_continue():
            request.remaining_lookups -= 1
            domain = request.current_domain

            # Parent levels may already be cached by a sibling subdomain
            destination = None
            fetched_at = None
            if domain != hostname:
                entry = await self.cache.lookup_entry(domain)
                if entry:
                    destination, fetched_at = entry.value, entry.timestamp

            if not destination:
                destination = await self._lookup_level(hostname, domain)
                if destination:
                    fetched_at = self.cache.now()
                    await self.cache.put(domain, destination, timestamp=fetched_at)

            if destination:
                # The alias expires together with the DNS answer it copies
                if domain != hostname:
                    await self.cache.put(hostname, destination, timestamp=fetched_at)
                logger.info(
                    "Resolved redirect destination",
                    hostname=hostname,
                    domain=domain,
                    destination=destination,
                )
                return destination

            request.advance()

        logger.info(
            "No redirect destination found",
            hostname=hostname,
            levels_checked=self.max_lookups - request.remaining_lookups,
        )
        return None

    async def _lookup_level(self, hostname: str, domain: str) -> Optional[str]:
        """Query one suffix level; faults degrade to no destination"""
        try:
            records = await self.resolver.resolve_txt(domain)
        except Exception as e:
            log_exception(
                logger,
                "TXT lookup raised",
                e,
                hostname=hostname,
                domain=domain,
                stage="resolve",
            )
            return None

        for candidate in iter_destinations(records):
            if is_valid_destination(candidate):
                return candidate

            logger.warning(
                "Rejected redirect destination",
                hostname=hostname,
                domain=domain,
                candidate=candidate,
                stage="validate",
            )

        return None
