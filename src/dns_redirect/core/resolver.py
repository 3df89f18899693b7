"""
DNS TXT Resolver

This module looks up redirect TXT records through a DNS-over-HTTPS JSON
provider:
- Hostname validation before any network traffic
- Bounded per-query timeout reported as a distinct outcome
- Strict parsing of the provider's JSON schema
- Fail-closed behaviour: every failure yields an empty record list
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Tuple

import aiohttp

from ..dns_logging import get_logger, log_exception
from .hostname import is_valid_hostname

DEFAULT_DOH_URL = "https://cloudflare-dns.com/dns-query"
DEFAULT_TXT_PREFIX = "_redirect."
DEFAULT_DNS_TIMEOUT = 5.0
DNS_JSON_CONTENT_TYPE = "application/dns-json"
TXT_RECORD_TYPE = 16

logger = get_logger(__name__)


@dataclass
class FetchResponse:
    """Status line and decoded JSON body of an HTTP response"""

    status: int
    reason: Optional[str] = None
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HTTPFetcher(Protocol):
    """Anything that can GET a URL and decode a JSON body"""

    async def fetch_json(
        self,
        url: str,
        params: Dict[str, str],
        headers: Dict[str, str],
        timeout: float,
    ) -> FetchResponse:
        ...


class AiohttpFetcher:
    """HTTPFetcher backed by a shared aiohttp ClientSession"""

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def fetch_json(
        self,
        url: str,
        params: Dict[str, str],
        headers: Dict[str, str],
        timeout: float,
    ) -> FetchResponse:
        session = self._get_session()
        async with session.get(
            url,
            params=params,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as response:
            if not 200 <= response.status < 300:
                return FetchResponse(status=response.status, reason=response.reason)

            # Providers answer with application/dns-json, not application/json
            body = await response.json(content_type=None)
            return FetchResponse(
                status=response.status, reason=response.reason, body=body
            )

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()


class LookupOutcome(Enum):
    """Result category of a single TXT lookup"""

    OK = "ok"
    INVALID_DOMAIN = "invalid_domain"
    HTTP_ERROR = "http_error"
    DNS_ERROR = "dns_error"
    MALFORMED = "malformed"
    TIMEOUT = "timeout"
    TRANSPORT_ERROR = "transport_error"


@dataclass
class TxtLookup:
    """Outcome of one TXT query for a domain"""

    domain: str
    outcome: LookupOutcome
    records: List[str] = field(default_factory=list)
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome == LookupOutcome.OK


class MalformedResponseError(ValueError):
    """Provider JSON did not have the expected shape"""


def strip_quotes(value: str) -> str:
    """Remove one leading and one trailing double quote"""
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def parse_dns_json(body: Any) -> Tuple[int, List[str]]:
    """
    Extract the DNS status and TXT strings from a DoH JSON body.

    Raises:
        MalformedResponseError: If required fields are missing or mistyped
    """
    if not isinstance(body, dict):
        raise MalformedResponseError("response body is not an object")

    status = body.get("Status")
    if not isinstance(status, int) or isinstance(status, bool):
        raise MalformedResponseError("missing or non-integer Status")

    answers = body.get("Answer")
    if answers is None:
        return status, []
    if not isinstance(answers, list):
        raise MalformedResponseError("Answer is not a list")

    records = []
    for answer in answers:
        if not isinstance(answer, dict) or not isinstance(answer.get("data"), str):
            raise MalformedResponseError("Answer entry without string data")

        # Answers may include the CNAME chain leading to the TXT record
        rtype = answer.get("type", TXT_RECORD_TYPE)
        if rtype != TXT_RECORD_TYPE:
            continue

        records.append(strip_quotes(answer["data"]))

    return status, records


class DNSResolver:
    """TXT record resolver over DNS-over-HTTPS"""

    def __init__(
        self,
        fetcher: HTTPFetcher,
        provider_url: str = DEFAULT_DOH_URL,
        txt_prefix: str = DEFAULT_TXT_PREFIX,
        timeout: float = DEFAULT_DNS_TIMEOUT,
    ):
        self.fetcher = fetcher
        self.provider_url = provider_url
        self.txt_prefix = txt_prefix
        self.timeout = timeout

    def record_name(self, domain: str) -> str:
        """Name of the TXT record that configures redirects for domain"""
        return f"{self.txt_prefix}{domain}"

    async def resolve_txt(self, domain: str) -> List[str]:
        """Get TXT strings for the domain's redirect record, empty on any failure"""
        lookup = await self.lookup_txt(domain)
        return lookup.records

    async def lookup_txt(self, domain: str) -> TxtLookup:
        """Query the redirect record for domain and classify the outcome"""
        if not is_valid_hostname(domain):
            logger.warning("Invalid hostname format", domain=domain, stage="validate")
            return TxtLookup(domain, LookupOutcome.INVALID_DOMAIN)

        name = self.record_name(domain)

        try:
            response = await asyncio.wait_for(
                self.fetcher.fetch_json(
                    self.provider_url,
                    params={"name": name, "type": "TXT"},
                    headers={"Accept": DNS_JSON_CONTENT_TYPE},
                    timeout=self.timeout,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(
                "DNS lookup timeout",
                domain=domain,
                record=name,
                timeout=self.timeout,
                stage="query",
            )
            return TxtLookup(domain, LookupOutcome.TIMEOUT)
        except aiohttp.ClientError as e:
            logger.error(
                "DNS lookup failed",
                domain=domain,
                record=name,
                error=str(e),
                stage="query",
            )
            return TxtLookup(domain, LookupOutcome.TRANSPORT_ERROR, detail=str(e))
        except ValueError as e:
            logger.error(
                "DNS lookup returned undecodable body",
                domain=domain,
                record=name,
                error=str(e),
                stage="decode",
            )
            return TxtLookup(domain, LookupOutcome.MALFORMED, detail=str(e))
        except Exception as e:
            log_exception(
                logger,
                "DNS lookup raised unexpectedly",
                e,
                domain=domain,
                record=name,
                stage="query",
            )
            return TxtLookup(domain, LookupOutcome.TRANSPORT_ERROR, detail=str(e))

        if not response.ok:
            detail = f"{response.status} {response.reason or ''}".strip()
            logger.error(
                "DNS query failed",
                domain=domain,
                record=name,
                http_status=detail,
                stage="http",
            )
            return TxtLookup(domain, LookupOutcome.HTTP_ERROR, detail=detail)

        try:
            status, records = parse_dns_json(response.body)
        except MalformedResponseError as e:
            logger.error(
                "DNS response malformed",
                domain=domain,
                record=name,
                error=str(e),
                stage="parse",
            )
            return TxtLookup(domain, LookupOutcome.MALFORMED, detail=str(e))

        if status != 0:
            logger.error(
                "DNS query returned error status",
                domain=domain,
                record=name,
                dns_status=status,
                stage="parse",
            )
            return TxtLookup(domain, LookupOutcome.DNS_ERROR, detail=str(status))

        logger.debug("DNS lookup succeeded", domain=domain, records=len(records))
        return TxtLookup(domain, LookupOutcome.OK, records=records)
