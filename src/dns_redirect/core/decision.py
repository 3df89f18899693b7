"""
Redirect Decision Handler

Turns an inbound request into exactly one of three outcomes: let it pass,
redirect it to the hostname published in DNS, or answer with an error.
Faults never escape decide(); they are logged and mapped to an error status.
"""

import asyncio
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Set, Union

from yarl import URL

from ..dns_logging import get_logger, log_exception
from .engine import DESTINATION_PREFIX, DestinationResolutionEngine
from .errors import FaultClass, classify_fault
from .hostname import (
    MAX_HOSTNAME_LENGTH,
    MAX_LABEL_LENGTH,
    first_label,
    is_ip_address,
    is_valid_hostname,
)
from .resolver import DEFAULT_TXT_PREFIX

DEFAULT_REDIRECT_STATUS = 307
DEFAULT_REDIRECT_BY = "DNS-Redirect-Middleware"

FAULT_MESSAGES = {
    FaultClass.VALIDATION: "Invalid request format",
    FaultClass.TIMEOUT: "Request timeout",
    FaultClass.UNCLASSIFIED: "Internal Server Error",
}

FALLBACK_DIAGNOSTIC = (
    "Unable to process redirect request. Please check your DNS configuration."
)

logger = get_logger(__name__)


@dataclass
class InboundRequest:
    """The parts of an HTTP request the redirect decision depends on"""

    host: Optional[str]
    url: str


@dataclass(frozen=True)
class PassThrough:
    """Continue with the request unchanged"""

    def to_dict(self) -> Dict[str, Any]:
        return {"decision": "pass_through"}


@dataclass(frozen=True)
class Redirect:
    """Redirect to location with status and extra headers"""

    location: str
    status: int = DEFAULT_REDIRECT_STATUS
    headers: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "decision": "redirect",
            "status": self.status,
            "location": self.location,
            "headers": dict(self.headers),
        }


@dataclass(frozen=True)
class ErrorResponse:
    """Answer the request with a plain-text error"""

    status: int
    body: str
    headers: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"decision": "error", "status": self.status, "body": self.body}


RedirectDecision = Union[PassThrough, Redirect, ErrorResponse]

PASS_THROUGH = PassThrough()

_PATH_START_RE = re.compile(r"[/?#]")


def build_destination_url(url: str, hostname: str) -> str:
    """Swap the host of url, keeping scheme, path and query string verbatim.

    Raises:
        ValueError: If url is not absolute
    """
    original = URL(url)
    if not original.is_absolute() or not original.scheme or "://" not in url:
        raise ValueError(f"Request URL is not absolute: {url}")

    # Sliced from the input string; yarl requoting may decode escapes
    authority_and_rest = url.split("://", 1)[1]
    match = _PATH_START_RE.search(authority_and_rest)
    tail = authority_and_rest[match.start() :] if match else "/"
    if not tail.startswith("/"):
        tail = "/" + tail

    return f"{original.scheme}://{hostname}{tail}"


class RedirectDecisionHandler:
    """Decides what to do with a request based on its Host header"""

    def __init__(
        self,
        engine: DestinationResolutionEngine,
        txt_prefix: str = DEFAULT_TXT_PREFIX,
        redirect_status: int = DEFAULT_REDIRECT_STATUS,
        redirect_by: str = DEFAULT_REDIRECT_BY,
    ):
        self.engine = engine
        self.txt_prefix = txt_prefix
        self.redirect_status = redirect_status
        self.redirect_by = redirect_by
        self._inflight: Set[asyncio.Future] = set()

    async def decide(self, request: InboundRequest) -> RedirectDecision:
        """Get the decision for request; never raises"""
        try:
            return await self._decide(request)
        except Exception as e:
            fault = classify_fault(e)
            log_exception(
                logger,
                "Redirect decision failed",
                e,
                host=getattr(request, "host", None),
                fault=fault.name,
                stage="decide",
            )
            return ErrorResponse(fault.status, FAULT_MESSAGES[fault])

    async def _decide(self, request: InboundRequest) -> RedirectDecision:
        host = request.host
        if host is None:
            return PASS_THROUGH
        if not isinstance(host, str):
            raise TypeError(f"Host header must be a string, got {type(host).__name__}")

        host = host.lower()

        # Internal probes and raw IP access are never redirect candidates
        if not host or is_ip_address(host):
            return PASS_THROUGH

        if not is_valid_hostname(host):
            logger.info("Rejected malformed host", host=host, stage="validate")
            return ErrorResponse(400, "Invalid hostname format")

        # Shielded so a disconnecting client does not abort the lookup;
        # it still completes and populates the cache.
        lookup = asyncio.ensure_future(self.engine.resolve(host))
        self._inflight.add(lookup)
        lookup.add_done_callback(self._lookup_done)
        destination = await asyncio.shield(lookup)
        if not destination:
            return ErrorResponse(
                404,
                self.diagnostic_message(host, request.url),
                headers={"Content-Type": "text/plain"},
            )

        subdomain = first_label(host)
        if len(subdomain) > MAX_LABEL_LENGTH:
            return ErrorResponse(400, "Subdomain too long")

        new_hostname = f"{subdomain}.{destination}"
        if len(new_hostname) > MAX_HOSTNAME_LENGTH:
            return ErrorResponse(400, "Resulting hostname too long")

        location = build_destination_url(request.url, new_hostname)

        logger.info(
            "Redirecting request",
            host=host,
            destination=destination,
            location=location,
        )
        return Redirect(
            location=location,
            status=self.redirect_status,
            headers={
                "Cache-Control": "no-cache",
                "X-Redirect-By": self.redirect_by,
            },
        )

    def _lookup_done(self, lookup: asyncio.Future) -> None:
        self._inflight.discard(lookup)
        if lookup.cancelled():
            return

        # Retrieve the result even when the awaiting caller has gone away;
        # a caller still waiting logs the failure itself
        exc = lookup.exception()
        if exc is not None:
            logger.debug(
                "Shielded resolution failed",
                error=str(exc),
                exception_type=type(exc).__name__,
                stage="resolve",
            )

    def diagnostic_message(self, host: str, url: str) -> str:
        """Explain the TXT record that would configure redirects for host"""
        try:
            record_name = f"{self.txt_prefix}{host}"
            current_domain = URL(url).host

            return "\n".join(
                [
                    "No redirect configuration found.",
                    "",
                    f"To configure redirects for {host}, create a TXT record:",
                    f"Domain: {record_name}",
                    f"Content: {DESTINATION_PREFIX}your-target-domain.com",
                    "",
                    "Example DNS Record:",
                    "Type: TXT",
                    f"Name: {record_name}",
                    f"Value: {DESTINATION_PREFIX}example.com",
                    "",
                    f"Current domain: {current_domain}",
                    f"Requested URL: {url}",
                ]
            )
        except Exception as e:
            log_exception(logger, "Failed to build diagnostic message", e, host=host)
            return FALLBACK_DIAGNOSTIC
