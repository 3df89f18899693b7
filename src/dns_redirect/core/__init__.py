"""
Redirect Service Core Module

This module exports the destination resolution components.
"""

from .decision import (
    ErrorResponse,
    InboundRequest,
    PassThrough,
    Redirect,
    RedirectDecision,
    RedirectDecisionHandler,
    build_destination_url,
)
from .engine import DestinationResolutionEngine, ResolutionRequest
from .errors import FaultClass, classify_fault
from .hostname import (
    first_label,
    is_ip_address,
    is_valid_destination,
    is_valid_hostname,
)
from .resolver import (
    AiohttpFetcher,
    DNSResolver,
    FetchResponse,
    HTTPFetcher,
    LookupOutcome,
    TxtLookup,
)

__all__ = [
    # Decision layer
    "RedirectDecisionHandler",
    "RedirectDecision",
    "InboundRequest",
    "PassThrough",
    "Redirect",
    "ErrorResponse",
    "build_destination_url",
    # Resolution
    "DestinationResolutionEngine",
    "ResolutionRequest",
    "DNSResolver",
    "TxtLookup",
    "LookupOutcome",
    # HTTP collaborator
    "HTTPFetcher",
    "AiohttpFetcher",
    "FetchResponse",
    # Faults
    "FaultClass",
    "classify_fault",
    # Hostname predicates
    "is_valid_hostname",
    "is_ip_address",
    "is_valid_destination",
    "first_label",
]
