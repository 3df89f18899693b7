"""
Hostname Validation

Pure predicates used to decide whether a Host header or a TXT record value
is safe to look up or redirect to. All functions are total: anything that is
not a well-formed string simply yields False.
"""

import re

MAX_HOSTNAME_LENGTH = 253
MAX_LABEL_LENGTH = 63

# RFC 1123: labels of 1-63 alphanumerics with interior hyphens
_HOSTNAME_RE = re.compile(
    r"^[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(\.[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)
_IPV4_RE = re.compile(r"^(\d{1,3}\.){3}\d{1,3}$")


def is_valid_hostname(hostname: str) -> bool:
    """Check hostname length and RFC 1123 label syntax."""
    if not isinstance(hostname, str) or not hostname:
        return False
    if len(hostname) > MAX_HOSTNAME_LENGTH:
        return False
    return _HOSTNAME_RE.match(hostname) is not None


def is_ip_address(hostname: str) -> bool:
    """Check for a dotted-quad IPv4 literal or anything containing a colon.

    The colon test is a coarse IPv6 heuristic; it also catches host:port
    values, which are never redirect candidates either.
    """
    if not isinstance(hostname, str):
        return False
    return _IPV4_RE.match(hostname) is not None or ":" in hostname


def is_valid_destination(destination: str) -> bool:
    """Check that a TXT record value may be used as a redirect target."""
    return bool(
        destination
        and is_valid_hostname(destination)
        and "*" not in destination
        and not is_ip_address(destination)
    )


def first_label(hostname: str) -> str:
    """Return the leftmost label of a hostname."""
    return hostname.split(".", 1)[0]
