"""
Fault classification for the redirect decision layer.
"""

import asyncio
from enum import Enum


class FaultClass(Enum):
    """Category of a request fault and the HTTP status it maps to"""

    VALIDATION = 400
    LOOKUP_MISS = 404
    UNCLASSIFIED = 500
    TIMEOUT = 504

    @property
    def status(self) -> int:
        return self.value


def classify_fault(exc: BaseException) -> FaultClass:
    """Map an unexpected exception raised while deciding to a fault class.

    Format problems (bad types, unparsable URLs) are client errors, timeouts
    are gateway timeouts, anything else is an internal error.
    """
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return FaultClass.TIMEOUT
    if isinstance(exc, (TypeError, ValueError)):
        return FaultClass.VALIDATION
    return FaultClass.UNCLASSIFIED
