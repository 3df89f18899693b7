"""Shared fixtures: a scripted DoH fetcher, a controllable clock and the
resolution stack wired together on top of them."""

import asyncio
import sys
from pathlib import Path
from typing import Dict, List

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from dns_redirect.cache import TTLCache
from dns_redirect.core import (
    DestinationResolutionEngine,
    DNSResolver,
    FetchResponse,
    RedirectDecisionHandler,
)


class FakeClock:
    """Manually advanced time source"""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFetcher:
    """HTTPFetcher answering from an in-memory TXT zone"""

    def __init__(self):
        self.zones: Dict[str, List[str]] = {}
        self.overrides: Dict[str, object] = {}
        self.calls: List[str] = []
        self.requests: List[dict] = []
        self.delay = 0.0

    def add_record(self, domain: str, value: str) -> None:
        self.zones.setdefault(f"_redirect.{domain}", []).append(value)

    async def fetch_json(self, url, params, headers, timeout) -> FetchResponse:
        name = params["name"]
        self.calls.append(name)
        self.requests.append(
            {"url": url, "params": dict(params), "headers": dict(headers), "timeout": timeout}
        )

        if self.delay:
            await asyncio.sleep(self.delay)

        if name in self.overrides:
            override = self.overrides[name]
            if isinstance(override, BaseException):
                raise override
            return override

        values = self.zones.get(name)
        if values is None:
            return FetchResponse(200, "OK", {"Status": 3, "Question": [{"name": name, "type": 16}]})

        return FetchResponse(
            200,
            "OK",
            {
                "Status": 0,
                "Answer": [
                    {"name": name, "type": 16, "TTL": 300, "data": f'"{value}"'}
                    for value in values
                ],
            },
        )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def cache(clock):
    return TTLCache(ttl=3600, clock=clock)


@pytest.fixture
def resolver(fake_fetcher):
    return DNSResolver(fake_fetcher, timeout=1.0)


@pytest.fixture
def engine(resolver, cache):
    return DestinationResolutionEngine(resolver, cache, max_lookups=5)


@pytest.fixture
def decision_handler(engine):
    return RedirectDecisionHandler(engine)
