"""Pytest configuration and fixtures."""
import asyncio
from typing import Dict, List, Optional

import pytest

from remote_templates.error.exceptions import TransportError
from remote_templates.templates import TemplateCache


GREET_URL = "/views/greet.html"
CARD_URL = "/views/card.html"
STATIC_URL = "/views/static.html"


class FakeTransport:
    """In-memory transport whose async responses can be held back per URL."""

    def __init__(self, pages: Optional[Dict[str, str]] = None):
        self.pages = dict(pages or {})
        self.failures: Dict[str, Exception] = {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.async_calls: List[str] = []
        self.sync_calls: List[str] = []

    @property
    def call_count(self) -> int:
        return len(self.async_calls) + len(self.sync_calls)

    def hold(self, url: str) -> asyncio.Event:
        """Hold async responses for url until the returned event is set."""
        gate = asyncio.Event()
        self.gates[url] = gate
        return gate

    async def get_async(self, url: str) -> str:
        self.async_calls.append(url)
        gate = self.gates.get(url)
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)
        return self._respond(url)

    def get_sync(self, url: str) -> str:
        self.sync_calls.append(url)
        return self._respond(url)

    def _respond(self, url: str) -> str:
        if url in self.failures:
            raise self.failures[url]
        if url not in self.pages:
            raise TransportError(f"GET {url} failed: HTTP 404", url=url, status=404)
        return self.pages[url]


@pytest.fixture
def transport():
    """Transport serving a few small templates."""
    return FakeTransport({
        GREET_URL: "Hello {{ name }}!",
        CARD_URL: '<div class="card">{{ title }}</div>',
        STATIC_URL: "<p>static</p>",
    })


@pytest.fixture
def registry():
    return {
        "greet": GREET_URL,
        "card": CARD_URL,
    }


@pytest.fixture
def make_cache(transport, registry):
    """Factory building a cache wired to the fake transport without fetching."""
    def factory(reg=None, on_all_loaded=None, **kwargs):
        kwargs.setdefault("transport", transport)
        return TemplateCache(registry if reg is None else reg, on_all_loaded, **kwargs)
    return factory


@pytest.fixture
def cache(make_cache):
    return make_cache()
