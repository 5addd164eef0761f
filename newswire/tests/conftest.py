"""
Pytest fixtures for newswire tests.
"""

import pytest
from fastapi.testclient import TestClient

from newswire.aggregator import FeedAggregator
from newswire.cache import FeedCache
from newswire.config import state
from newswire.fetcher import SourceFetcher
from newswire.models import SourceDescriptor
from newswire.proxies import ProxyRouter
from newswire.rate_limit import limiter
from newswire.server import app

from .helpers import FakeTransport, build_proxies, json_body, make_item, per_source_handler


@pytest.fixture
def proxies():
    return build_proxies()


@pytest.fixture
def router(proxies):
    return ProxyRouter(proxies)


@pytest.fixture
def source():
    return SourceDescriptor(
        id="x",
        name="Example",
        url="https://example.com/feed",
        category="TEST",
        topic_label="Test",
    )


@pytest.fixture
def sources():
    return [
        SourceDescriptor(id="a", name="Source A", url="https://a.example.com/feed", category="NEWS"),
        SourceDescriptor(id="b", name="Source B", url="https://b.example.com/feed", category="NEWS"),
        SourceDescriptor(id="c", name="Source C", url="https://c.example.com/feed", category="OPINION"),
    ]


@pytest.fixture
def make_aggregator(router):
    """Build an aggregator wired to a fake transport."""
    def factory(handler, timeout: float = 10) -> tuple[FeedAggregator, FakeTransport]:
        transport = FakeTransport(handler)
        fetcher = SourceFetcher(router, http_get=transport, timeout=timeout)
        aggregator = FeedAggregator(cache=FeedCache(), router=router, fetcher=fetcher)
        return aggregator, transport
    return factory


@pytest.fixture
def client(make_aggregator, sources):
    """Test client whose sources A and C succeed while B always fails."""
    original_aggregator = state.aggregator
    original_sources = state.sources
    original_limiter_enabled = limiter.enabled

    aggregator, transport = make_aggregator(per_source_handler({
        "a.example.com": json_body([
            make_item("War talks stall at the front", 10, "https://a.example.com/1"),
            make_item("Local bakery opens", 90, "https://a.example.com/2"),
        ]),
        "c.example.com": json_body([
            make_item("FBI subpoena issued", 30, "https://c.example.com/1"),
        ]),
    }))
    state.aggregator = aggregator
    state.sources = sources
    limiter.enabled = False

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client, transport

    state.aggregator = original_aggregator
    state.sources = original_sources
    limiter.enabled = original_limiter_enabled
