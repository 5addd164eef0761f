"""
Feed Aggregator - Fetch many sources concurrently and merge the results.

Owns the feed cache, proxy router and source fetcher for one application.
A failing source never fails the aggregate: its error is reported in the
result's status/error maps while the other sources' articles come through.
"""

import asyncio
import logging
from typing import Iterable

from .cache import DEFAULT_TTL_MINUTES, FeedCache
from .fetcher import SourceFetcher
from .models import FeedResult, FeedStatus, SourceDescriptor, SourceResult
from .proxies import ProxyRouter

logger = logging.getLogger(__name__)


def aggregate_cache_key(sources: Iterable[SourceDescriptor]) -> str:
    """Cache key for a set of sources, independent of their order."""
    return "feeds_" + "_".join(sorted(str(s.id) for s in sources))


def source_cache_key(source_id: str | int) -> str:
    return f"feed_{source_id}"


class FeedAggregator:
    """Fetches, merges and caches feeds from many sources."""

    def __init__(
        self,
        cache: FeedCache | None = None,
        router: ProxyRouter | None = None,
        fetcher: SourceFetcher | None = None,
        ttl_minutes: float = DEFAULT_TTL_MINUTES,
    ):
        self.cache = cache or FeedCache(default_ttl_minutes=ttl_minutes)
        self.router = router or ProxyRouter()
        self.fetcher = fetcher or SourceFetcher(self.router)
        self.ttl_minutes = ttl_minutes
        # Live view of the current cycle, including transient "loading"
        self.live_status: dict[str | int, FeedStatus] = {}
        self.live_errors: dict[str | int, str] = {}
        self.last_result: FeedResult | None = None
        # Bumped by clear_cache so fetches started earlier do not write back
        self._generation = 0

    async def fetch_feeds(self, sources: list[SourceDescriptor]) -> FeedResult:
        """
        Fetch all sources concurrently.

        Returns a cached result when one is fresh. Otherwise every source is
        fetched in parallel, articles are merged newest-first and the result
        is cached.
        """
        sources = _unique_sources(sources)
        cache_key = aggregate_cache_key(sources)
        generation = self._generation

        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info(f"Serving from cache: {cache_key}")
            self.last_result = cached
            return cached

        results = await asyncio.gather(
            *(self._fetch_source(source) for source in sources)
        )

        items = [article for result in results for article in result.articles]
        items.sort(key=lambda a: a.published_at, reverse=True)

        status = {result.source_id: result.status for result in results}
        errors = {
            result.source_id: result.error
            for result in results
            if result.status == FeedStatus.ERROR
        }

        result = FeedResult(items=items, status=status, errors=errors)
        if generation == self._generation:
            self.cache.set(cache_key, result, self.ttl_minutes)
        self.last_result = result

        logger.info(
            f"Fetched {len(items)} articles from {len(sources)} sources "
            f"({len(errors)} failed)"
        )
        return result

    async def _fetch_source(self, source: SourceDescriptor) -> SourceResult:
        cache_key = source_cache_key(source.id)

        cached = self.cache.get(cache_key)
        if cached is not None:
            self.live_status[source.id] = FeedStatus.OK
            return SourceResult(source_id=source.id, status=FeedStatus.OK, articles=cached)

        return await self.cache.dedupe(cache_key, lambda: self._fetch_uncached(source))

    async def _fetch_uncached(self, source: SourceDescriptor) -> SourceResult:
        generation = self._generation
        try:
            result = await self.fetcher.fetch(source, self.live_status, self.live_errors)
        except Exception as e:
            logger.error(f"{source.name}: unexpected fetch failure: {e}")
            message = str(e)[:self.fetcher.error_max_length]
            self.live_status[source.id] = FeedStatus.ERROR
            self.live_errors[source.id] = message
            return SourceResult(source_id=source.id, status=FeedStatus.ERROR, error=message)

        if result.status == FeedStatus.OK and generation == self._generation:
            self.cache.set(source_cache_key(source.id), result.articles, self.ttl_minutes)
        return result

    def clear_cache(self) -> None:
        """Drop aggregate and per-source entries so the next fetch hits the network."""
        self._generation += 1
        self.cache.clear()
        self.cache.clear_pending()

    def clear_source_cache(self, source_id: str | int) -> None:
        self.cache.delete(source_cache_key(source_id))

    def reset_proxy_health(self) -> None:
        self.router.reset()


def _unique_sources(sources: list[SourceDescriptor]) -> list[SourceDescriptor]:
    """Drop repeated source ids, keeping the first descriptor."""
    seen: set[str] = set()
    unique = []
    for source in sources:
        key = str(source.id)
        if key not in seen:
            seen.add(key)
            unique.append(source)
    return unique
