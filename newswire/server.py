"""
Newswire API Server

FastAPI application providing endpoints for:
- Aggregated feed (fetch, refresh, per-source cache invalidation)
- Sources (list, OPML export)
- Search over the current feed
- Trending-topic analytics
- Proxy health and cache maintenance
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import __version__
from .aggregator import FeedAggregator
from .cache import FeedCache
from .config import Config, config, state
from .fetcher import SourceFetcher
from .models import SourceDescriptor
from .opml import load_sources
from .proxies import ProxyRouter
from .rate_limit import setup_rate_limiting
from .routes import analytics_router, feeds_router, misc_router
from .sources import LIVE_FEEDS

logger = logging.getLogger(__name__)


def build_aggregator(settings: Config = config) -> FeedAggregator:
    """Wire cache, proxy router and fetcher into one aggregator."""
    router = ProxyRouter(failure_threshold=settings.PROXY_FAILURE_THRESHOLD)
    fetcher = SourceFetcher(
        router,
        timeout=settings.FEED_TIMEOUT_SECONDS,
        error_max_length=settings.ERROR_MESSAGE_MAX_LENGTH,
    )
    cache = FeedCache(default_ttl_minutes=settings.FEED_CACHE_TTL_MINUTES)
    return FeedAggregator(
        cache=cache,
        router=router,
        fetcher=fetcher,
        ttl_minutes=settings.FEED_CACHE_TTL_MINUTES,
    )


def load_configured_sources(settings: Config = config) -> list[SourceDescriptor]:
    """Sources from the configured OPML file, or the built-in list."""
    if settings.SOURCES_OPML:
        sources = load_sources(settings.SOURCES_OPML)
        logger.info(f"Loaded {len(sources)} sources from {settings.SOURCES_OPML}")
        return sources
    return list(LIVE_FEEDS)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup application resources."""
    # Startup - skip if already initialized (e.g., by tests)
    if state.aggregator is None:
        state.aggregator = build_aggregator()
    if state.sources is None:
        state.sources = load_configured_sources()

    state.aggregator.cache.start_sweeper(config.CACHE_SWEEP_INTERVAL_SECONDS)
    logger.info(
        f"Aggregator ready: {len(state.sources)} sources, "
        f"{len(state.aggregator.router)} proxies"
    )

    yield

    # Shutdown
    await state.aggregator.cache.stop_sweeper()


app = FastAPI(
    title="Newswire API",
    version=__version__,
    lifespan=lifespan
)

setup_rate_limiting(app)

# Include routers
app.include_router(misc_router)
app.include_router(feeds_router)
app.include_router(analytics_router)
