"""
Configuration and application state management.
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv
from fastapi import HTTPException

if TYPE_CHECKING:
    from .aggregator import FeedAggregator
    from .models import Article, SourceDescriptor

# Load environment variables
load_dotenv()


def _parse_path(value: str | None) -> Path | None:
    return Path(value) if value else None


class Config:
    """Application configuration from environment."""
    # Feed fetching
    FEED_TIMEOUT_SECONDS: float = float(os.getenv("FEED_TIMEOUT_SECONDS", "10"))
    FEED_CACHE_TTL_MINUTES: float = float(os.getenv("FEED_CACHE_TTL_MINUTES", "15"))
    CACHE_SWEEP_INTERVAL_SECONDS: float = float(os.getenv("CACHE_SWEEP_INTERVAL_SECONDS", "300"))
    PROXY_FAILURE_THRESHOLD: int = int(os.getenv("PROXY_FAILURE_THRESHOLD", "3"))
    ERROR_MESSAGE_MAX_LENGTH: int = int(os.getenv("ERROR_MESSAGE_MAX_LENGTH", "50"))

    # Optional OPML file replacing the built-in source list
    SOURCES_OPML: Path | None = _parse_path(os.getenv("SOURCES_OPML"))

    # API server
    PORT: int = int(os.getenv("PORT", "5005"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    RATE_LIMIT_PER_MINUTE: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))
    REFRESH_RATE_LIMIT_PER_MINUTE: int = int(os.getenv("REFRESH_RATE_LIMIT_PER_MINUTE", "6"))


config = Config()


class AppState:
    """Shared application state, populated by the server lifespan."""
    aggregator: "FeedAggregator | None" = None
    sources: "list[SourceDescriptor] | None" = None


state = AppState()


def get_aggregator() -> "FeedAggregator":
    """Dependency to get the feed aggregator."""
    if not state.aggregator:
        raise HTTPException(status_code=500, detail="Feed aggregator not initialized")
    return state.aggregator


def get_sources() -> "list[SourceDescriptor]":
    """Dependency to get the configured sources."""
    if state.sources is None:
        raise HTTPException(status_code=500, detail="Sources not initialized")
    return state.sources


async def get_current_articles() -> "list[Article]":
    """Dependency returning the current merged feed, served from cache when fresh."""
    result = await get_aggregator().fetch_feeds(get_sources())
    return result.items
