"""
Miscellaneous routes: health check, search, proxy health, cache stats.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from .. import __version__
from ..aggregator import FeedAggregator
from ..config import get_aggregator, get_current_articles, state
from ..exceptions import bad_request
from ..models import Article
from ..schemas import ArticleResponse, CacheStatsResponse
from ..search import SearchFilters, filter_articles

router = APIRouter(tags=["misc"])


# ─────────────────────────────────────────────────────────────
# Health Check
# ─────────────────────────────────────────────────────────────

@router.get("/status")
async def health_check() -> dict:
    """API health check."""
    return {
        "status": "ok",
        "version": __version__,
        "source_count": len(state.sources or []),
    }


# ─────────────────────────────────────────────────────────────
# Search
# ─────────────────────────────────────────────────────────────

@router.get("/search")
async def search(
    articles: Annotated[list[Article], Depends(get_current_articles)],
    q: str = "",
    topics: Annotated[list[str] | None, Query()] = None,
    categories: Annotated[list[str] | None, Query()] = None,
    date_range: str = Query(default="all", alias="range"),
    min_velocity: int = Query(default=0, ge=0, le=100),
) -> list[ArticleResponse]:
    """Filter the current feed by title text, topic, category, age and freshness."""
    try:
        filters = SearchFilters(
            query=q.strip(),
            topics=topics or [],
            categories=categories or [],
            date_range=date_range,
            velocity_threshold=min_velocity,
        )
    except ValueError as e:
        raise bad_request(str(e))

    return [ArticleResponse.from_article(a) for a in filter_articles(articles, filters)]


# ─────────────────────────────────────────────────────────────
# Maintenance
# ─────────────────────────────────────────────────────────────

@router.get("/proxies")
async def proxy_health(
    aggregator: Annotated[FeedAggregator, Depends(get_aggregator)]
) -> dict[str, int]:
    """Recent failure count per proxy."""
    return aggregator.router.health()


@router.post("/proxies/reset")
async def reset_proxies(
    aggregator: Annotated[FeedAggregator, Depends(get_aggregator)]
) -> dict:
    aggregator.reset_proxy_health()
    return {"success": True}


@router.get("/cache/stats")
async def cache_stats(
    aggregator: Annotated[FeedAggregator, Depends(get_aggregator)]
) -> CacheStatsResponse:
    return CacheStatsResponse(**aggregator.cache.stats())
