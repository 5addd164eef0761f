"""
Feed routes: sources, aggregated feed, refresh and cache maintenance.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from ..aggregator import FeedAggregator
from ..config import get_aggregator, get_sources
from ..exceptions import require_source
from ..models import SourceDescriptor
from ..opml import generate_opml
from ..rate_limit import get_refresh_limit, limiter
from ..schemas import FeedResultResponse, LiveStatusResponse, SourceResponse
from ..sources import find_source

router = APIRouter(tags=["feeds"])


def _select(sources: list[SourceDescriptor], category: str | None) -> list[SourceDescriptor]:
    if not category:
        return sources
    return [s for s in sources if s.category.lower() == category.lower()]


# ─────────────────────────────────────────────────────────────
# Sources
# ─────────────────────────────────────────────────────────────

@router.get("/sources")
async def list_sources(
    sources: Annotated[list[SourceDescriptor], Depends(get_sources)],
    category: str | None = None,
) -> list[SourceResponse]:
    """List configured sources."""
    return [SourceResponse.from_source(s) for s in _select(sources, category)]


@router.get("/sources.opml")
async def export_sources(
    sources: Annotated[list[SourceDescriptor], Depends(get_sources)],
) -> Response:
    """Export configured sources as OPML."""
    return Response(content=generate_opml(sources), media_type="text/x-opml")


# ─────────────────────────────────────────────────────────────
# Feed
# ─────────────────────────────────────────────────────────────

@router.get("/feeds")
async def get_feeds(
    aggregator: Annotated[FeedAggregator, Depends(get_aggregator)],
    sources: Annotated[list[SourceDescriptor], Depends(get_sources)],
    category: str | None = None,
) -> FeedResultResponse:
    """Merged articles from all (or one category of) sources, newest first."""
    result = await aggregator.fetch_feeds(_select(sources, category))
    return FeedResultResponse.from_result(result)


@router.get("/feeds/status")
async def feed_status(
    aggregator: Annotated[FeedAggregator, Depends(get_aggregator)]
) -> LiveStatusResponse:
    """Live per-source status; sources mid-fetch report loading."""
    return LiveStatusResponse.from_aggregator(aggregator)


@router.post("/feeds/refresh")
@limiter.limit(get_refresh_limit)
async def refresh_feeds(
    request: Request,
    aggregator: Annotated[FeedAggregator, Depends(get_aggregator)],
    sources: Annotated[list[SourceDescriptor], Depends(get_sources)],
) -> FeedResultResponse:
    """Bypass every cache and fetch all sources again."""
    aggregator.clear_cache()
    result = await aggregator.fetch_feeds(sources)
    return FeedResultResponse.from_result(result)


@router.delete("/feeds/{source_id}/cache")
async def clear_source_cache(
    source_id: str,
    aggregator: Annotated[FeedAggregator, Depends(get_aggregator)],
    sources: Annotated[list[SourceDescriptor], Depends(get_sources)],
) -> dict:
    """Drop one source's cached articles."""
    source = require_source(find_source(sources, source_id))
    aggregator.clear_source_cache(source.id)
    return {"success": True}
