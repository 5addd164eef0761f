"""
Analytics routes: trending topics, hourly volume, source/topic heatmap.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from ..analytics import (
    compute_hourly_aggregates,
    compute_snapshot,
    compute_source_topic_matrix,
    compute_trending_topics,
    get_chart_data,
    get_narrative_data,
)
from ..config import get_current_articles
from ..models import Article
from ..schemas import (
    ChartPoint,
    HourlyAggregateResponse,
    NarrativePoint,
    SnapshotResponse,
    TrendingTopicResponse,
)

router = APIRouter(prefix="/analytics", tags=["analytics"])

Articles = Annotated[list[Article], Depends(get_current_articles)]


@router.get("")
async def snapshot(articles: Articles) -> SnapshotResponse:
    """All analytics views for the current feed."""
    return SnapshotResponse.from_snapshot(compute_snapshot(articles))


@router.get("/trending")
async def trending(
    articles: Articles,
    limit: int | None = Query(default=None, ge=1, le=100),
) -> list[TrendingTopicResponse]:
    topics = compute_trending_topics(articles)
    if limit is not None:
        topics = topics[:limit]
    return [TrendingTopicResponse.from_topic(t) for t in topics]


@router.get("/hourly")
async def hourly(articles: Articles) -> list[HourlyAggregateResponse]:
    return [HourlyAggregateResponse.from_aggregate(h) for h in compute_hourly_aggregates(articles)]


@router.get("/matrix")
async def matrix(articles: Articles) -> dict[str, dict[str, int]]:
    return compute_source_topic_matrix(articles)


@router.get("/chart")
async def chart(articles: Articles) -> list[ChartPoint]:
    """Volume and sentiment proxy per hour."""
    return [ChartPoint(**point) for point in get_chart_data(compute_hourly_aggregates(articles))]


@router.get("/narrative")
async def narrative(
    articles: Articles,
    limit: int = Query(default=5, ge=1, le=50),
) -> list[NarrativePoint]:
    """Top trending topics by article count."""
    points = get_narrative_data(compute_trending_topics(articles), limit)
    return [NarrativePoint(**point) for point in points]
