"""
Pydantic models for API responses.
"""

from typing import TYPE_CHECKING

from pydantic import BaseModel

from .analytics import TrendingSnapshot
from .models import Article, FeedResult, HourlyAggregate, SourceDescriptor, TrendingTopic
from .sources import category_label

if TYPE_CHECKING:
    from .aggregator import FeedAggregator


# ─────────────────────────────────────────────────────────────
# Source Schemas
# ─────────────────────────────────────────────────────────────

class SourceResponse(BaseModel):
    """A configured feed source."""
    id: str
    name: str
    url: str
    category: str
    category_label: str
    topic_label: str | None = None

    @classmethod
    def from_source(cls, source: SourceDescriptor) -> "SourceResponse":
        return cls(
            id=str(source.id),
            name=source.name,
            url=source.url,
            category=source.category,
            category_label=category_label(source.category),
            topic_label=source.topic_label,
        )


# ─────────────────────────────────────────────────────────────
# Feed Schemas
# ─────────────────────────────────────────────────────────────

class ArticleResponse(BaseModel):
    """Article for list view."""
    id: str
    title: str
    source: str
    topic: str
    topics: list[str]
    time: str
    published_at: str
    url: str
    velocity: int
    category: str
    summary: str | None = None

    @classmethod
    def from_article(cls, article: Article) -> "ArticleResponse":
        return cls(
            id=article.id,
            title=article.title,
            source=article.source,
            topic=article.topic,
            topics=article.topics,
            time=article.time,
            published_at=article.published_at.isoformat(),
            url=article.url,
            velocity=article.velocity,
            category=article.category,
            summary=article.summary,
        )


class FeedResultResponse(BaseModel):
    """Merged articles plus per-source status and errors."""
    items: list[ArticleResponse]
    status: dict[str, str]
    errors: dict[str, str]

    @classmethod
    def from_result(cls, result: FeedResult) -> "FeedResultResponse":
        return cls(
            items=[ArticleResponse.from_article(a) for a in result.items],
            status={str(k): v.value for k, v in result.status.items()},
            errors={str(k): v for k, v in result.errors.items()},
        )


class LiveStatusResponse(BaseModel):
    """Per-source status as of the latest fetch, including sources still loading."""
    status: dict[str, str]
    errors: dict[str, str]
    article_count: int

    @classmethod
    def from_aggregator(cls, aggregator: "FeedAggregator") -> "LiveStatusResponse":
        last = aggregator.last_result
        return cls(
            status={str(k): v.value for k, v in aggregator.live_status.items()},
            errors={str(k): v for k, v in aggregator.live_errors.items()},
            article_count=len(last.items) if last else 0,
        )


class CacheStatsResponse(BaseModel):
    total: int
    valid: int
    expired: int


# ─────────────────────────────────────────────────────────────
# Analytics Schemas
# ─────────────────────────────────────────────────────────────

class HourCount(BaseModel):
    hour: str
    count: int


class TrendingTopicResponse(BaseModel):
    topic: str
    count: int
    velocity: float
    sources: list[str]
    hourly_data: list[HourCount]

    @classmethod
    def from_topic(cls, topic: TrendingTopic) -> "TrendingTopicResponse":
        return cls(
            topic=topic.topic,
            count=topic.count,
            velocity=topic.velocity,
            sources=topic.sources,
            hourly_data=[HourCount(hour=h, count=c) for h, c in topic.hourly_data],
        )


class HourlyAggregateResponse(BaseModel):
    hour: str
    count: int
    topics: dict[str, int]

    @classmethod
    def from_aggregate(cls, aggregate: HourlyAggregate) -> "HourlyAggregateResponse":
        return cls(hour=aggregate.hour, count=aggregate.count, topics=aggregate.topics)


class ChartPoint(BaseModel):
    name: str
    volume: int
    sentiment: int


class NarrativePoint(BaseModel):
    topic: str
    value: int


class SnapshotResponse(BaseModel):
    """Every analytics view in one response."""
    trending: list[TrendingTopicResponse]
    hourly: list[HourlyAggregateResponse]
    matrix: dict[str, dict[str, int]]
    chart_data: list[ChartPoint]
    narrative_data: list[NarrativePoint]
    top_topics: list[str]

    @classmethod
    def from_snapshot(cls, snapshot: TrendingSnapshot) -> "SnapshotResponse":
        return cls(
            trending=[TrendingTopicResponse.from_topic(t) for t in snapshot.trending],
            hourly=[HourlyAggregateResponse.from_aggregate(h) for h in snapshot.hourly],
            matrix=snapshot.matrix,
            chart_data=[ChartPoint(**point) for point in snapshot.chart_data],
            narrative_data=[NarrativePoint(**point) for point in snapshot.narrative_data],
            top_topics=snapshot.top_topics,
        )
