"""
Search - Filter the article stream by text, topic, category, age and freshness.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from .analytics import extract_topics
from .models import Article

DATE_RANGE_HOURS: dict[str, float | None] = {
    "1h": 1,
    "6h": 6,
    "24h": 24,
    "all": None,
}


@dataclass
class SearchFilters:
    query: str = ""
    topics: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    date_range: str = "all"
    velocity_threshold: int = 0

    def __post_init__(self):
        if self.date_range not in DATE_RANGE_HOURS:
            raise ValueError(
                f"Unknown date range '{self.date_range}' "
                f"(expected one of {', '.join(DATE_RANGE_HOURS)})"
            )


def _cutoff(date_range: str, now: datetime) -> datetime | None:
    hours = DATE_RANGE_HOURS[date_range]
    if hours is None:
        return None
    return now - timedelta(hours=hours)


def matches(article: Article, filters: SearchFilters, cutoff: datetime | None = None) -> bool:
    if filters.query and filters.query.lower() not in article.title.lower():
        return False

    if filters.topics:
        article_topics = article.topics or extract_topics(article.title)
        if not any(topic in article_topics for topic in filters.topics):
            return False

    if filters.categories and article.category not in filters.categories:
        return False

    if cutoff is not None and article.published_at < cutoff:
        return False

    return article.velocity >= filters.velocity_threshold


def filter_articles(
    articles: list[Article],
    filters: SearchFilters,
    now: datetime | None = None,
) -> list[Article]:
    """Articles matching every active filter, in their original order."""
    cutoff = _cutoff(filters.date_range, now or datetime.now(timezone.utc))
    return [a for a in articles if matches(a, filters, cutoff)]
