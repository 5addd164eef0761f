"""
Data models - dataclasses for sources, articles and fetch results.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class FeedStatus(str, Enum):
    OK = "ok"
    ERROR = "error"
    LOADING = "loading"


@dataclass(frozen=True)
class SourceDescriptor:
    """Static configuration for one feed origin."""
    id: str | int
    name: str
    url: str
    category: str
    topic_label: str | None = None


@dataclass
class RawItem:
    """Loosely-typed item pulled out of a proxy response."""
    title: str | None = None
    link: str | None = None
    pub_date: str | None = None
    description: str | None = None
    content: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "RawItem":
        """Build from a JSON item, tolerating missing or non-string fields."""
        def text(key: str) -> str | None:
            value = data.get(key)
            return value if isinstance(value, str) else None

        return cls(
            title=text("title"),
            link=text("link"),
            pub_date=text("pubDate"),
            description=text("description"),
            content=text("content"),
        )


@dataclass
class ParsedResponse:
    status: str
    items: list[RawItem] = field(default_factory=list)
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


@dataclass
class Article:
    """Canonical normalized article."""
    id: str
    title: str
    source: str
    topic: str
    time: str
    published_at: datetime
    url: str
    velocity: int
    category: str
    topics: list[str] = field(default_factory=list)
    summary: str | None = None


@dataclass
class SourceResult:
    """Outcome of fetching one source."""
    source_id: str | int
    status: FeedStatus
    articles: list[Article] = field(default_factory=list)
    error: str | None = None


@dataclass
class FeedResult:
    """Aggregate output of one fetch cycle."""
    items: list[Article]
    status: dict[str | int, FeedStatus]
    errors: dict[str | int, str]


@dataclass
class TrendingTopic:
    topic: str
    count: int
    velocity: float
    sources: list[str]
    hourly_data: list[tuple[str, int]]


@dataclass
class HourlyAggregate:
    hour: str
    count: int
    topics: dict[str, int]
