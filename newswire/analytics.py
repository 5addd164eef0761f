"""
Analytics - Trending topics and aggregate views over the article stream.

Pure functions over lists of articles; no I/O. Topics come from keyword
matching against article titles, so an article may land in several topics.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from .models import HourlyAggregate, TrendingTopic
from .validators import hour_key, round_half_up

if TYPE_CHECKING:
    from .models import Article


# Matched as substrings of the lower-cased title
TOPIC_KEYWORDS: dict[str, list[str]] = {
    "Foreign Policy": [
        "war", "ukraine", "russia", "israel", "china", "nato", "intervention",
        "troops", "military", "ceasefire", "peace", "treaty", "diplomacy",
        "sanctions", "iran", "syria", "yemen", "taiwan",
    ],
    "Economy": [
        "inflation", "fed", "federal reserve", "dollar", "debt", "economy",
        "tariff", "trade", "gdp", "recession", "jobs", "unemployment", "stock",
        "market", "interest rate", "banking", "crypto", "bitcoin",
    ],
    "Immigration": [
        "border", "immigration", "migrant", "deportation", "visa", "asylum",
        "caravan", "illegal", "ice", "cbp", "wall",
    ],
    "Culture War": [
        "woke", "dei", "trans", "lgbtq", "cancel", "censor", "free speech",
        "first amendment", "pronouns", "gender", "disney", "hollywood", "academia",
    ],
    "Deep State": [
        "fbi", "cia", "intelligence", "surveillance", "whistleblower",
        "classified", "leaked", "doj", "justice department", "raid", "subpoena",
        "epstein",
    ],
    "Elections": [
        "trump", "biden", "vote", "election", "poll", "campaign", "2024",
        "primary", "ballot", "swing state", "electoral", "republican",
        "democrat", "gop", "rnc", "dnc",
    ],
    "Tech/Censorship": [
        "big tech", "twitter", "facebook", "google", "youtube", "deplatform",
        "shadowban", "algorithm", "ai", "elon", "musk", "zuckerberg",
    ],
    "Religion": [
        "christian", "church", "faith", "god", "bible", "pope", "catholic",
        "evangelical", "prayer", "religious",
    ],
}

ALL_TOPICS = list(TOPIC_KEYWORDS)

GENERAL_TOPIC = "General"

# Topics that pull the sentiment proxy down
CRITICAL_TOPICS = ("Deep State", "Culture War", "Tech/Censorship")

NEUTRAL_SENTIMENT = 50


def extract_topics(title: str) -> list[str]:
    """Topics whose keywords appear in the title, or ["General"]."""
    lower_title = title.lower()
    matched = [
        topic for topic, keywords in TOPIC_KEYWORDS.items()
        if any(keyword in lower_title for keyword in keywords)
    ]
    return matched or [GENERAL_TOPIC]


def calculate_velocity(timestamps: list[datetime], now: datetime | None = None) -> float:
    """
    Weight activity in the last hour against the hour before it.

    With nothing in the previous hour, velocity is twice the recent count;
    otherwise it is (recent / previous) * recent.
    """
    now = now or datetime.now(timezone.utc)
    one_hour_ago = now - timedelta(hours=1)
    two_hours_ago = now - timedelta(hours=2)

    recent = sum(1 for t in timestamps if t >= one_hour_ago)
    previous = sum(1 for t in timestamps if two_hours_ago <= t < one_hour_ago)

    if previous == 0:
        return recent * 2
    return (recent / previous) * recent


def compute_trending_topics(
    articles: list["Article"],
    now: datetime | None = None,
) -> list[TrendingTopic]:
    """Group articles by topic and rank topics by velocity, highest first."""
    now = now or datetime.now(timezone.utc)
    counts: dict[str, int] = {}
    sources: dict[str, dict[str, None]] = {}
    timestamps: dict[str, list[datetime]] = {}
    hourly: dict[str, dict[str, int]] = {}

    for article in articles:
        bucket = hour_key(article.published_at)
        for topic in extract_topics(article.title):
            counts[topic] = counts.get(topic, 0) + 1
            sources.setdefault(topic, {})[article.source] = None
            timestamps.setdefault(topic, []).append(article.published_at)
            topic_hours = hourly.setdefault(topic, {})
            topic_hours[bucket] = topic_hours.get(bucket, 0) + 1

    trending = [
        TrendingTopic(
            topic=topic,
            count=count,
            velocity=calculate_velocity(timestamps[topic], now),
            sources=list(sources[topic]),
            hourly_data=sorted(hourly[topic].items()),
        )
        for topic, count in counts.items()
    ]
    trending.sort(key=lambda t: t.velocity, reverse=True)
    return trending


def compute_hourly_aggregates(articles: list["Article"]) -> list[HourlyAggregate]:
    """Per-hour article counts with a topic breakdown, ordered by hour."""
    buckets: dict[str, HourlyAggregate] = {}

    for article in articles:
        key = hour_key(article.published_at)
        aggregate = buckets.setdefault(key, HourlyAggregate(hour=key, count=0, topics={}))
        aggregate.count += 1
        for topic in extract_topics(article.title):
            aggregate.topics[topic] = aggregate.topics.get(topic, 0) + 1

    return [buckets[key] for key in sorted(buckets)]


def compute_source_topic_matrix(articles: list["Article"]) -> dict[str, dict[str, int]]:
    """matrix[source][topic] = number of articles."""
    matrix: dict[str, dict[str, int]] = {}
    for article in articles:
        row = matrix.setdefault(article.source, {})
        for topic in extract_topics(article.title):
            row[topic] = row.get(topic, 0) + 1
    return matrix


def calculate_sentiment_score(topics: dict[str, int]) -> int:
    """
    Sentiment proxy (0-100) for one bucket's topic counts.

    The larger the share of critical topics, the lower the score. An empty
    bucket is neutral.
    """
    total = sum(topics.values())
    if total == 0:
        return NEUTRAL_SENTIMENT

    critical = sum(topics.get(topic, 0) for topic in CRITICAL_TOPICS)
    return round_half_up((1 - critical / total) * 100)


def get_chart_data(hourly_aggregates: list[HourlyAggregate]) -> list[dict]:
    """Volume and sentiment per hour for the timeline chart."""
    return [
        {
            "name": aggregate.hour,
            "volume": aggregate.count,
            "sentiment": calculate_sentiment_score(aggregate.topics),
        }
        for aggregate in hourly_aggregates
    ]


def get_narrative_data(trending: list[TrendingTopic], limit: int = 5) -> list[dict]:
    """Top trending topics as {topic, value} pairs."""
    return [{"topic": t.topic, "value": t.count} for t in trending[:limit]]


def top_topics(trending: list[TrendingTopic], limit: int = 10) -> list[str]:
    return [t.topic for t in trending[:limit]]


@dataclass
class TrendingSnapshot:
    """Every derived view of one article list."""
    trending: list[TrendingTopic] = field(default_factory=list)
    hourly: list[HourlyAggregate] = field(default_factory=list)
    matrix: dict[str, dict[str, int]] = field(default_factory=dict)
    chart_data: list[dict] = field(default_factory=list)
    narrative_data: list[dict] = field(default_factory=list)
    top_topics: list[str] = field(default_factory=list)


def compute_snapshot(
    articles: list["Article"],
    now: datetime | None = None,
) -> TrendingSnapshot:
    """Compute all analytics views at once."""
    if not articles:
        return TrendingSnapshot()

    trending = compute_trending_topics(articles, now)
    hourly = compute_hourly_aggregates(articles)
    return TrendingSnapshot(
        trending=trending,
        hourly=hourly,
        matrix=compute_source_topic_matrix(articles),
        chart_data=get_chart_data(hourly),
        narrative_data=get_narrative_data(trending, 5),
        top_topics=top_topics(trending, 10),
    )
