"""
Tests for trending-topic analytics.
"""

from datetime import datetime, timedelta, timezone

from newswire.analytics import (
    ALL_TOPICS,
    GENERAL_TOPIC,
    calculate_sentiment_score,
    calculate_velocity,
    compute_hourly_aggregates,
    compute_snapshot,
    compute_source_topic_matrix,
    compute_trending_topics,
    extract_topics,
    get_chart_data,
    get_narrative_data,
    top_topics,
)
from newswire.models import HourlyAggregate
from newswire.validators import hour_key

from .helpers import make_article

NOW = datetime(2026, 2, 13, 12, 30, tzinfo=timezone.utc)


def ago(minutes: float) -> datetime:
    return NOW - timedelta(minutes=minutes)


def sample_articles():
    return [
        make_article("Inflation hits record", ago(10), source="Source A", article_id="a-0"),
        make_article("Inflation fears grow", ago(15), source="Source B", article_id="b-0"),
        make_article("Local bakery opens", ago(5), source="Source A", article_id="a-1"),
        make_article("War talks stall at the front", ago(20), source="Source C", article_id="c-0"),
        make_article("War talks stall once more", ago(90), source="Source C", article_id="c-1"),
    ]


class TestExtractTopics:
    """Tests for keyword topic matching."""

    def test_single_topic(self):
        assert extract_topics("FBI subpoena issued") == ["Deep State"]

    def test_multiple_topics(self):
        assert extract_topics("Trump tariff war") == ["Foreign Policy", "Economy", "Elections"]

    def test_case_insensitive(self):
        assert extract_topics("BITCOIN RALLIES") == ["Economy"]

    def test_general_fallback(self):
        assert extract_topics("Local bakery opens") == [GENERAL_TOPIC]

    def test_known_topics(self):
        assert "Religion" in ALL_TOPICS
        assert GENERAL_TOPIC not in ALL_TOPICS


class TestCalculateVelocity:
    """Tests for recent-vs-previous hour weighting."""

    def test_nothing_in_previous_hour(self):
        assert calculate_velocity([ago(5), ago(10), ago(50)], NOW) == 6

    def test_accelerating(self):
        assert calculate_velocity([ago(5), ago(10), ago(70)], NOW) == 4

    def test_decelerating(self):
        assert calculate_velocity([ago(5), ago(70), ago(100)], NOW) == 0.5

    def test_old_activity_only(self):
        assert calculate_velocity([ago(200), ago(300)], NOW) == 0

    def test_empty(self):
        assert calculate_velocity([], NOW) == 0


class TestTrendingTopics:
    """Tests for topic grouping and ranking."""

    def test_sorted_by_velocity(self):
        trending = compute_trending_topics(sample_articles(), NOW)
        assert [t.topic for t in trending] == ["Economy", "General", "Foreign Policy"]
        velocities = [t.velocity for t in trending]
        assert velocities == sorted(velocities, reverse=True)

    def test_counts_and_sources(self):
        trending = {t.topic: t for t in compute_trending_topics(sample_articles(), NOW)}
        economy = trending["Economy"]
        assert economy.count == 2
        assert economy.velocity == 4
        assert economy.sources == ["Source A", "Source B"]
        assert trending["Foreign Policy"].velocity == 1

    def test_hourly_data(self):
        trending = {t.topic: t for t in compute_trending_topics(sample_articles(), NOW)}
        foreign = trending["Foreign Policy"]
        assert sum(count for _, count in foreign.hourly_data) == 2
        assert foreign.hourly_data == sorted(foreign.hourly_data)

    def test_sources_are_unique(self):
        articles = [make_article("War resumes", ago(m), source="Source A") for m in (1, 2, 3)]
        trending = compute_trending_topics(articles, NOW)
        assert trending[0].sources == ["Source A"]
        assert trending[0].count == 3

    def test_empty(self):
        assert compute_trending_topics([], NOW) == []


class TestAggregates:
    """Tests for hourly buckets, the source/topic matrix and derived chart data."""

    def test_hourly_aggregates(self):
        articles = [
            make_article("Inflation hits record", ago(10)),
            make_article("FBI subpoena issued", ago(12)),
            make_article("Local bakery opens", ago(190)),
        ]
        aggregates = compute_hourly_aggregates(articles)
        assert [a.hour for a in aggregates] == sorted({hour_key(a.published_at) for a in articles})
        assert sum(a.count for a in aggregates) == 3
        recent = next(a for a in aggregates if a.hour == hour_key(ago(10)))
        assert recent.topics["Economy"] == 1

    def test_source_topic_matrix(self):
        matrix = compute_source_topic_matrix(sample_articles())
        assert matrix["Source A"] == {"Economy": 1, "General": 1}
        assert matrix["Source C"] == {"Foreign Policy": 2}

    def test_sentiment_score(self):
        assert calculate_sentiment_score({}) == 50
        assert calculate_sentiment_score({"Economy": 4}) == 100
        assert calculate_sentiment_score({"Deep State": 1, "Economy": 3}) == 75
        assert calculate_sentiment_score({"Culture War": 2, "Tech/Censorship": 1}) == 0

    def test_sentiment_rounds_halves_up(self):
        assert calculate_sentiment_score({"Deep State": 3, "Economy": 5}) == 63

    def test_chart_data(self):
        aggregates = [HourlyAggregate(hour="10:00", count=4, topics={"Deep State": 1, "Economy": 3})]
        assert get_chart_data(aggregates) == [{"name": "10:00", "volume": 4, "sentiment": 75}]

    def test_narrative_data(self):
        trending = compute_trending_topics(sample_articles(), NOW)
        assert get_narrative_data(trending, 2) == [
            {"topic": "Economy", "value": 2},
            {"topic": "General", "value": 1},
        ]

    def test_top_topics(self):
        trending = compute_trending_topics(sample_articles(), NOW)
        assert top_topics(trending, 1) == ["Economy"]


class TestSnapshot:
    def test_snapshot(self):
        snapshot = compute_snapshot(sample_articles(), NOW)
        assert snapshot.top_topics == ["Economy", "General", "Foreign Policy"]
        assert len(snapshot.narrative_data) == 3
        assert sum(point["volume"] for point in snapshot.chart_data) == 5
        assert set(snapshot.matrix) == {"Source A", "Source B", "Source C"}

    def test_empty_snapshot(self):
        snapshot = compute_snapshot([], NOW)
        assert snapshot.trending == []
        assert snapshot.chart_data == []
        assert snapshot.matrix == {}
