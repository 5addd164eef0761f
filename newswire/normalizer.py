"""
Normalizer - Validate raw feed items and convert them into Articles.

Items that fail validation are dropped (None), never raised as errors.
"""

import logging
from datetime import datetime, timezone

from .analytics import extract_topics
from .models import Article, RawItem, SourceDescriptor
from .validators import clean_summary, format_time, is_valid_url, parse_date, round_half_up

logger = logging.getLogger(__name__)

DEFAULT_TOPIC = "General"


def calculate_freshness_score(published_at: datetime, now: datetime | None = None) -> int:
    """
    Freshness score (0-100) from article age.

    Piecewise-linear and non-increasing with age:
        < 1h     100 -> 90
        1-3h      89 -> 70
        3-6h      69 -> 50
        6-12h     49 -> 30
        12-24h    29 -> 10
        > 24h      9 -> 0, losing 9 points per day
    """
    now = now or datetime.now(timezone.utc)
    age_hours = max(0.0, (now - published_at).total_seconds() / 3600)

    if age_hours < 1:
        score = 90 + (1 - age_hours) * 10
    elif age_hours < 3:
        score = 89 - ((age_hours - 1) / 2) * 19
    elif age_hours < 6:
        score = 69 - ((age_hours - 3) / 3) * 19
    elif age_hours < 12:
        score = 49 - ((age_hours - 6) / 6) * 19
    elif age_hours < 24:
        score = 29 - ((age_hours - 12) / 12) * 19
    else:
        score = 9 - (age_hours - 24) / 24 * 9

    return max(0, min(100, round_half_up(score)))


def normalize_item(
    item: RawItem,
    source: SourceDescriptor,
    index: int,
    now: datetime | None = None,
) -> Article | None:
    """
    Convert one raw item into an Article, or None if it should be dropped.

    Args:
        item: Raw item from the response parser
        source: The source the item came from
        index: Position of the item within its batch (used for the id)
        now: Reference time for the freshness score

    Returns:
        Article, or None for items with a missing field, bad date or bad URL
    """
    title = (item.title or "").strip()
    link = (item.link or "").strip()
    if not title or not link or not item.pub_date:
        logger.debug(f"{source.name}: dropping item with missing fields")
        return None

    published_at = parse_date(item.pub_date)
    if published_at is None:
        logger.debug(f"{source.name}: invalid date - {item.pub_date}")
        return None

    if not is_valid_url(link):
        logger.debug(f"{source.name}: invalid URL - {link}")
        return None

    try:
        local_time = format_time(published_at)
    except (OverflowError, ValueError):
        logger.debug(f"{source.name}: date out of local range - {item.pub_date}")
        return None

    return Article(
        id=f"{source.id}-{index}",
        title=title,
        source=source.name,
        topic=source.topic_label or DEFAULT_TOPIC,
        time=local_time,
        published_at=published_at,
        url=link,
        velocity=calculate_freshness_score(published_at, now),
        category=source.category,
        topics=extract_topics(title),
        summary=clean_summary(item.description or item.content),
    )


def normalize_items(
    items: list[RawItem],
    source: SourceDescriptor,
    now: datetime | None = None,
) -> list[Article]:
    """Normalize a batch, keeping only valid articles."""
    now = now or datetime.now(timezone.utc)
    articles = []
    for index, item in enumerate(items):
        article = normalize_item(item, source, index, now)
        if article is not None:
            articles.append(article)
    return articles
