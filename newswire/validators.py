"""
Item validation utilities: URL schemes, permissive date parsing, display formatting.
"""

import math
import re
from datetime import datetime, timedelta, timezone
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from dateutil.parser import parse as parse_datetime

ALLOWED_SCHEMES = {"http", "https"}

SUMMARY_MAX_LENGTH = 280

# Feeds still emit US zone abbreviations that dateutil won't resolve on its own
TZINFOS = {
    "EST": timezone(timedelta(hours=-5)),
    "EDT": timezone(timedelta(hours=-4)),
    "CST": timezone(timedelta(hours=-6)),
    "CDT": timezone(timedelta(hours=-5)),
    "MST": timezone(timedelta(hours=-7)),
    "MDT": timezone(timedelta(hours=-6)),
    "PST": timezone(timedelta(hours=-8)),
    "PDT": timezone(timedelta(hours=-7)),
    "GMT": timezone.utc,
    "UTC": timezone.utc,
    "Z": timezone.utc,
    "BST": timezone(timedelta(hours=1)),
}


def is_valid_url(url: str | None) -> bool:
    """
    Check that a link is an absolute http(s) URL.

    This is the boundary that keeps javascript:, data: and relative links
    out of rendered output.
    """
    if not url or not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme.lower() in ALLOWED_SCHEMES and bool(parsed.netloc)


def parse_date(value: str | None) -> datetime | None:
    """
    Parse a feed date string into an aware UTC datetime.

    Returns None if the value is empty or cannot be parsed. Naive values
    are assumed to be UTC.
    """
    if not value or not value.strip():
        return None
    try:
        parsed = parse_datetime(value.strip(), tzinfos=TZINFOS)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError, TypeError):
        return None


def round_half_up(value: float) -> int:
    """Round halves up: 62.5 -> 63."""
    return int(math.floor(value + 0.5))


def format_time(value: datetime) -> str:
    """Render a timestamp as local 24-hour HH:MM."""
    return value.astimezone().strftime("%H:%M")


def hour_key(value: datetime) -> str:
    """Local hour bucket, e.g. "14:00"."""
    return value.astimezone().strftime("%H:00")



def clean_summary(html: str | None, max_length: int = SUMMARY_MAX_LENGTH) -> str | None:
    """Strip markup from a description and truncate it for list views."""
    if not html:
        return None

    soup = BeautifulSoup(html, "html.parser")
    text = re.sub(r"\s+", " ", soup.get_text(separator=" ", strip=True)).strip()
    if not text:
        return None

    if len(text) > max_length:
        text = text[:max_length].rsplit(" ", 1)[0] + "..."
    return text
