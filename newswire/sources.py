"""
Default feed sources and the category table they refer to.
"""

from .models import SourceDescriptor

SOURCE_CATEGORIES: dict[str, str] = {
    "INTELLECTUALS": "Paleoconservative Vanguard",
    "BROADCAST": "MAGA Broadcast Network",
    "RADICALS": "Dissident Right / Groypers",
    "LIBERTARIANS": "Libertarian / Anti-War",
    "THEOLOGIANS": "Theological Dissent",
    "INFRASTRUCTURE": "Digital Infrastructure",
    "UNCATEGORIZED": "Uncategorized",
}

LIVE_FEEDS: list[SourceDescriptor] = [
    SourceDescriptor(
        id="tac",
        name="The American Conservative",
        url="https://www.theamericanconservative.com/feed/",
        category="INTELLECTUALS",
        topic_label="Politics",
    ),
    SourceDescriptor(
        id="breitbart",
        name="Breitbart News",
        url="http://feeds.feedburner.com/breitbart",
        category="BROADCAST",
        topic_label="Culture War",
    ),
    SourceDescriptor(
        id="antiwar",
        name="Antiwar.com",
        url="https://www.antiwar.com/blog/feed/",
        category="LIBERTARIANS",
        topic_label="Foreign Policy",
    ),
    SourceDescriptor(
        id="lew",
        name="LewRockwell.com",
        url="https://www.lewrockwell.com/feed/",
        category="LIBERTARIANS",
        topic_label="Economics",
    ),
    SourceDescriptor(
        id="zerohedge",
        name="ZeroHedge",
        url="http://feeds.feedburner.com/zerohedge/feed",
        category="BROADCAST",
        topic_label="Finance",
    ),
    SourceDescriptor(
        id="canon",
        name="Canon Press (Blog)",
        url="https://dougwils.com/feed",
        category="THEOLOGIANS",
        topic_label="Religion",
    ),
]


def category_label(category: str) -> str:
    return SOURCE_CATEGORIES.get(category, category)


def find_source(sources: list[SourceDescriptor], source_id: str) -> SourceDescriptor | None:
    """Look up a source by id; ids are compared as strings (path parameters)."""
    for source in sources:
        if str(source.id) == str(source_id):
            return source
    return None
