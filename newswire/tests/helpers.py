"""
Shared test data and fakes.
"""

import json
from datetime import datetime, timedelta, timezone

from newswire.analytics import extract_topics
from newswire.fetcher import HttpResponse
from newswire.models import Article
from newswire.parser import JSON_SHAPE
from newswire.proxies import ProxyConfig


SAMPLE_RSS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:dc="http://purl.org/dc/elements/1.1/"
     xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Test Feed</title>
    <link>https://example.com</link>
    <description>A test RSS feed</description>
    <item>
      <title><![CDATA[Markets & Trade Talks Resume]]></title>
      <link>https://example.com/article-1</link>
      <description><![CDATA[<p>First <b>article</b> summary</p>]]></description>
      <content:encoded><![CDATA[<p>Full body of the first article</p>]]></content:encoded>
      <pubDate>Fri, 13 Feb 2026 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Second Article</title>
      <link>https://example.com/article-2</link>
      <description>Description of the second article</description>
      <dc:date>2026-02-13T09:00:00Z</dc:date>
    </item>
  </channel>
</rss>"""


def minutes_ago(minutes: float) -> str:
    """ISO 8601 timestamp `minutes` before now."""
    return (datetime.now(timezone.utc) - timedelta(minutes=minutes)).isoformat()


def json_body(items: list[dict], status: str = "ok", message: str | None = None) -> str:
    payload = {"status": status, "items": items}
    if message is not None:
        payload["message"] = message
    return json.dumps(payload)


def make_item(title: str, minutes: float = 5, link: str = "https://example.com/a") -> dict:
    return {"title": title, "link": link, "pubDate": minutes_ago(minutes)}


def make_article(
    title: str,
    published_at: datetime,
    source: str = "Source A",
    category: str = "NEWS",
    velocity: int = 50,
    article_id: str = "a-0",
) -> Article:
    return Article(
        id=article_id,
        title=title,
        source=source,
        topic="General",
        time=published_at.strftime("%H:%M"),
        published_at=published_at,
        url="https://example.com/" + article_id,
        velocity=velocity,
        category=category,
        topics=extract_topics(title),
    )


class FakeTransport:
    """
    Async stand-in for the HTTP layer.

    `handler(url)` returns an HttpResponse (or an awaitable of one) or
    raises; every requested URL is recorded in `calls`.
    """

    def __init__(self, handler):
        self.handler = handler
        self.calls: list[str] = []

    async def __call__(self, url: str) -> HttpResponse:
        self.calls.append(url)
        result = self.handler(url)
        if hasattr(result, "__await__"):
            result = await result
        return result


def build_proxies() -> list[ProxyConfig]:
    return [
        ProxyConfig(name="p1", url_template="https://p1.test/?u={url}", shape=JSON_SHAPE),
        ProxyConfig(name="p2", url_template="https://p2.test/?u={url}", shape=JSON_SHAPE),
        ProxyConfig(name="p3", url_template="https://p3.test/?u={url}", shape=JSON_SHAPE),
    ]


def per_source_handler(bodies: dict[str, str]):
    """
    Serve a JSON body per source host; hosts missing from `bodies` fail.

    Keys are feed hostnames such as "a.example.com".
    """
    def handler(url: str) -> HttpResponse:
        for host, body in bodies.items():
            if host in url:
                return HttpResponse(status=200, text=body)
        raise ConnectionError("connection refused")
    return handler
