"""
Response Parser - Turn proxy responses into raw feed items.

Handles two wire shapes:
- "json": an rss2json-style envelope {status, message?, items?}
- "xml": the raw RSS/Atom document relayed by a pass-through proxy

Never raises; malformed bodies come back as an error result.
"""

import io
import json
import logging

import feedparser

from .models import ParsedResponse, RawItem

logger = logging.getLogger(__name__)

JSON_SHAPE = "json"
XML_SHAPE = "xml"


def parse_json_response(body: str) -> ParsedResponse:
    """
    Parse a JSON envelope, passing status/items/message through.

    The remote service reports its own status; it is not second-guessed.
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, TypeError) as e:
        return ParsedResponse(status="error", message=f"Invalid JSON: {e}")

    if not isinstance(data, dict):
        return ParsedResponse(status="error", message="Unexpected JSON payload")

    raw_items = data.get("items") or []
    if not isinstance(raw_items, list):
        raw_items = []

    return ParsedResponse(
        status=data.get("status") if data.get("status") in ("ok", "error") else "error",
        items=[RawItem.from_dict(item) for item in raw_items if isinstance(item, dict)],
        message=data.get("message") if isinstance(data.get("message"), str) else None,
    )


def parse_xml_response(body: str) -> ParsedResponse:
    """
    Parse a raw RSS/Atom document with feedparser.

    feedparser already prefers CDATA sections, maps dc:date onto `updated`
    and content:encoded onto `content`, which covers the fields we need.
    """
    if not body or not body.strip():
        return ParsedResponse(status="error", message="Empty response body")

    try:
        parsed = feedparser.parse(io.BytesIO(body.encode("utf-8")))
    except Exception as e:
        logger.debug(f"feedparser failed: {e}")
        return ParsedResponse(status="error", message=f"Invalid XML: {e}")

    items = [_entry_to_raw_item(entry) for entry in parsed.entries]

    if not items:
        return ParsedResponse(status="error", message="No items parsed from XML")

    return ParsedResponse(status="ok", items=items)


def _entry_to_raw_item(entry) -> RawItem:
    """Map a feedparser entry onto RawItem fields."""
    content = None
    if entry.get("content"):
        content = entry.content[0].get("value")

    return RawItem(
        title=entry.get("title"),
        link=entry.get("link"),
        pub_date=entry.get("published") or entry.get("updated"),
        description=entry.get("summary") or entry.get("description"),
        content=content,
    )


def parse_response(body: str, shape: str) -> ParsedResponse:
    """Dispatch on the declared proxy shape."""
    if shape == JSON_SHAPE:
        return parse_json_response(body)
    if shape == XML_SHAPE:
        return parse_xml_response(body)
    return ParsedResponse(status="error", message=f"Unknown response shape: {shape}")
