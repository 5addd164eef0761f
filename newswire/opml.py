"""OPML reader and writer for source lists."""

import re
import xml.etree.ElementTree as ET
from pathlib import Path

from .models import SourceDescriptor

DEFAULT_CATEGORY = "UNCATEGORIZED"


def _slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "source"


def parse_opml(xml_content: str) -> list[SourceDescriptor]:
    """
    Parse OPML XML content into source descriptors.

    Handles both flat and nested (categorized) OPML structures. The
    enclosing folder becomes the source category; an optional `topic`
    attribute becomes the topic label.

    Args:
        xml_content: Raw OPML XML string

    Returns:
        List of SourceDescriptor with unique ids

    Raises:
        ValueError: If XML is invalid or not OPML format
    """
    try:
        root = ET.fromstring(xml_content)
    except ET.ParseError as e:
        raise ValueError(f"Invalid XML: {e}")

    if root.tag.lower() != "opml":
        raise ValueError(f"Not an OPML document (root element: {root.tag})")

    body = root.find("body")
    if body is None:
        raise ValueError("OPML document missing <body> element")

    sources: list[SourceDescriptor] = []
    _parse_outlines(body, sources, category=DEFAULT_CATEGORY, used_ids=set())
    return sources


def _parse_outlines(
    element: ET.Element,
    sources: list[SourceDescriptor],
    category: str,
    used_ids: set[str],
) -> None:
    """
    Recursively parse outline elements.

    Outlines with an xmlUrl are feeds; outlines without one are folders.
    """
    for outline in element.findall("outline"):
        xml_url = outline.get("xmlUrl") or outline.get("xmlurl")

        if xml_url:
            title = (outline.get("title") or outline.get("text") or xml_url).strip()
            source_id = _slugify(title)
            suffix = 2
            while source_id in used_ids:
                source_id = f"{_slugify(title)}-{suffix}"
                suffix += 1
            used_ids.add(source_id)

            sources.append(SourceDescriptor(
                id=source_id,
                name=title,
                url=xml_url.strip(),
                category=category,
                topic_label=outline.get("topic") or None,
            ))
        else:
            folder_name = outline.get("title") or outline.get("text")
            _parse_outlines(
                outline,
                sources,
                category=folder_name.strip() if folder_name else category,
                used_ids=used_ids,
            )


def load_sources(path: str | Path) -> list[SourceDescriptor]:
    """Read source descriptors from an OPML file."""
    return parse_opml(Path(path).read_text(encoding="utf-8"))


def generate_opml(sources: list[SourceDescriptor], title: str = "Newswire Sources") -> str:
    """
    Generate OPML XML from source descriptors, one folder per category.

    Args:
        sources: Sources to export
        title: Document title

    Returns:
        OPML XML string
    """
    root = ET.Element("opml", version="2.0")

    head = ET.SubElement(root, "head")
    title_elem = ET.SubElement(head, "title")
    title_elem.text = title

    body = ET.SubElement(root, "body")

    categorized: dict[str, list[SourceDescriptor]] = {}
    for source in sources:
        categorized.setdefault(source.category, []).append(source)

    for category, cat_sources in sorted(categorized.items()):
        folder = ET.SubElement(body, "outline", text=category, title=category)
        for source in cat_sources:
            attrs = {
                "type": "rss",
                "text": source.name,
                "title": source.name,
                "xmlUrl": source.url,
            }
            if source.topic_label:
                attrs["topic"] = source.topic_label
            ET.SubElement(folder, "outline", **attrs)

    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(
        root, encoding="unicode"
    )
