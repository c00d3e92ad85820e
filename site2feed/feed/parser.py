"""
Parse RSS documents back into FeedChannels.

Used on the read/display path. feedparser does the XML work: a document
that is not well-formed is rejected, while a media or dc prefix used
without its namespace declaration is recovered by feedparser's loose
parser. Every text field is HTML-entity-decoded before it reaches the
model.
"""

from __future__ import annotations

import html
import logging
import re
from typing import Any
import xml.sax

import feedparser

from ..errors import ParseError
from ..types import FeedChannel, FeedItem
from .serializer import force_xml_declaration

logger = logging.getLogger(__name__)

_CHANNEL_RE = re.compile(r"<(?:[\w.-]+:)?channel\b")
_IMG_SRC_RE = re.compile(r"<img[^>]+src=[\"']([^\"']+)[\"']", re.IGNORECASE)
_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png")


def parse(xml: str) -> FeedChannel:
    """Parse an RSS document into a FeedChannel.

    Raises:
        ParseError: If the document is not well-formed or has no <channel>
    """
    document = force_xml_declaration(xml or "")
    result = feedparser.parse(document, resolve_relative_uris=False, sanitize_html=False)

    if _is_malformed(result):
        logger.debug("Raw XML causing error: %s", (xml or "")[:500])
        raise ParseError(
            f"Generated content is not valid XML ({result.get('bozo_exception')}). "
            "Please try generating again."
        )
    if not result.get("version") or not _CHANNEL_RE.search(document):
        raise ParseError("Invalid RSS: No channel element found. Please try generating again.")

    feed = result.feed
    return FeedChannel(
        title=_text(feed, "title") or "Untitled Feed",
        link=_text(feed, "link"),
        description=_text(feed, "subtitle", "description"),
        last_build_date=_text(feed, "updated") or None,
        items=[_parse_entry(entry) for entry in result.entries],
    )


def _is_malformed(result: Any) -> bool:
    if not result.get("bozo"):
        return False
    exc = result.get("bozo_exception")
    if not isinstance(exc, xml.sax.SAXParseException):
        return False
    # Unbound prefixes are recovered by the loose parser.
    return "prefix" not in exc.getMessage().lower()


def _parse_entry(entry: Any) -> FeedItem:
    description = _text(entry, "summary", "description")
    return FeedItem(
        title=_text(entry, "title") or "No Title",
        link=_text(entry, "link") or "#",
        description=description,
        pub_date=_text(entry, "published", "updated"),
        guid=_text(entry, "id"),
        image_url=_find_image(entry, description),
    )


def _find_image(entry: Any, description: str) -> str | None:
    """Image enclosure first, then media content/thumbnail, then an <img> in the description."""
    for enclosure in entry.get("enclosures") or []:
        url = enclosure.get("href") or enclosure.get("url")
        if url and _is_image_enclosure(url, enclosure.get("type") or ""):
            return html.unescape(url)

    for key in ("media_content", "media_thumbnail"):
        for media in entry.get(key) or []:
            url = media.get("url")
            medium = (media.get("medium") or "image").lower()
            if url and medium == "image":
                return html.unescape(url)

    match = _IMG_SRC_RE.search(description)
    if match:
        return html.unescape(match.group(1))
    return None


def _is_image_enclosure(url: str, kind: str) -> bool:
    if kind.lower().startswith("image"):
        return True
    return any(ext in url.lower() for ext in _IMAGE_EXTENSIONS)


def _text(data: Any, *keys: str) -> str:
    """First non-empty value among keys, stripped and entity-decoded."""
    for key in keys:
        value = data.get(key)
        if value:
            return html.unescape(str(value).strip())
    return ""
