"""
Image classification and discovery for article pages.

Discovery runs an ordered tuple of independent extractor functions over
the parsed page; each returns an optional image URL:
1. featured_image - elements carrying featured-image class markers
2. twitter_image - <meta name="twitter:image">
3. og_image - <meta property="og:image">
4. structured_data_image - itemprop="image" and JSON-LD "image"
5. first_inline_image - first <img> not on the disallow list

New sources are added by appending to IMAGE_EXTRACTORS.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

# Substrings marking site chrome rather than article imagery ("tr?id=" is the Meta pixel).
DISALLOWED_IMAGE_MARKERS = ("logo", "icon", "avatar", "placeholder", "tr?id=")
UPLOADS_MARKER = "uploads"

_FEATURED_CLASS_RE = re.compile(r"featured|wp-post-image|post-thumbnail", re.IGNORECASE)
_IMG_SRC_ATTRS = ("src", "data-src", "data-lazy-src")

ImageExtractor = Callable[[BeautifulSoup], "str | None"]


def is_disallowed_image(url: str | None) -> bool:
    """True when the URL looks like a logo, icon, avatar, placeholder or tracking pixel.

    Plain substring matching: "/wp-content/uploads/logo-design-tips.jpg" is
    kept because of the uploads path, "/assets/iconic-shot.jpg" is dropped.
    """
    if not url:
        return False
    lowered = url.lower()
    if UPLOADS_MARKER in lowered:
        return False
    return any(marker in lowered for marker in DISALLOWED_IMAGE_MARKERS)


def image_source(img: Tag) -> str | None:
    """Return the first usable src of an <img>, including lazy-load attributes."""
    for attr in _IMG_SRC_ATTRS:
        value = img.get(attr)
        if isinstance(value, str):
            value = value.strip()
            if value and not value.startswith("data:"):
                return value
    return None


def featured_image(soup: BeautifulSoup) -> str | None:
    for tag in soup.find_all(class_=_FEATURED_CLASS_RE):
        img = tag if tag.name == "img" else tag.find("img")
        if img is None:
            continue
        src = image_source(img)
        if src:
            return src
    return None


def _meta_content(soup: BeautifulSoup, key: str) -> str | None:
    for attr in ("name", "property"):
        tag = soup.find("meta", attrs={attr: key})
        if tag is not None:
            content = tag.get("content")
            if isinstance(content, str) and content.strip():
                return content.strip()
    return None


def twitter_image(soup: BeautifulSoup) -> str | None:
    return _meta_content(soup, "twitter:image")


def og_image(soup: BeautifulSoup) -> str | None:
    return _meta_content(soup, "og:image")


def structured_data_image(soup: BeautifulSoup) -> str | None:
    tag = soup.find(attrs={"itemprop": "image"})
    if tag is not None:
        for attr in ("content", "src", "href"):
            value = tag.get(attr)
            if isinstance(value, str) and value.strip():
                return value.strip()

    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            data = json.loads(script.string or "")
        except json.JSONDecodeError:
            continue
        found = _json_ld_image(data)
        if found:
            return found
    return None


def _json_ld_image(data: Any) -> str | None:
    if isinstance(data, list):
        for entry in data:
            found = _json_ld_image(entry)
            if found:
                return found
        return None
    if not isinstance(data, dict):
        return None
    image = data.get("image") or data.get("thumbnailUrl")
    if isinstance(image, str):
        return image
    if isinstance(image, dict) and isinstance(image.get("url"), str):
        return image["url"]
    if isinstance(image, list):
        found = _json_ld_image({"image": image[0]}) if image else None
        if found:
            return found
    return _json_ld_image(data.get("@graph"))


def first_inline_image(soup: BeautifulSoup) -> str | None:
    for img in soup.find_all("img"):
        src = image_source(img)
        if src and not is_disallowed_image(src):
            return src
    return None


IMAGE_EXTRACTORS: tuple[ImageExtractor, ...] = (
    featured_image,
    twitter_image,
    og_image,
    structured_data_image,
    first_inline_image,
)


def discover_image(html: str, page_url: str) -> str | None:
    """Mine an article page for a representative image.

    Extractors run in priority order. A candidate is resolved against the
    page URL and skipped when it falls on the disallow list.
    """
    if not html:
        return None
    soup = BeautifulSoup(html, "html.parser")
    for extractor in IMAGE_EXTRACTORS:
        candidate = extractor(soup)
        if not candidate:
            continue
        resolved = resolve_url(candidate, page_url)
        if not is_disallowed_image(resolved):
            return resolved
    return None


def resolve_url(value: str, base_url: str) -> str:
    """Resolve value against base_url, keeping the original when resolution fails."""
    try:
        return urljoin(base_url, value)
    except ValueError:
        return value
