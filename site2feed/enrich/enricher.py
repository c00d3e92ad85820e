"""
Turn raw model items into FeedItems.

Items are processed in fixed-size batches: items inside a batch run
concurrently, batches run one after another. This caps the number of
simultaneous secondary fetches against third-party sites. A failure while
enriching one item only costs that item its image.
"""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import format_datetime
import asyncio
import logging
from typing import Any, Awaitable, Callable

from ..config import EnrichConfig
from ..logging_utils import log_event
from ..types import FeedItem
from .images import discover_image, is_disallowed_image, resolve_url

logger = logging.getLogger(__name__)

# (url, timeout) -> page content, "" on failure
PageFetcher = Callable[[str, float], Awaitable[str]]


async def enrich_items(
    items: list[dict[str, Any]],
    source_url: str,
    cfg: EnrichConfig,
    fetch: PageFetcher | None = None,
) -> list[FeedItem]:
    """Normalize and enrich raw items, preserving their order.

    Args:
        items: Raw item dicts from the decoded model output
        source_url: The page the items were extracted from
        cfg: Enrichment settings (batch size, secondary fetch timeout)
        fetch: Coroutine used for secondary article fetches; None disables them

    Returns:
        FeedItems in the same order as the input
    """
    batch_size = max(1, cfg.batch_size)
    enriched: list[FeedItem] = []
    for start in range(0, len(items), batch_size):
        batch = items[start : start + batch_size]
        # gather() preserves input order, which keeps the feed in document order.
        results = await asyncio.gather(
            *(_enrich_one(item, source_url, cfg, fetch) for item in batch)
        )
        enriched.extend(results)
    return enriched


async def _enrich_one(
    item: dict[str, Any],
    source_url: str,
    cfg: EnrichConfig,
    fetch: PageFetcher | None,
) -> FeedItem:
    raw_title = _text(item.get("title"))
    raw_link = _text(item.get("link"))
    link = resolve_url(raw_link, source_url) if raw_link else ""

    image = _text(item.get("image")) or None
    if image:
        image = resolve_url(image, source_url)
        if is_disallowed_image(image):
            log_event(logger, "Discarded site-chrome image", logging.DEBUG, event="image_discarded", image=image)
            image = None

    if image is None and link and fetch is not None and cfg.secondary_fetch:
        image = await _discover_remote_image(link, cfg, fetch)

    return FeedItem(
        title=raw_title or "No Title",
        link=link,
        description=_text(item.get("description")) or raw_title,
        pub_date=_text(item.get("pubDate")) or now_rfc822(),
        guid=link,
        image_url=image,
    )


async def _discover_remote_image(link: str, cfg: EnrichConfig, fetch: PageFetcher) -> str | None:
    try:
        html = await fetch(link, cfg.timeout_seconds)
        return discover_image(html, link)
    except Exception as exc:  # noqa: BLE001
        log_event(
            logger,
            f"Failed to enrich item {link}: {exc}",
            logging.WARNING,
            event="enrich_failed",
            url=link,
            error=f"{type(exc).__name__}: {exc}",
        )
        return None


def now_rfc822() -> str:
    return format_datetime(datetime.now(timezone.utc), usegmt=True)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
