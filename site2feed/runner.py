"""
Main pipeline orchestration for feed generation.

One call runs the whole pipeline for one URL:
1. Build the extraction provider (fails fast on a missing API key)
2. Fetch the page through the fallback chain
3. Short-circuit to an explicit "fetch failed" feed when nothing came back
4. Sanitize the content and ask the model for items
5. Decode the model output
6. Enrich items in bounded-concurrency batches
7. Serialize the channel

No state is shared between calls; each call owns its HTTP client.
"""

from __future__ import annotations

from dataclasses import dataclass
import asyncio
import logging

import httpx

from .config import AppConfig
from .decoder import decode
from .enrich.enricher import enrich_items, now_rfc822
from .feed.serializer import fetch_failed_channel, serialize
from .fetch.fetcher import build_client, fetch_page
from .fetch.sanitizer import sanitize
from .llm.providers.base import ExtractionProvider
from .llm.providers.factory import create_provider
from .logging_utils import log_event
from .types import FeedChannel

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Outcome of one generation run.

    Attributes:
        xml: The serialized feed document
        channel: The channel that was serialized
        status: "ok", or "fetch_failed" when no live content was available
    """
    xml: str
    channel: FeedChannel
    status: str = "ok"


async def generate_feed(
    url: str,
    cfg: AppConfig,
    provider: ExtractionProvider | None = None,
    client: httpx.AsyncClient | None = None,
) -> GenerationResult:
    """Generate an RSS feed for a website.

    Args:
        url: The website to turn into a feed
        cfg: Application configuration
        provider: Extraction provider; built from cfg.provider when omitted
        client: Shared HTTP client for page fetches; one is created when omitted

    Returns:
        GenerationResult with the XML document and its typed channel

    Raises:
        ConfigError: If no API key is configured (before any network call)
        ExtractionError: If the completion endpoint fails
        DecodeError: If the model output cannot be repaired
    """
    if provider is None:
        provider = create_provider(cfg.provider, cfg.logging)

    if client is not None:
        return await _generate(url, cfg, provider, client)
    async with build_client(cfg.fetch) as owned:
        return await _generate(url, cfg, provider, owned)


async def _generate(
    url: str,
    cfg: AppConfig,
    provider: ExtractionProvider,
    client: httpx.AsyncClient,
) -> GenerationResult:
    log_event(logger, f"Generating feed for {url}", event="generation_start", url=url)

    html = await fetch_page(url, cfg.fetch, client)
    if not html:
        log_event(
            logger,
            "Fetch failed - returning explicit error feed instead of asking the model",
            logging.WARNING,
            event="generation_fetch_failed",
            url=url,
        )
        channel = fetch_failed_channel(url)
        return GenerationResult(xml=serialize(channel), channel=channel, status="fetch_failed")

    content = sanitize(html, cfg.feed.max_chars)
    raw_text = await provider.extract(url, content)
    extraction = decode(raw_text)

    async def _fetch_article(link: str, timeout: float) -> str:
        return await fetch_page(link, cfg.fetch, client, timeout=timeout)

    items = await enrich_items(extraction.items, url, cfg.enrich, fetch=_fetch_article)
    channel = FeedChannel(
        title=extraction.title or cfg.feed.default_title,
        link=url,
        description=extraction.description or cfg.feed.default_description,
        last_build_date=now_rfc822(),
        items=items,
    )
    log_event(
        logger,
        f"Generated feed with {len(items)} items",
        event="generation_done",
        url=url,
        items=len(items),
        with_images=sum(1 for item in items if item.image_url),
    )
    return GenerationResult(xml=serialize(channel), channel=channel)


def generate_feed_sync(url: str, cfg: AppConfig, provider: ExtractionProvider | None = None) -> GenerationResult:
    """Blocking wrapper around generate_feed for the CLI."""
    return asyncio.run(generate_feed(url, cfg, provider=provider))
