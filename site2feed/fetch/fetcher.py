"""
Page acquisition with an ordered chain of fallback strategies.

Strategies, tried in the order given by FetchConfig.strategies:
1. direct: plain HTTP GET with a browser User-Agent
2. reader: the r.jina.ai reader proxy, asked to return HTML
3. allorigins: the AllOrigins JSON proxy
4. crawl4ai: a remote Crawl4AI service (only when its URL is configured)

Each attempt has its own timeout and may fail independently. A response
that is non-2xx, too short, or looks like a bot-challenge interstitial is
treated exactly like a network failure. fetch_page never raises: an empty
string means every strategy failed.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Awaitable, Callable

import httpx

from ..config import FetchConfig, get_crawl4ai_api_url
from ..errors import FetchFailure
from ..logging_utils import log_event

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Raw outcome of a single strategy attempt.

    Attributes:
        url: The page URL that was requested
        strategy: Name of the strategy that produced the result
        status_code: HTTP status code reported for the page
        text: The response body
    """
    url: str
    strategy: str
    status_code: int | None
    text: str


Strategy = Callable[[httpx.AsyncClient, str, FetchConfig, float], Awaitable[FetchResult]]


async def fetch_page(
    url: str,
    cfg: FetchConfig,
    client: httpx.AsyncClient | None = None,
    timeout: float | None = None,
) -> str:
    """Fetch page content for a URL, walking the fallback chain.

    Args:
        url: The page to fetch
        cfg: Fetch configuration (strategy order, limits, endpoints)
        client: Optional shared AsyncClient; one is created when omitted
        timeout: Per-attempt timeout overriding cfg.timeout_seconds

    Returns:
        The first acceptable body, or "" when every strategy failed
    """
    attempt_timeout = timeout if timeout is not None else cfg.timeout_seconds
    if client is None:
        async with build_client(cfg) as owned:
            return await _fetch_with_fallbacks(owned, url, cfg, attempt_timeout)
    return await _fetch_with_fallbacks(client, url, cfg, attempt_timeout)


def build_client(cfg: FetchConfig) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={"User-Agent": cfg.user_agent},
        follow_redirects=True,
        trust_env=cfg.trust_env,
    )


async def _fetch_with_fallbacks(
    client: httpx.AsyncClient,
    url: str,
    cfg: FetchConfig,
    timeout: float,
) -> str:
    for name in cfg.strategies:
        strategy = _STRATEGIES.get(name)
        if strategy is None:
            log_event(logger, "Unknown fetch strategy", logging.WARNING, event="fetch_unknown_strategy", strategy=name)
            continue
        try:
            text = await _run_strategy(name, strategy, client, url, cfg, timeout)
        except FetchFailure as exc:
            log_event(
                logger,
                f"Fetch attempt failed: {exc}",
                logging.WARNING,
                event="fetch_attempt_failed",
                strategy=exc.strategy,
                url=url,
                reason=exc.reason,
            )
            continue
        log_event(logger, "Fetched page", event="fetch_ok", strategy=name, url=url, chars=len(text))
        return text

    log_event(logger, f"All fetch strategies failed for {url}", logging.WARNING, event="fetch_failed", url=url)
    return ""


async def _run_strategy(
    name: str,
    strategy: Strategy,
    client: httpx.AsyncClient,
    url: str,
    cfg: FetchConfig,
    timeout: float,
) -> str:
    try:
        result = await strategy(client, url, cfg, timeout)
    except httpx.TimeoutException as exc:
        raise FetchFailure(name, url, f"timeout: {exc}") from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise FetchFailure(name, url, f"{type(exc).__name__}: {exc}") from exc
    except ValueError as exc:
        # Undecodable proxy payloads.
        raise FetchFailure(name, url, f"invalid response: {exc}") from exc
    return check_content(result, cfg)


def check_content(result: FetchResult, cfg: FetchConfig) -> str:
    """Validate a strategy result, raising FetchFailure when unusable."""
    if result.status_code is not None and not 200 <= result.status_code < 300:
        raise FetchFailure(result.strategy, result.url, f"status {result.status_code}")
    text = result.text or ""
    if is_bot_challenge(text, cfg):
        raise FetchFailure(result.strategy, result.url, "bot challenge or empty body")
    return text


def is_bot_challenge(text: str, cfg: FetchConfig) -> bool:
    """Heuristic for interstitial or empty pages: too short, or a known challenge phrase."""
    if len(text.strip()) < cfg.min_content_chars:
        return True
    return any(marker in text for marker in cfg.challenge_markers)


async def _fetch_direct(
    client: httpx.AsyncClient, url: str, cfg: FetchConfig, timeout: float
) -> FetchResult:
    resp = await client.get(url, headers={"User-Agent": cfg.user_agent}, timeout=timeout)
    return FetchResult(url=url, strategy="direct", status_code=resp.status_code, text=resp.text)


async def _fetch_reader(
    client: httpx.AsyncClient, url: str, cfg: FetchConfig, timeout: float
) -> FetchResult:
    reader_url = f"{cfg.reader_url.rstrip('/')}/{url}"
    resp = await client.get(
        reader_url,
        headers={"X-Return-Format": "html", "X-Target-Selector": "body"},
        timeout=timeout,
    )
    return FetchResult(url=url, strategy="reader", status_code=resp.status_code, text=resp.text)


async def _fetch_allorigins(
    client: httpx.AsyncClient, url: str, cfg: FetchConfig, timeout: float
) -> FetchResult:
    resp = await client.get(cfg.allorigins_url, params={"url": url}, timeout=timeout)
    if resp.status_code != 200:
        return FetchResult(url=url, strategy="allorigins", status_code=resp.status_code, text="")
    data = resp.json()
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    status = data.get("status") or {}
    upstream_status = status.get("http_code") if isinstance(status, dict) else None
    return FetchResult(
        url=url,
        strategy="allorigins",
        status_code=upstream_status,
        text=data.get("contents") or "",
    )


async def _fetch_crawl4ai(
    client: httpx.AsyncClient, url: str, cfg: FetchConfig, timeout: float
) -> FetchResult:
    api_url = get_crawl4ai_api_url(cfg)
    if not api_url:
        raise FetchFailure("crawl4ai", url, "no Crawl4AI API URL configured")

    payload = {
        "urls": [url],
        "crawler_params": {
            "headless": True,
            "magic_mode": True,
            "user_agent_mode": "random",
        },
    }
    resp = await client.post(f"{api_url.rstrip('/')}/crawl", json=payload, timeout=timeout)
    if resp.status_code != 200:
        return FetchResult(url=url, strategy="crawl4ai", status_code=resp.status_code, text="")

    data = resp.json()
    results = data.get("results") if isinstance(data, dict) else data
    if not isinstance(results, list) or not results:
        raise FetchFailure("crawl4ai", url, "empty results array")
    result = results[0]
    if not isinstance(result, dict):
        raise FetchFailure("crawl4ai", url, "malformed result entry")
    if not result.get("success", True):
        raise FetchFailure("crawl4ai", url, str(result.get("error_message") or "crawl failed"))
    return FetchResult(
        url=url,
        strategy="crawl4ai",
        status_code=result.get("status_code", 200),
        text=result.get("cleaned_html") or result.get("html") or "",
    )


_STRATEGIES: dict[str, Strategy] = {
    "direct": _fetch_direct,
    "reader": _fetch_reader,
    "allorigins": _fetch_allorigins,
    "crawl4ai": _fetch_crawl4ai,
}
