"""
HTTP entry point for feed generation.

    GET /generate?url=https://example.com/blog&cache=3600

Returns the feed with a Cache-Control header on success, a 400 JSON error
when `url` is missing, and on generation failure either a 500 JSON error
or (server.error_format = "xml") an always-200 error feed that feed
readers can still display.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import unquote

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from . import __version__
from .config import AppConfig, ServerConfig
from .feed.serializer import error_feed
from .llm.providers.base import ExtractionProvider
from .logging_utils import log_event
from .runner import generate_feed

logger = logging.getLogger(__name__)

XML_MEDIA_TYPE = "application/xml; charset=utf-8"


def clamp_cache_seconds(value: Any, cfg: ServerConfig) -> int:
    """Parse the requested cache duration, falling back to the default, and clamp it."""
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        seconds = cfg.default_cache_seconds
    if seconds == 0:
        seconds = cfg.default_cache_seconds
    return max(cfg.min_cache_seconds, min(cfg.max_cache_seconds, seconds))


def normalize_target_url(value: str) -> str:
    """Decode a percent-encoded target URL (e.g. "https%3A%2F%2F...")."""
    value = value.strip()
    if "%3a" in value.lower():
        return unquote(value)
    return value


def create_app(cfg: AppConfig | None = None, provider: ExtractionProvider | None = None) -> FastAPI:
    """Build the FastAPI app.

    Args:
        cfg: Application configuration, defaults when omitted
        provider: Fixed extraction provider; otherwise one is built per request
            from cfg.provider so credential changes take effect immediately
    """
    app_cfg = cfg or AppConfig()
    app = FastAPI(
        title="site2feed",
        description="Turn any website into an RSS feed",
        version=__version__,
    )

    @app.api_route("/", methods=["GET", "POST"])
    @app.api_route("/generate", methods=["GET", "POST"])
    async def generate(request: Request) -> Response:
        body = await _read_body(request)
        params = request.query_params
        raw_url = params.get("url") or body.get("url")
        cache_seconds = clamp_cache_seconds(params.get("cache") or body.get("cache"), app_cfg.server)

        if not raw_url:
            return JSONResponse({"error": "Missing 'url' parameter"}, status_code=400)

        url = normalize_target_url(str(raw_url))
        try:
            result = await generate_feed(url, app_cfg, provider=provider)
        except Exception as exc:  # noqa: BLE001
            logger.exception("RSS generation failed for %s", url)
            return _error_response(url, exc, app_cfg.server)

        log_event(logger, "Feed served", event="feed_served", url=url, status=result.status, cache=cache_seconds)
        return Response(
            content=result.xml,
            status_code=200,
            media_type=XML_MEDIA_TYPE,
            headers={"Cache-Control": f"public, max-age={cache_seconds}"},
        )

    return app


async def _read_body(request: Request) -> dict[str, Any]:
    if request.method != "POST":
        return {}
    try:
        data = await request.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _error_response(url: str, exc: Exception, cfg: ServerConfig) -> Response:
    message = str(exc) or type(exc).__name__
    if cfg.error_format == "xml":
        details = f"Error: {message}\nType: {type(exc).__name__}"
        return Response(content=error_feed(url, message, details), status_code=200, media_type=XML_MEDIA_TYPE)
    return JSONResponse(
        {"error": message, "details": "Check server logs for the stack trace"},
        status_code=500,
    )
