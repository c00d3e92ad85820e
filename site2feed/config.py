"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- ProviderConfig: LLM provider settings
- FetchConfig: Page acquisition strategies and timeouts
- EnrichConfig: Per-item image enrichment settings
- FeedConfig: Sanitizer limits and channel defaults
- ServerConfig: HTTP entry point settings
- LoggingConfig: Logging behavior
- StoreConfig: Saved feed location
- AppConfig: Root configuration container

Configuration is always passed explicitly; nothing here keeps client state.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any

import yaml


@dataclass
class ProviderConfig:
    """Configuration for the LLM provider.

    Attributes:
        name: Provider name ("openrouter", "openai", "openai_compatible", "gemini")
        model: Model identifier
        base_url: Base URL for the provider API
        api_key: Optional inline API key (overrides env vars)
        api_key_envs: Environment variables checked in order for the API key
        timeout_seconds: Completion request timeout
        max_tokens: Output token cap for the extraction call
        temperature: Sampling temperature
        app_title: Value of the X-Title header sent to OpenRouter
        trust_env: Whether to respect system proxy settings for API requests
    """

    name: str = "openrouter"
    model: str = "google/gemini-2.0-flash-001"
    base_url: str = "https://openrouter.ai/api/v1"
    api_key: str | None = None
    api_key_envs: list[str] = field(
        default_factory=lambda: ["OPENROUTER_API_KEY_SECURE", "OPENROUTER_API_KEY"]
    )
    timeout_seconds: float = 30.0
    max_tokens: int = 8192
    temperature: float = 0.2
    app_title: str = "site2feed"
    trust_env: bool = True


@dataclass
class FetchConfig:
    """Configuration for page acquisition.

    Attributes:
        strategies: Ordered acquisition strategies ("direct", "reader", "allorigins", "crawl4ai")
        timeout_seconds: Timeout for each strategy attempt
        min_content_chars: Bodies shorter than this are treated as failures
        challenge_markers: Phrases identifying bot-interstitial pages
        reader_url: Base URL of the reader proxy
        allorigins_url: Endpoint of the AllOrigins proxy
        crawl4ai_api_url: Remote Crawl4AI API URL (falls back to CRAWL4AI_API_URL)
        user_agent: HTTP User-Agent header string
        trust_env: Whether to respect system proxy settings
    """

    strategies: list[str] = field(
        default_factory=lambda: ["direct", "reader", "allorigins"]
    )
    timeout_seconds: float = 8.0
    min_content_chars: int = 100
    challenge_markers: list[str] = field(
        default_factory=lambda: [
            "Just a moment...",
            "Checking your browser",
            "cf-browser-verification",
        ]
    )
    reader_url: str = "https://r.jina.ai"
    allorigins_url: str = "https://api.allorigins.win/get"
    crawl4ai_api_url: str | None = None
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    trust_env: bool = True


@dataclass
class EnrichConfig:
    """Configuration for per-item enrichment.

    Attributes:
        batch_size: Items enriched concurrently per batch
        timeout_seconds: Timeout for each secondary article fetch
        secondary_fetch: Whether to fetch article pages for missing images
    """

    batch_size: int = 3
    timeout_seconds: float = 4.0
    secondary_fetch: bool = True


@dataclass
class FeedConfig:
    """Configuration for content preparation and channel defaults.

    Attributes:
        max_chars: Maximum sanitized characters sent to the model
        default_title: Channel title when the model returns none
        default_description: Channel description when the model returns none
    """

    max_chars: int = 150_000
    default_title: str = "Generated Feed"
    default_description: str = "RSS feed generated by AI"


@dataclass
class ServerConfig:
    """Configuration for the HTTP entry point.

    Attributes:
        host: Bind address for `site2feed serve`
        port: Bind port for `site2feed serve`
        default_cache_seconds: Cache-Control max-age when none is requested
        min_cache_seconds: Lower clamp for the requested cache duration
        max_cache_seconds: Upper clamp for the requested cache duration
        error_format: "json" for 500 JSON errors, "xml" for always-200 error feeds
    """

    host: str = "127.0.0.1"
    port: int = 8000
    default_cache_seconds: int = 3600
    min_cache_seconds: int = 60
    max_cache_seconds: int = 604800
    error_format: str = "json"


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Optional path of a log file
        format: Log file format ("jsonl" or "plain")
        llm_log_redaction: Redaction mode for logged model output
            ("none", "redact_content", "redact_urls")
    """

    level: str = "INFO"
    console: bool = True
    file: str | None = None
    format: str = "jsonl"
    llm_log_redaction: str = "none"


@dataclass
class StoreConfig:
    """Configuration for saved feeds.

    Attributes:
        path: JSON file holding saved feed records
    """

    path: str = "~/.site2feed/feeds.json"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    enrich: EnrichConfig = field(default_factory=EnrichConfig)
    feed: FeedConfig = field(default_factory=FeedConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    store: StoreConfig = field(default_factory=StoreConfig)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update({k: v for k, v in value.items() if k in data[key]})
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        provider=ProviderConfig(**data["provider"]),
        fetch=FetchConfig(**data["fetch"]),
        enrich=EnrichConfig(**data["enrich"]),
        feed=FeedConfig(**data["feed"]),
        server=ServerConfig(**data["server"]),
        logging=LoggingConfig(**data["logging"]),
        store=StoreConfig(**data["store"]),
    )


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get API key from inline config or the first set environment variable."""
    if cfg.api_key:
        return cfg.api_key
    for name in cfg.api_key_envs:
        value = os.getenv(name)
        if value:
            return value
    return None


def get_crawl4ai_api_url(cfg: FetchConfig) -> str | None:
    """Get the Crawl4AI API URL from config or CRAWL4AI_API_URL."""
    if cfg.crawl4ai_api_url:
        return cfg.crawl4ai_api_url
    return os.getenv("CRAWL4AI_API_URL")
