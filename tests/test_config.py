"""Tests for YAML config loading and logging helpers."""

import json
import logging
from pathlib import Path

from site2feed.config import AppConfig, FetchConfig, ProviderConfig, get_api_key, get_crawl4ai_api_url, load_config
from site2feed.logging_utils import JsonlFormatter, log_event, redact_text, truncate_text


def test_load_config_defaults():
    cfg = load_config(None)

    assert cfg == AppConfig()
    assert cfg.fetch.timeout_seconds == 8.0
    assert cfg.enrich.batch_size == 3
    assert cfg.feed.max_chars == 150_000
    assert cfg.provider.max_tokens == 8192


def test_load_config_merges_known_keys(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "provider:\n"
        "  model: openai/gpt-4o-mini\n"
        "  unknown_field: ignored\n"
        "fetch:\n"
        "  strategies: [reader, direct]\n"
        "server:\n"
        "  error_format: xml\n"
        "not_a_section:\n"
        "  foo: bar\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert cfg.provider.model == "openai/gpt-4o-mini"
    assert cfg.provider.name == "openrouter"
    assert cfg.fetch.strategies == ["reader", "direct"]
    assert cfg.fetch.timeout_seconds == 8.0
    assert cfg.server.error_format == "xml"


def test_load_config_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(str(path)) == AppConfig()


def test_example_config_loads():
    example = Path(__file__).resolve().parent.parent / "config.example.yaml"

    cfg = load_config(str(example))

    assert cfg.fetch.strategies == ["direct", "reader", "allorigins"]


def test_get_api_key_prefers_inline_then_env_order(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY_SECURE", "secure-key")
    monkeypatch.setenv("OPENROUTER_API_KEY", "plain-key")

    assert get_api_key(ProviderConfig(api_key="inline")) == "inline"
    assert get_api_key(ProviderConfig()) == "secure-key"

    monkeypatch.delenv("OPENROUTER_API_KEY_SECURE")
    assert get_api_key(ProviderConfig()) == "plain-key"

    monkeypatch.delenv("OPENROUTER_API_KEY")
    assert get_api_key(ProviderConfig()) is None


def test_get_crawl4ai_api_url(monkeypatch):
    monkeypatch.setenv("CRAWL4AI_API_URL", "http://env-crawler")

    assert get_crawl4ai_api_url(FetchConfig()) == "http://env-crawler"
    assert get_crawl4ai_api_url(FetchConfig(crawl4ai_api_url="http://cfg-crawler")) == "http://cfg-crawler"


def test_redact_and_truncate():
    text = "see https://example.com/a for details"

    assert redact_text(text, "none") == text
    assert redact_text(text, "redact_content") == ""
    assert redact_text(text, "redact_urls") == "see [REDACTED_URL] for details"
    assert truncate_text("abcdef", max_chars=3) == "abc...(truncated)"
    assert truncate_text("abc", max_chars=3) == "abc"


def test_jsonl_formatter_includes_event_fields():
    records = []

    class _Capture(logging.Handler):
        def emit(self, record):
            records.append(record)

    logger = logging.getLogger("site2feed.test_jsonl")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    handler = _Capture()
    logger.addHandler(handler)
    try:
        log_event(logger, "Fetched page", event="fetch_ok", strategy="direct", chars=120)
    finally:
        logger.removeHandler(handler)

    payload = json.loads(JsonlFormatter().format(records[0]))
    assert payload["message"] == "Fetched page"
    assert payload["event"] == "fetch_ok"
    assert payload["strategy"] == "direct"
    assert payload["chars"] == 120
    assert payload["level"] == "INFO"
