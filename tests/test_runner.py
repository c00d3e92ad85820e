"""Integration tests for the generation pipeline with stubbed network and model."""

import asyncio
import json

import pytest

import site2feed.runner as runner
from site2feed.config import AppConfig
from site2feed.errors import ConfigError, DecodeError
from site2feed.feed import parse


BLOG_URL = "https://example.com/blog"

BLOG_HTML = """
<html><head><script>trackVisit();</script><style>.nav { color: red; }</style></head>
<body>
  <nav><img src="/assets/logo.png" alt="Example"></nav>
  <article class="card"><a href="/posts/1">First post</a><img class="wp-post-image" src="/assets/post1-hero.jpg"></article>
  <article class="card"><a href="/posts/2">Second post</a></article>
  <article class="card"><a href="/posts/3">Third post</a></article>
</body></html>
"""

MODEL_OUTPUT = {
    "title": "Example Blog",
    "description": "Posts from example.com",
    "items": [
        {"title": "First post", "link": "/posts/1", "image": "/assets/post1-hero.jpg", "pubDate": "2024-05-01"},
        {"title": "Second post", "link": "/posts/2", "image": "/assets/logo.png"},
        {"title": "Third post", "link": "/posts/3"},
    ],
}


class DummyProvider:
    def __init__(self, response):
        self.response = response
        self.calls = []

    async def extract(self, url, content):
        self.calls.append((url, content))
        return self.response


def _install_fetch(monkeypatch, pages):
    calls = []

    async def fake_fetch(url, cfg, client=None, timeout=None):
        calls.append((url, timeout))
        return pages.get(url, "")

    monkeypatch.setattr(runner, "fetch_page", fake_fetch)
    return calls


def test_generate_feed_end_to_end(monkeypatch):
    calls = _install_fetch(monkeypatch, {BLOG_URL: BLOG_HTML})
    provider = DummyProvider("```json\n" + json.dumps(MODEL_OUTPUT) + "\n```")

    result = asyncio.run(runner.generate_feed(BLOG_URL, AppConfig(), provider=provider))

    assert result.status == "ok"
    channel = parse(result.xml)
    assert channel.title == "Example Blog"
    assert channel.link == BLOG_URL
    assert [item.link for item in channel.items] == [
        "https://example.com/posts/1",
        "https://example.com/posts/2",
        "https://example.com/posts/3",
    ]
    assert channel.items[0].image_url == "https://example.com/assets/post1-hero.jpg"
    assert channel.items[1].image_url is None
    assert channel.items[2].image_url is None
    assert all("logo" not in (item.image_url or "") for item in channel.items)
    assert channel.items[0].pub_date == "2024-05-01"

    # Only the items without a usable image trigger a secondary fetch.
    assert calls == [
        (BLOG_URL, None),
        ("https://example.com/posts/2", 4.0),
        ("https://example.com/posts/3", 4.0),
    ]


def test_generate_feed_sends_sanitized_content(monkeypatch):
    _install_fetch(monkeypatch, {BLOG_URL: BLOG_HTML})
    provider = DummyProvider(json.dumps(MODEL_OUTPUT))

    asyncio.run(runner.generate_feed(BLOG_URL, AppConfig(), provider=provider))

    [(url, content)] = provider.calls
    assert url == BLOG_URL
    assert "trackVisit" not in content
    assert ".nav" not in content
    assert "\n" not in content
    assert "/posts/1" in content


def test_generate_feed_uses_channel_defaults(monkeypatch):
    _install_fetch(monkeypatch, {BLOG_URL: BLOG_HTML})
    provider = DummyProvider('{"items": []}')

    result = asyncio.run(runner.generate_feed(BLOG_URL, AppConfig(), provider=provider))

    assert result.channel.title == "Generated Feed"
    assert result.channel.description == "RSS feed generated by AI"
    assert result.channel.items == []


def test_generate_feed_fetch_failure_skips_model(monkeypatch):
    _install_fetch(monkeypatch, {})
    provider = DummyProvider("unused")

    result = asyncio.run(runner.generate_feed("https://unreachable.example", AppConfig(), provider=provider))

    assert result.status == "fetch_failed"
    assert provider.calls == []
    channel = parse(result.xml)
    assert "Error: Could not fetch content" in channel.title
    assert channel.items[0].title == "Error: Fetch Failed"


def test_generate_feed_missing_key_fails_before_network(monkeypatch):
    monkeypatch.delenv("OPENROUTER_API_KEY_SECURE", raising=False)
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    calls = _install_fetch(monkeypatch, {BLOG_URL: BLOG_HTML})

    with pytest.raises(ConfigError):
        asyncio.run(runner.generate_feed(BLOG_URL, AppConfig()))

    assert calls == []


def test_generate_feed_propagates_decode_error(monkeypatch):
    _install_fetch(monkeypatch, {BLOG_URL: BLOG_HTML})
    provider = DummyProvider("Sorry, I can't do that.")

    with pytest.raises(DecodeError, match="Sorry"):
        asyncio.run(runner.generate_feed(BLOG_URL, AppConfig(), provider=provider))


def test_generate_feed_sync(monkeypatch):
    _install_fetch(monkeypatch, {BLOG_URL: BLOG_HTML})

    result = runner.generate_feed_sync(BLOG_URL, AppConfig(), provider=DummyProvider(json.dumps(MODEL_OUTPUT)))

    assert len(result.channel.items) == 3
