"""Tests for the Typer command-line interface."""

from typer.testing import CliRunner

import site2feed.cli as cli
from site2feed.errors import ConfigError
from site2feed.feed import serialize
from site2feed.runner import GenerationResult
from site2feed.store import FeedStore
from site2feed.types import FeedChannel, FeedItem


runner = CliRunner()


def _result():
    channel = FeedChannel(
        title="Example Blog",
        link="https://example.com/blog",
        items=[FeedItem(title="First post", link="https://example.com/posts/1", image_url="https://example.com/a.jpg")],
    )
    return GenerationResult(xml=serialize(channel), channel=channel)


def _config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        f"store:\n  path: {tmp_path / 'feeds.json'}\nlogging:\n  console: false\n",
        encoding="utf-8",
    )
    return path


def test_generate_writes_output_and_saves(monkeypatch, tmp_path):
    seen = {}

    def fake_generate(url, cfg, provider=None):
        seen["url"] = url
        seen["api_key"] = cfg.provider.api_key
        return _result()

    monkeypatch.setattr(cli, "generate_feed_sync", fake_generate)
    output = tmp_path / "feed.xml"
    config = _config(tmp_path)

    result = runner.invoke(
        cli.app,
        ["generate", "https://example.com/blog", "-o", str(output), "-c", str(config), "--save", "--api-key", "k"],
    )

    assert result.exit_code == 0, result.output
    assert seen == {"url": "https://example.com/blog", "api_key": "k"}
    assert output.read_text(encoding="utf-8").startswith('<?xml version="1.0"')

    [saved] = FeedStore(tmp_path / "feeds.json").list()
    assert saved.url == "https://example.com/blog"
    assert saved.parsed_channel.title == "Example Blog"

    listed = runner.invoke(cli.app, ["feeds", "list", "-c", str(config)])
    assert listed.exit_code == 0, listed.output


def test_generate_reports_errors(monkeypatch, tmp_path):
    def fake_generate(url, cfg, provider=None):
        raise ConfigError("Missing API Key. Please set OPENROUTER_API_KEY.")

    monkeypatch.setattr(cli, "generate_feed_sync", fake_generate)

    result = runner.invoke(cli.app, ["generate", "https://example.com", "-c", str(_config(tmp_path))])

    assert result.exit_code == 1
    assert "Missing API Key" in result.output


def test_parse_command_shows_channel(tmp_path):
    path = tmp_path / "feed.xml"
    path.write_text(_result().xml, encoding="utf-8")

    result = runner.invoke(cli.app, ["parse", str(path)])

    assert result.exit_code == 0, result.output
    assert "Example Blog" in result.output


def test_parse_command_rejects_invalid_feed(tmp_path):
    path = tmp_path / "broken.xml"
    path.write_text("<rss><channel>", encoding="utf-8")

    result = runner.invoke(cli.app, ["parse", str(path)])

    assert result.exit_code == 1


def test_delete_unknown_feed(tmp_path):
    result = runner.invoke(cli.app, ["feeds", "delete", "nope", "-c", str(_config(tmp_path))])

    assert result.exit_code == 1
