"""Tests for saved feed persistence."""

from site2feed.feed import serialize
from site2feed.store import FeedStore, new_saved_feed
from site2feed.types import FeedChannel, FeedItem


def _xml(title, items=1):
    channel = FeedChannel(
        title=title,
        link="https://example.com",
        items=[FeedItem(title=f"Item {i}", link=f"https://example.com/{i}") for i in range(items)],
    )
    return serialize(channel)


def test_list_missing_file_is_empty(tmp_path):
    assert FeedStore(tmp_path / "feeds.json").list() == []


def test_new_saved_feed_parses_channel():
    feed = new_saved_feed("https://example.com", _xml("Example", items=2))

    assert feed.parsed_channel.title == "Example"
    assert len(feed.parsed_channel.items) == 2
    assert feed.type == "static"
    assert feed.created_at > 0
    assert feed.public_url is None


def test_save_prepends_new_urls(tmp_path):
    store = FeedStore(tmp_path / "feeds.json")

    store.save(new_saved_feed("https://a.example", _xml("A")))
    store.save(new_saved_feed("https://b.example", _xml("B")))

    assert [feed.url for feed in store.list()] == ["https://b.example", "https://a.example"]


def test_save_replaces_existing_url_in_place(tmp_path):
    store = FeedStore(tmp_path / "feeds.json")
    store.save(new_saved_feed("https://a.example", _xml("A")))
    store.save(new_saved_feed("https://b.example", _xml("B")))

    updated = new_saved_feed("https://a.example", _xml("A v2", items=3))
    store.save(updated)

    feeds = store.list()
    assert [feed.url for feed in feeds] == ["https://b.example", "https://a.example"]
    assert feeds[1].id == updated.id
    assert feeds[1].parsed_channel.title == "A v2"
    assert len(feeds[1].parsed_channel.items) == 3


def test_get_and_delete(tmp_path):
    store = FeedStore(tmp_path / "nested" / "feeds.json")
    feed = new_saved_feed("https://a.example", _xml("A"))
    store.save(feed)

    assert store.get(feed.id).xml_content == feed.xml_content
    assert store.get("missing") is None
    assert store.delete(feed.id) is True
    assert store.delete(feed.id) is False
    assert store.list() == []


def test_corrupt_file_is_treated_as_empty(tmp_path):
    path = tmp_path / "feeds.json"
    path.write_text("{not json", encoding="utf-8")

    assert FeedStore(path).list() == []
