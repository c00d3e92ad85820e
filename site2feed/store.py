"""
Saved feed persistence in a single JSON file.

Records are keyed on the source URL: saving a feed for a URL that is
already stored replaces that record in place, new URLs go to the front.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
import time
import uuid

from .feed.parser import parse
from .types import SavedFeed

logger = logging.getLogger(__name__)


class FeedStore:
    """JSON-file backed list of SavedFeed records, newest first.

    Attributes:
        path: Location of the JSON file
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def list(self) -> list[SavedFeed]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.error("Failed to load feeds from %s", self.path)
            return []
        return [SavedFeed.from_dict(entry) for entry in raw if isinstance(entry, dict)]

    def get(self, feed_id: str) -> SavedFeed | None:
        for feed in self.list():
            if feed.id == feed_id:
                return feed
        return None

    def save(self, feed: SavedFeed) -> None:
        feeds = self.list()
        for idx, existing in enumerate(feeds):
            if existing.url == feed.url:
                feeds[idx] = feed
                break
        else:
            feeds.insert(0, feed)
        self._write(feeds)

    def delete(self, feed_id: str) -> bool:
        feeds = self.list()
        remaining = [feed for feed in feeds if feed.id != feed_id]
        if len(remaining) == len(feeds):
            return False
        self._write(remaining)
        return True

    def _write(self, feeds: list[SavedFeed]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [feed.to_dict() for feed in feeds]
        self.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def new_saved_feed(url: str, xml_content: str, feed_type: str = "static") -> SavedFeed:
    """Build a SavedFeed, re-parsing the XML so the stored channel matches the document."""
    return SavedFeed(
        id=uuid.uuid4().hex,
        url=url,
        created_at=int(time.time() * 1000),
        xml_content=xml_content,
        parsed_channel=parse(xml_content),
        type=feed_type,
    )
