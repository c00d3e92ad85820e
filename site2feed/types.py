"""
Core data types for the feed generation pipeline.

- RawExtraction: untyped channel/items payload decoded from model output
- FeedItem: a single enriched, normalized feed entry
- FeedChannel: the channel metadata plus its ordered items
- SavedFeed: a persisted generation result
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class RawExtraction:
    """Channel/items payload as returned by the model.

    Items are left as plain dicts: links and images may be relative,
    missing, or point at a logo. They must go through the enricher
    before becoming FeedItems.
    """
    title: str = ""
    description: str = ""
    items: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class FeedItem:
    """A single feed entry.

    Attributes:
        title: Item headline
        link: Absolute article URL once enriched (relative only if resolution failed)
        description: Summary text, never blank after enrichment
        pub_date: Free-form or RFC-822 date string
        guid: Unique identifier, the resolved link for generated feeds
        image_url: Representative image, never a logo/icon/placeholder
    """
    title: str
    link: str
    description: str = ""
    pub_date: str = ""
    guid: str = ""
    image_url: str | None = None


@dataclass
class FeedChannel:
    """Channel metadata and items in document order."""
    title: str
    link: str
    description: str = ""
    last_build_date: str | None = None
    items: list[FeedItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FeedChannel:
        items = [FeedItem(**item) for item in data.get("items") or []]
        return cls(
            title=data.get("title", ""),
            link=data.get("link", ""),
            description=data.get("description", ""),
            last_build_date=data.get("last_build_date"),
            items=items,
        )


@dataclass
class SavedFeed:
    """A generated feed as kept by the FeedStore.

    Attributes:
        id: Record identifier
        url: Source website URL (records are keyed on it)
        created_at: Unix timestamp in milliseconds
        xml_content: The serialized feed document
        parsed_channel: Typed channel rebuilt from xml_content
        public_url: URL assigned by an upload collaborator, if any
        file_id: Identifier assigned by an upload collaborator, if any
        type: "static" for a stored snapshot, "dynamic" for a live endpoint
    """
    id: str
    url: str
    created_at: int
    xml_content: str
    parsed_channel: FeedChannel
    public_url: str | None = None
    file_id: str | None = None
    type: str = "static"

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["parsed_channel"] = self.parsed_channel.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SavedFeed:
        return cls(
            id=data["id"],
            url=data["url"],
            created_at=int(data.get("created_at") or 0),
            xml_content=data.get("xml_content", ""),
            parsed_channel=FeedChannel.from_dict(data.get("parsed_channel") or {}),
            public_url=data.get("public_url"),
            file_id=data.get("file_id"),
            type=data.get("type", "static"),
        )
