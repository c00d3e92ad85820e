"""
site2feed - turn any website into an RSS feed with an LLM.

The page is fetched through a fallback chain, the model extracts items as
JSON, items are enriched with images, and the result is serialized as
RSS 2.0. The parser reads such documents back into typed channels.

Main entry points are the CLI (`site2feed generate URL`) and the HTTP
endpoint (`site2feed serve`).

Example:
    $ site2feed generate https://example.com/blog -o blog.xml
"""

__version__ = "0.1.0"

from .decoder import decode
from .feed.parser import parse
from .feed.serializer import serialize
from .runner import GenerationResult, generate_feed
from .types import FeedChannel, FeedItem, RawExtraction, SavedFeed

__all__ = [
    "__version__",
    "FeedChannel",
    "FeedItem",
    "GenerationResult",
    "RawExtraction",
    "SavedFeed",
    "decode",
    "generate_feed",
    "parse",
    "serialize",
]
