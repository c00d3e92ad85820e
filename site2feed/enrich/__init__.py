"""Per-item URL normalization and image enrichment."""

from .enricher import enrich_items, now_rfc822
from .images import IMAGE_EXTRACTORS, discover_image, is_disallowed_image, resolve_url

__all__ = [
    "IMAGE_EXTRACTORS",
    "discover_image",
    "enrich_items",
    "is_disallowed_image",
    "now_rfc822",
    "resolve_url",
]
