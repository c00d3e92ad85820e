"""
Page fetching and sanitizing.

This package acquires raw page content through a fallback chain and
prepares it for the extraction prompt.
"""

from .fetcher import FetchResult, build_client, check_content, fetch_page, is_bot_challenge
from .sanitizer import sanitize

__all__ = [
    "FetchResult",
    "build_client",
    "check_content",
    "fetch_page",
    "is_bot_challenge",
    "sanitize",
]
