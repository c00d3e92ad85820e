"""
Exception taxonomy for the feed generation pipeline.

- ConfigError: missing credential or invalid configuration (fatal, no retry)
- FetchFailure: a single acquisition attempt failed (recovered by fallbacks)
- ExtractionError: the LLM endpoint returned a non-success response
- DecodeError: model output could not be repaired into JSON
- ParseError: a syndication document could not be read back
"""

from __future__ import annotations


class Site2FeedError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(Site2FeedError):
    """Raised when required configuration (e.g. the API key) is missing."""


class FetchFailure(Site2FeedError):
    """Raised by a single fetch strategy; never escapes fetch_page."""

    def __init__(self, strategy: str, url: str, reason: str):
        super().__init__(f"{strategy} fetch failed for {url}: {reason}")
        self.strategy = strategy
        self.url = url
        self.reason = reason


class ExtractionError(Site2FeedError):
    """Raised when the completion endpoint fails or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        if status_code is not None:
            message = f"LLM endpoint error {status_code}: {message}"
        super().__init__(message)
        self.status_code = status_code


class DecodeError(Site2FeedError):
    """Raised when every repair strategy failed to produce a JSON object."""

    def __init__(self, message: str, raw_text: str = ""):
        self.raw_excerpt = raw_text[:100]
        super().__init__(f"{message} | Content head: {self.raw_excerpt}")


class ParseError(Site2FeedError):
    """Raised when a feed document is malformed; the user should regenerate."""
