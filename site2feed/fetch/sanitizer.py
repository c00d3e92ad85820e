"""Reduce fetched HTML to a compact string the model can take as input."""

from __future__ import annotations

import re

DEFAULT_MAX_CHARS = 150_000

_SCRIPT_RE = re.compile(r"<script\b[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style\b[^>]*>.*?</style>", re.IGNORECASE | re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")


def sanitize(html: str, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """Strip script/style blocks, collapse whitespace and truncate.

    Examples:
        >>> sanitize("<p>a</p>\\n<script>x()</script>\\n\\n<b>b</b>")
        '<p>a</p> <b>b</b>'
    """
    if not html:
        return ""
    text = _SCRIPT_RE.sub("", html)
    text = _STYLE_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text).strip()
    return text[:max_chars]
