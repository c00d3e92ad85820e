"""
Repair and parse model output into a RawExtraction.

Model output is unreliable: it may be wrapped in a markdown fence, carry
literal control characters, contain broken \\u escapes, or be cut off
before the closing brackets. Decoding runs an ordered chain of pure
repair functions; after each one the candidate is handed to json.loads and
the first candidate that parses to a JSON object wins.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable

from .errors import DecodeError
from .logging_utils import log_event
from .types import RawExtraction

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)
_OPEN_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*", re.IGNORECASE)
_CONTROL_RE = re.compile(r"[\x00-\x1F\x7F]")
# A \u escape not followed by four hex digits, where the backslash is not itself escaped.
_BAD_UNICODE_RE = re.compile(r"(?<!\\)((?:\\\\)*)\\u(?![0-9a-fA-F]{4})")


def strip_code_fence(text: str) -> str:
    """Return the body of a ```json fence, or the text unchanged.

    A fence whose closing marker was truncated away is also removed.
    """
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1)
    return _OPEN_FENCE_RE.sub("", text, count=1)


def strip_control_chars(text: str) -> str:
    return _CONTROL_RE.sub("", text)


def escape_invalid_unicode(text: str) -> str:
    r"""Turn a dangling ``\u`` into a literal ``\\u`` so the parser accepts it."""
    return _BAD_UNICODE_RE.sub(r"\1\\\\u", text)


def clean(text: str) -> str:
    """Apply the fence, control character and escape repairs in order."""
    return escape_invalid_unicode(strip_control_chars(strip_code_fence(text)))


def close_truncated(text: str) -> str | None:
    """Close an items array cut off mid-stream.

    Everything after the last complete object is dropped, so a half-written
    trailing item never survives. Returns None when the text is not a
    truncated items payload.
    """
    stripped = text.strip()
    if stripped.endswith("}") or '"items"' not in stripped:
        return None
    last_close = stripped.rfind("}")
    if last_close == -1:
        return None
    repaired = stripped[: last_close + 1] + "]}"
    if not repaired.startswith("{"):
        repaired = "{" + repaired
    return repaired


def outer_object(text: str) -> str | None:
    """Return the substring from the first '{' to the last '}'."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


DecodeStep = Callable[[str, str], "str | None"]

# Each step receives (cleaned_text, raw_text) and returns a candidate or None.
DECODE_STEPS: tuple[tuple[str, DecodeStep], ...] = (
    ("cleaned", lambda cleaned, raw: cleaned),
    ("close_truncated", lambda cleaned, raw: close_truncated(cleaned)),
    ("outer_object", lambda cleaned, raw: outer_object(cleaned)),
    ("raw_outer_object", lambda cleaned, raw: outer_object(raw)),
)


def decode(raw_text: str) -> RawExtraction:
    """Decode raw model text into a RawExtraction.

    Raises:
        DecodeError: If no repair strategy yields a JSON object
    """
    if not raw_text or not raw_text.strip():
        raise DecodeError("Empty model response", raw_text or "")

    cleaned = clean(raw_text)
    last_error = "no JSON object found"
    for name, step in DECODE_STEPS:
        candidate = step(cleaned, raw_text)
        if candidate is None:
            continue
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError as exc:
            last_error = str(exc)
            continue
        if not isinstance(data, dict):
            last_error = f"expected a JSON object, got {type(data).__name__}"
            continue
        if name != "cleaned":
            log_event(logger, "Model output repaired", logging.DEBUG, event="decode_repaired", step=name)
        return to_extraction(data)

    raise DecodeError(f"Failed to parse AI response JSON: {last_error}", raw_text)


def to_extraction(data: dict[str, Any]) -> RawExtraction:
    """Coerce a parsed object into a RawExtraction, tolerating a missing items list."""
    items = data.get("items")
    if not isinstance(items, list):
        items = []
    return RawExtraction(
        title=_as_text(data.get("title")),
        description=_as_text(data.get("description")),
        items=[item for item in items if isinstance(item, dict)],
    )


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
