"""RSS serialization and parsing."""

from .parser import parse
from .serializer import (
    XML_DECLARATION,
    cdata,
    error_feed,
    escape_xml,
    fetch_failed_channel,
    force_xml_declaration,
    serialize,
)

__all__ = [
    "XML_DECLARATION",
    "cdata",
    "error_feed",
    "escape_xml",
    "fetch_failed_channel",
    "force_xml_declaration",
    "parse",
    "serialize",
]
