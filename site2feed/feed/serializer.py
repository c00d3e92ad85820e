"""
Render FeedChannels as RSS 2.0 documents.

Plain text goes through escape_xml, long free text through cdata, and the
document always starts with an XML 1.0 declaration.
"""

from __future__ import annotations

import re
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from .. import __version__
from ..enrich.enricher import now_rfc822
from ..types import FeedChannel, FeedItem

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
GENERATOR = f"site2feed {__version__}"

_XML_ESCAPES = {
    "<": "&lt;",
    ">": "&gt;",
    "&": "&amp;",
    "'": "&apos;",
    '"': "&quot;",
}
_XML_META_RE = re.compile(r"[<>&'\"]")
_INVALID_XML_CHARS_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_DECLARATION_RE = re.compile(r"^\s*<\?xml[^>]*\?>\s*", re.IGNORECASE)


def escape_xml(value: object) -> str:
    if value is None:
        return ""
    text = _XML_META_RE.sub(lambda m: _XML_ESCAPES[m.group(0)], str(value))
    return _INVALID_XML_CHARS_RE.sub("", text)


def cdata(value: object) -> str:
    if value is None:
        return ""
    text = _INVALID_XML_CHARS_RE.sub("", str(value))
    return "<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def force_xml_declaration(xml: str) -> str:
    """Replace whatever declaration the document has with the XML 1.0 one.

    Models sometimes emit `<?xml version="2.0"?>`, which XML parsers reject.
    """
    body = _DECLARATION_RE.sub("", xml.lstrip("\ufeff"), count=1)
    return f"{XML_DECLARATION}\n{body.lstrip()}"


_env = Environment(
    loader=FileSystemLoader(str(Path(__file__).resolve().parent.parent / "templates")),
    autoescape=False,
    keep_trailing_newline=False,
)
_env.filters["xml"] = escape_xml
_env.filters["cdata"] = cdata


def serialize(channel: FeedChannel) -> str:
    """Render a channel and its items as an RSS 2.0 string."""
    template = _env.get_template("feed.xml")
    return force_xml_declaration(template.render(channel=channel, generator=GENERATOR))


def error_feed(url: str, message: str, details: str = "") -> str:
    """Render an always-valid feed whose channel title carries the error."""
    template = _env.get_template("error.xml")
    xml = template.render(
        url=url or "",
        message=message,
        details=details or message,
        generator=GENERATOR,
    )
    return force_xml_declaration(xml)


def fetch_failed_channel(url: str) -> FeedChannel:
    """The explicit result used when no live content could be fetched."""
    return FeedChannel(
        title="Error: Could not fetch content",
        link=url,
        description="The target website could not be reached or blocked the request.",
        last_build_date=now_rfc822(),
        items=[
            FeedItem(
                title="Error: Fetch Failed",
                link=url,
                description=f"Could not retrieve live content from {url}",
                pub_date=now_rfc822(),
                guid=f"{url}#error",
            )
        ],
    )
