"""xcurl content - content type negotiation, body encoding and formatting."""

from __future__ import annotations

import enum
import json
import logging
from collections.abc import Mapping, Sequence
from urllib.parse import urlencode

from xcurl.errors import MalformedBody, UnsupportedEncoding

logger = logging.getLogger(__name__)

CONTENT_TYPE = "content-type"


class ContentType(enum.Enum):
    JSON = "application/json"
    FORM_URLENCODED = "application/x-www-form-urlencoded"
    MULTIPART = "multipart/form-data"
    XML = "application/xml"
    HTML = "text/html"
    TEXT = "text/plain"

    @classmethod
    def from_mime(cls, mime: str | None) -> ContentType | None:
        """Match a bare MIME type (no parameters) against the enumeration."""
        if not mime:
            return None
        mime = mime.strip().lower()
        for ct in cls:
            if ct.value == mime:
                return ct
        return _MIME_ALIASES.get(mime)


_MIME_ALIASES = {
    "text/xml": ContentType.XML,
}

# Syntax kinds used to pick a highlighter lexer
_SYNTAX_KINDS = {
    ContentType.JSON: "json",
    ContentType.XML: "xml",
    ContentType.HTML: "html",
}


def _header_value(headers: Mapping[str, str], name: str) -> str | None:
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def request_content_type(headers: dict[str, str], form: bool = False, multipart: bool = False) -> str:
    """Negotiate the outgoing content type and write it into headers.

    Precedence: explicit content-type header, --form, --multipart, JSON.
    Returns the full header value that ends up in headers.
    """
    explicit = _header_value(headers, CONTENT_TYPE)
    if explicit is not None:
        return explicit

    if form:
        ct = ContentType.FORM_URLENCODED
    elif multipart:
        ct = ContentType.MULTIPART
    else:
        ct = ContentType.JSON
    headers[CONTENT_TYPE] = ct.value
    logger.debug("negotiated request content type: %s", ct.value)
    return ct.value


def response_content_type(headers: Mapping[str, str]) -> ContentType:
    """Content type of a response; absent or unknown types count as JSON."""
    value = _header_value(headers, CONTENT_TYPE)
    if value is None:
        return ContentType.JSON
    return ContentType.from_mime(value.split(";", 1)[0]) or ContentType.JSON


def encode_body(body: Sequence[tuple[str, str]], content_type: str | ContentType) -> bytes:
    """Serialize body params for the negotiated content type.

    JSON builds an object (last duplicate key wins). Form and multipart
    use query-string encoding, keeping repeated keys and bracket notation
    like tags[0]=a in encounter order.
    """
    if isinstance(content_type, ContentType):
        ct, mime = content_type, content_type.value
    else:
        mime = content_type.split(";", 1)[0].strip()
        ct = ContentType.from_mime(mime)

    if ct is ContentType.JSON:
        return json.dumps(dict(body), separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    if ct in (ContentType.FORM_URLENCODED, ContentType.MULTIPART):
        return urlencode(list(body), safe="[]").encode("utf-8")
    raise UnsupportedEncoding(mime)


def format_body(text: str | None, content_type: ContentType) -> tuple[str, str | None]:
    """Render a body for humans.

    Returns (syntax_kind, text). No text gives ("", None). JSON is
    pretty-printed and must parse; everything else passes through.
    """
    if not text:
        return ("", None)

    if content_type is ContentType.JSON:
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedBody(f"body is not valid JSON: {e}") from e
        return ("json", json.dumps(parsed, indent=2, ensure_ascii=False))

    return (_SYNTAX_KINDS.get(content_type, "txt"), text)
