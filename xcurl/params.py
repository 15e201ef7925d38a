"""xcurl params - classify command tokens and merge them into a request."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from urllib.parse import parse_qsl, urlsplit, urlunsplit

from xcurl.errors import InvalidParameter, InvalidUrl

DEFAULT_SCHEME = "http://"
SCHEME_PREFIXES = ("http://", "https://")

SEP_HEADER = ":"
SEP_BODY = "="
SEP_QUERY = "=="

# Shorthand header names accepted in key:value items
HEADER_ALIASES = {
    "ct": "content-type",
    "ua": "user-agent",
}


class ParamKind(enum.Enum):
    QUERY = "query"
    HEADER = "header"
    BODY = "body"


@dataclass(frozen=True)
class Param:
    """A key/value pair tagged as query, header or body at parse time."""

    kind: ParamKind
    key: str
    value: str

    @classmethod
    def query(cls, key: str, value: str) -> Param:
        return cls(ParamKind.QUERY, key, value)

    @classmethod
    def header(cls, key: str, value: str) -> Param:
        return cls(ParamKind.HEADER, key, value)

    @classmethod
    def body(cls, key: str, value: str) -> Param:
        return cls(ParamKind.BODY, key, value)

    @property
    def is_query(self) -> bool:
        return self.kind is ParamKind.QUERY

    @property
    def is_header(self) -> bool:
        return self.kind is ParamKind.HEADER

    @property
    def is_body(self) -> bool:
        return self.kind is ParamKind.BODY


@dataclass(frozen=True)
class UrlPart:
    url: str
    query: tuple[Param, ...] = ()


@dataclass(frozen=True)
class ParsedArguments:
    """Aggregated request arguments.

    headers - lower-cased key -> value, last write wins
    query   - (key, value) pairs deduplicated by key, last write wins
    body    - (key, value) pairs in encounter order, duplicates kept
    """

    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    query: tuple[tuple[str, str], ...] = ()
    body: tuple[tuple[str, str], ...] = ()


def _is_utf8(text: str) -> bool:
    """False for undecodable argv bytes, which arrive as lone surrogates."""
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _printable(text: str) -> str:
    return text.encode("utf-8", "backslashreplace").decode("utf-8")


def parse_param(token: str) -> Param:
    """Classify a raw command token.

    Only the first ':' or '=' in the token matters:
      key:value   -> header
      key==value  -> query
      key=value   -> body
    Key and value are whitespace-trimmed.
    """
    if not _is_utf8(token):
        raise InvalidParameter(f"invalid parameter '{_printable(token)}': not valid UTF-8")
    positions = [p for p in (token.find(SEP_HEADER), token.find(SEP_BODY)) if p != -1]
    if not positions:
        raise InvalidParameter(f"invalid parameter '{token}': expected key:value, key=value or key==value")

    idx = min(positions)
    key = token[:idx].strip()
    rest = token[idx + 1 :]
    if not key:
        raise InvalidParameter(f"invalid parameter '{token}': empty key")

    if token[idx] == SEP_HEADER:
        return Param.header(key, rest.strip())
    if token.startswith(SEP_QUERY, idx):
        return Param.query(key, rest[1:].strip())
    return Param.body(key, rest.strip())


def parse_url(raw: str) -> UrlPart:
    """Normalize a URL and split its query string into query params.

    A missing http:// or https:// prefix gets http:// prepended.
    The fragment is dropped since it never goes over the wire.
    """
    raw = raw.strip()
    if not _is_utf8(raw):
        raise InvalidUrl(f"invalid url '{_printable(raw)}': not valid UTF-8")
    if not raw.lower().startswith(SCHEME_PREFIXES):
        raw = DEFAULT_SCHEME + raw

    try:
        parts = urlsplit(raw)
        # .port validates the port number and raises ValueError
        parts.port  # noqa: B018
    except ValueError as e:
        raise InvalidUrl(f"invalid url '{raw}': {e}") from e

    if not parts.hostname or any(c.isspace() for c in parts.netloc):
        raise InvalidUrl(f"invalid url '{raw}': missing or malformed host")

    netloc = parts.netloc
    if "@" in netloc:
        userinfo, host = netloc.rsplit("@", 1)
        netloc = f"{userinfo}@{host.lower()}"
    else:
        netloc = netloc.lower()

    url = urlunsplit((parts.scheme.lower(), netloc, parts.path or "/", "", ""))
    query = tuple(Param.query(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True))
    return UrlPart(url=url, query=query)


def header_key(key: str) -> str:
    """Lower-cased header name with shorthand aliases expanded."""
    key = key.lower()
    return HEADER_ALIASES.get(key, key)


def aggregate(
    url_query: Iterable[Param],
    params: Sequence[Param],
    default_headers: Mapping[str, str] | None = None,
    default_query: Iterable[tuple[str, str]] = (),
) -> ParsedArguments:
    """Merge URL query params with explicit params.

    Precedence, lowest first: profile defaults, URL query, explicit params.
    Query keys keep their first-insertion position when overridden.
    """
    headers: dict[str, str] = {}
    for key, value in (default_headers or {}).items():
        headers[header_key(key)] = value

    query: dict[str, str] = {}
    for key, value in default_query:
        query[key] = value
    for p in url_query:
        query[p.key] = p.value

    body: list[tuple[str, str]] = []
    for p in params:
        if p.kind is ParamKind.HEADER:
            headers[header_key(p.key)] = p.value
        elif p.kind is ParamKind.QUERY:
            query[p.key] = p.value
        elif p.kind is ParamKind.BODY:
            body.append((p.key, p.value))
        else:
            raise AssertionError(f"unhandled parameter kind: {p.kind}")

    return ParsedArguments(
        headers=MappingProxyType(headers),
        query=tuple(query.items()),
        body=tuple(body),
    )
