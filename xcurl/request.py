"""xcurl request - assemble an outgoing request from classified params."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from urllib.parse import urlencode, urlsplit

from xcurl.content import encode_body, request_content_type
from xcurl.params import Param, UrlPart, aggregate

logger = logging.getLogger(__name__)

HTTP_VERSION = "HTTP/1.1"


@dataclass
class HttpRequest:
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    query: tuple[tuple[str, str], ...] = ()
    body: bytes | None = None
    version: str = HTTP_VERSION

    @property
    def full_url(self) -> str:
        if not self.query:
            return self.url
        return f"{self.url}?{urlencode(list(self.query))}"

    @property
    def path(self) -> str:
        return urlsplit(self.url).path or "/"


def build_request(
    method: str,
    url_part: UrlPart,
    params: Sequence[Param],
    form: bool = False,
    multipart: bool = False,
    defaults: Mapping | None = None,
) -> HttpRequest:
    """Aggregate params, negotiate the content type and encode the body.

    defaults may carry profile "headers" (mapping) and "query" (pairs),
    layered beneath the URL query and explicit params. Raises
    UnsupportedEncoding before anything is sent.
    """
    defaults = defaults or {}
    args = aggregate(
        url_part.query,
        params,
        default_headers=defaults.get("headers"),
        default_query=defaults.get("query") or (),
    )

    headers = dict(args.headers)
    content_type = request_content_type(headers, form=form, multipart=multipart)

    body = None
    if args.body:
        body = encode_body(args.body, content_type)

    request = HttpRequest(
        method=method.upper(),
        url=url_part.url,
        headers=headers,
        query=args.query,
        body=body,
    )
    logger.debug("built request: %s %s", request.method, request.full_url)
    return request
