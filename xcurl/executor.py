"""xcurl executor - HTTP request execution."""

from __future__ import annotations

import logging

import requests

from xcurl.errors import TransportError
from xcurl.request import HttpRequest

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30

_HTTP_VERSIONS = {9: "HTTP/0.9", 10: "HTTP/1.0", 11: "HTTP/1.1", 20: "HTTP/2"}


class HttpResponse:
    """Response of an HTTP request."""

    def __init__(
        self,
        status_code: int = 0,
        reason: str = "",
        version: str = "HTTP/1.1",
        headers: list[tuple[str, str]] | None = None,
        body: str = "",
    ):
        self.status_code = status_code
        self.reason = reason
        self.version = version
        self.headers: list[tuple[str, str]] = headers or []
        self._body = body

    @property
    def status_line(self) -> str:
        return f"{self.version} {self.status_code} {self.reason}".rstrip()

    def header_dict(self) -> dict[str, str]:
        return dict(self.headers)

    def text(self) -> str:
        return self._body


def execute_request(request: HttpRequest, timeout: int = DEFAULT_TIMEOUT) -> HttpResponse:
    """Send a request and return the response.

    - Query pairs go out as params, the encoded body as raw data
    - Follows redirects
    - Raises TransportError on timeouts, connection and request errors
    """
    logger.debug("sending %s %s", request.method, request.full_url)
    try:
        resp = requests.request(
            method=request.method,
            url=request.url,
            params=list(request.query),
            headers=request.headers,
            data=request.body,
            timeout=timeout,
            allow_redirects=True,
        )
    except requests.exceptions.Timeout as e:
        raise TransportError(f"Request timed out after {timeout}s") from e
    except requests.exceptions.ConnectionError as e:
        raise TransportError(f"Connection error: {e}") from e
    except requests.exceptions.RequestException as e:
        raise TransportError(f"Request failed: {e}") from e

    raw_version = getattr(resp.raw, "version", None)
    response = HttpResponse(
        status_code=resp.status_code,
        reason=resp.reason or "",
        version=_HTTP_VERSIONS.get(raw_version, "HTTP/1.1"),
        headers=list(resp.headers.items()),
        body=resp.text,
    )
    logger.debug("received %s", response.status_line)
    return response
