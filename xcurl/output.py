"""xcurl output - render requests and responses for the terminal.

Every render returns a RenderedOutput: the body goes to stdout, the status
line and headers go to stderr.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import click

from xcurl.content import format_body, response_content_type
from xcurl.executor import HttpResponse
from xcurl.highlight import find_theme, highlight_text
from xcurl.request import HttpRequest


@dataclass(frozen=True)
class RenderedOutput:
    stdout_text: str = ""
    stderr_text: str = ""


def header_text(headers: Iterable[tuple[str, str]]) -> str:
    """Headers as YAML-like 'key: value' lines, in iteration order."""
    return "".join(f"{key}: {value}\n" for key, value in headers)


def _request_body_text(request: HttpRequest) -> str | None:
    if request.body is None:
        return None
    return request.body.decode("utf-8", errors="replace")


class Output:
    """Renders a response or an offline request preview."""

    def render_response(self, response: HttpResponse) -> RenderedOutput:
        raise NotImplementedError

    def render_request(self, request: HttpRequest) -> RenderedOutput:
        raise NotImplementedError


class PlainOutput(Output):
    def render_response(self, response: HttpResponse) -> RenderedOutput:
        ct = response_content_type(response.header_dict())
        _, body = format_body(response.text(), ct)
        stderr = f"{response.status_line}\n{header_text(response.headers)}"
        return RenderedOutput(stdout_text=body or "", stderr_text=stderr)

    def render_request(self, request: HttpRequest) -> RenderedOutput:
        ct = response_content_type(request.headers)
        _, body = format_body(_request_body_text(request), ct)
        stderr = f"{request.method} {request.path} {request.version}\n"
        stderr += header_text(request.headers.items())
        if body is not None:
            stderr += body
        return RenderedOutput(stderr_text=stderr)


class ColorfulOutput(Output):
    """Highlights each stream whose color mode is on."""

    def __init__(self, stdout_color_mode: bool, stderr_color_mode: bool, theme: str | None = None):
        self.stdout_color_mode = stdout_color_mode
        self.stderr_color_mode = stderr_color_mode
        self.theme = theme

    def render_response(self, response: HttpResponse) -> RenderedOutput:
        ct = response_content_type(response.header_dict())
        kind, body = format_body(response.text(), ct)

        stdout = ""
        if body is not None:
            stdout = self._maybe_highlight(body, kind, self.stdout_color_mode)

        stderr = f"{response.status_line}\n"
        stderr += self._maybe_highlight(header_text(response.headers), "yaml", self.stderr_color_mode)
        return RenderedOutput(stdout_text=stdout, stderr_text=stderr)

    def render_request(self, request: HttpRequest) -> RenderedOutput:
        ct = response_content_type(request.headers)
        kind, body = format_body(_request_body_text(request), ct)

        if self.stderr_color_mode:
            head_line = " ".join(
                [
                    click.style(request.method, fg="yellow"),
                    click.style(request.path, fg="white"),
                    click.style(request.version, fg="green"),
                ],
            )
        else:
            head_line = f"{request.method} {request.path} {request.version}"

        stderr = head_line + "\n"
        stderr += self._maybe_highlight(header_text(request.headers.items()), "yaml", self.stderr_color_mode)
        if body is not None:
            stderr += self._maybe_highlight(body, kind, self.stderr_color_mode)
        return RenderedOutput(stderr_text=stderr)

    def _maybe_highlight(self, text: str, kind: str, color_mode: bool) -> str:
        if not color_mode:
            return text
        return highlight_text(text, kind, self.theme)


def select_output(stdout_color_mode: bool, stderr_color_mode: bool, theme: str | None = None) -> Output:
    """Pick the renderer once from the per-stream color modes.

    An unknown theme fails here rather than mid-render.
    """
    if not (stdout_color_mode or stderr_color_mode):
        return PlainOutput()
    find_theme(theme)
    return ColorfulOutput(stdout_color_mode, stderr_color_mode, theme)
