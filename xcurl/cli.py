"""xcurl CLI - curl-like HTTP client with classified key/value arguments."""

import logging
import sys

import click

from xcurl import __version__

TOOL_HELP = """\
xcurl — curl-like HTTP client.

Builds a request from a URL and loosely-typed key/value items, sends it,
and prints the response body on stdout and the status line plus headers
on stderr. Output is syntax-highlighted when the stream is a terminal.

\b
ITEMS
─────
  key:value     request header       (ct:text/plain, accept:*/*)
  key==value    query parameter      (page==2)
  key=value     body field           (name=bob)

  Only the first ':' or '=' decides the kind, so values may contain
  either character. Query params embedded in the URL are merged with
  key==value items; explicit items win on duplicate keys.

\b
EXAMPLES
────────
  xcurl get httpbin.org/get page==2 accept:application/json
  xcurl post localhost:8000/items name=bob tag=a tag=b
  xcurl post localhost:8000/login --form user=bob pass=secret
  xcurl http -m PUT example.test/items/1 name=alice --offline

\b
BODY ENCODING
─────────────
  The body is JSON unless a content-type header is given or --form /
  --multipart is set. Form and multipart bodies are query-string
  encoded and keep repeated keys (tag=a&tag=b). Any other content type
  cannot encode body fields and is rejected before sending.

\b
PROFILES (.xcurl.yaml)
──────────────────────
  Profile resolution order:
    1. -c/--config flag (explicit path)
    2. -p/--profile NAME -> ~/.xcurl/NAME.yaml
    3. .xcurl.yaml / .xcurl.yml / xcurl.yaml / xcurl.yml in CWD
    4. ~/.xcurl/config.yaml (global)

  \b
  common:
    env_file: .env                  # load .env file
    headers:
      authorization: Bearer ${API_TOKEN}
    query:
      page: 1
      filter: {status: [open]}      # filter[status][0]=open
    theme: monokai
    timeout: 30

  Profile headers and query are the lowest-precedence layer.

\b
OUTPUT
──────
  --offline prints the request that would be sent instead of sending it.
  --color/--no-color overrides terminal detection for both streams.
  xcurl themes lists the available highlight themes.
"""


@click.group(help=TOOL_HELP, context_settings={"max_content_width": 88})
@click.version_option(__version__, prog_name="xcurl")
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Log request building and transport details to stderr.",
)
def main(verbose):
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )


def _request_options(f):
    """Options shared by every request subcommand."""
    options = [
        click.argument("url"),
        click.argument("items", nargs=-1),
        click.option(
            "-F",
            "--form",
            is_flag=True,
            default=False,
            help="Send body items as application/x-www-form-urlencoded.",
        ),
        click.option(
            "-f",
            "--multipart",
            is_flag=True,
            default=False,
            help="Send body items as multipart/form-data.",
        ),
        click.option(
            "--offline",
            is_flag=True,
            default=False,
            help="Print the request instead of sending it.",
        ),
        click.option(
            "--color/--no-color",
            "color",
            default=None,
            help="Force highlighting on or off. Default: on for terminals.",
        ),
        click.option(
            "--theme",
            envvar="XCURL_THEME",
            default=None,
            help="Highlight theme. Default: monokai.",
        ),
        click.option(
            "-c",
            "--config",
            "config_file",
            envvar="XCURL_CONFIG",
            default=None,
            help="Profile file path. Default: .xcurl.yaml in CWD, then ~/.xcurl/config.yaml.",
        ),
        click.option(
            "-p",
            "--profile",
            envvar="XCURL_PROFILE",
            default=None,
            help="Named profile, loaded from ~/.xcurl/NAME.yaml.",
        ),
        click.option(
            "--timeout",
            type=int,
            envvar="XCURL_TIMEOUT",
            default=None,
            help="Request timeout in seconds. Default: 30.",
        ),
    ]
    for option in reversed(options):
        f = option(f)
    return f


@main.command("http")
@click.option("-m", "--method", default="GET", help="HTTP method. Default: GET.")
@_request_options
def http_cmd(method, **kwargs):
    """Do an HTTP request with any method."""
    _cmd_request(method, **kwargs)


def _method_command(method):
    @_request_options
    def command(**kwargs):
        _cmd_request(method, **kwargs)

    return main.command(
        method.lower(),
        help=f"Do HTTP {method}. Same as `xcurl http -m {method}`.",
    )(command)


get_cmd = _method_command("GET")
post_cmd = _method_command("POST")
put_cmd = _method_command("PUT")
patch_cmd = _method_command("PATCH")
delete_cmd = _method_command("DELETE")


@main.command("themes")
def themes_cmd():
    """List available highlight themes."""
    from xcurl.highlight import DEFAULT_THEME, available_themes

    for name in available_themes():
        marker = " (default)" if name == DEFAULT_THEME else ""
        click.echo(f"{name}{marker}")


# ── Request pipeline ─────────────────────────────────────────────────────


def _cmd_request(
    method,
    url,
    items,
    form,
    multipart,
    offline,
    color,
    theme,
    config_file,
    profile,
    timeout,
):
    from xcurl import executor
    from xcurl.core import build_defaults, load_config, resolve_config_path
    from xcurl.errors import XcurlError
    from xcurl.output import select_output
    from xcurl.params import parse_param, parse_url
    from xcurl.request import build_request

    stdout_color, stderr_color = _color_modes(color)

    try:
        config = load_config(resolve_config_path(config_file, profile))
        defaults = build_defaults(config)

        url_part = parse_url(url)
        params = [parse_param(item) for item in items]
        request = build_request(
            method,
            url_part,
            params,
            form=form,
            multipart=multipart,
            defaults=defaults,
        )

        output = select_output(stdout_color, stderr_color, theme=theme or defaults.get("theme"))
        if offline:
            rendered = output.render_request(request)
        else:
            response = executor.execute_request(
                request,
                timeout=_resolve_timeout(timeout, defaults.get("timeout")),
            )
            rendered = output.render_response(response)
    except XcurlError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(1)

    click.echo(rendered.stderr_text, err=True, nl=False, color=stderr_color)
    stdout = rendered.stdout_text
    click.echo(stdout, nl=bool(stdout) and not stdout.endswith("\n"), color=stdout_color)


# ── Helpers ──────────────────────────────────────────────────────────────


def _color_modes(color):
    """Per-stream color modes: the --color/--no-color override or isatty()."""
    if color is not None:
        return (color, color)
    return (_isatty(sys.stdout), _isatty(sys.stderr))


def _isatty(stream):
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def _resolve_timeout(*sources, default=30):
    """Return the first truthy timeout from sources, or default."""
    for t in sources:
        if t:
            return t
    return default

