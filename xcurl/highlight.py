"""xcurl highlight - Pygments syntax highlighting for terminal output.

The syntax and theme registries are built once per process, on first use,
and are read-only afterwards.
"""

from __future__ import annotations

import io
import threading
from collections.abc import Callable, Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Generic, TypeVar

import pygments.lexers
import pygments.styles
from pygments.formatters.terminal256 import TerminalTrueColorFormatter
from pygments.lexer import Lexer
from pygments.lexers.special import TextLexer
from pygments.style import Style

from xcurl.errors import ConfigError, RenderError

DEFAULT_THEME = "monokai"

T = TypeVar("T")


class LazyRegistry(Generic[T]):
    """Thread-safe, load-once cell. Racing callers all see one value."""

    def __init__(self, loader: Callable[[], T]):
        self._loader = loader
        self._lock = threading.Lock()
        self._value: T | None = None

    def get(self) -> T:
        value = self._value
        if value is None:
            with self._lock:
                if self._value is None:
                    self._value = self._loader()
                value = self._value
        return value

    @property
    def loaded(self) -> bool:
        return self._value is not None


def _load_syntaxes() -> Mapping[str, str]:
    """Map lexer aliases, then filename extensions, to lexer names."""
    lexers = list(pygments.lexers.get_all_lexers())
    syntaxes: dict[str, str] = {}
    for name, aliases, _filenames, _mimetypes in lexers:
        for alias in aliases:
            syntaxes.setdefault(alias.lower(), name)
    for name, _aliases, filenames, _mimetypes in lexers:
        for pattern in filenames:
            if pattern.startswith("*.") and not any(c in pattern[2:] for c in "*?["):
                syntaxes.setdefault(pattern[2:].lower(), name)
    return MappingProxyType(syntaxes)


def _load_themes() -> Mapping[str, type[Style]]:
    return MappingProxyType({name: pygments.styles.get_style_by_name(name) for name in pygments.styles.get_all_styles()})


SYNTAX_SET: LazyRegistry[Mapping[str, str]] = LazyRegistry(_load_syntaxes)
THEME_SET: LazyRegistry[Mapping[str, type[Style]]] = LazyRegistry(_load_themes)


def available_themes() -> list[str]:
    return sorted(THEME_SET.get())


def find_lexer(kind: str) -> Lexer:
    """Lexer for a syntax kind (json, xml, html, yaml, ...); plain text if unknown."""
    name = SYNTAX_SET.get().get(kind.lower()) if kind else None
    lexer_class = pygments.lexers.find_lexer_class(name) if name else None
    return (lexer_class or TextLexer)(stripnl=False, ensurenl=False)


def find_theme(theme: str | None) -> type[Style]:
    """Style class by name. An unknown name is a configuration error."""
    name = theme or DEFAULT_THEME
    try:
        return THEME_SET.get()[name]
    except KeyError:
        raise ConfigError(f"unknown theme '{name}'. Run 'xcurl themes' to list themes.") from None


def _split_lines(tokens: Iterable[tuple]) -> Iterator[list[tuple]]:
    """Group a token stream into lines, each ending with its newline."""
    line: list[tuple] = []
    for ttype, value in tokens:
        while "\n" in value:
            head, value = value.split("\n", 1)
            line.append((ttype, head + "\n"))
            yield line
            line = []
        if value:
            line.append((ttype, value))
    if line:
        yield line


def highlight_text(text: str, kind: str, theme: str | None = None) -> str:
    """Highlight text line by line and return 24-bit ANSI escaped output."""
    style = find_theme(theme)
    lexer = find_lexer(kind)
    formatter = TerminalTrueColorFormatter(style=style)

    out = io.StringIO()
    try:
        for line in _split_lines(lexer.get_tokens(text)):
            formatter.format(line, out)
    except (OSError, ValueError) as e:
        raise RenderError(f"failed to highlight {kind or 'text'}: {e}") from e
    return out.getvalue()
