"""Helper functions exposed to layouts while a page is rendered.

:class:`FunctionContext` is created per page. Its helpers resolve relative
paths against the URL directory of the page's source file and record the
modification time of every file and page they touch, which feeds the page's
aggregate modification time. :data:`STATIC_FUNCTIONS` do not depend on the
page and are installed as environment globals.

Example
-------
>>> extract_code("a\\nb OMIT\\nc\\nd\\n", ("/a/", "/c/"))
'a\\nc\\n'
"""

from __future__ import annotations

import datetime as dt
import glob as globlib
import os
import posixpath
import re
import typing as typ

import msgspec
from markupsafe import Markup

from sitepress._errors import PageError
from sitepress._timeutil import EPOCH, file_mod_time

from .renderer import HtmlContentRenderer

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from .models import Page
    from .registry import PageRegistry

_LIMIT_PATTERN = re.compile(r"limit:([0-9]+)")


def _time_now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


STATIC_FUNCTIONS: dict[str, cabc.Callable[..., typ.Any]] = {
    "path_base": posixpath.basename,
    "path_dir": posixpath.dirname,
    "path_join": posixpath.join,
    "time_now": _time_now,
}


def extract_code(text: str, patterns: cabc.Sequence[str]) -> str:
    """Return the part of ``text`` selected by ``patterns``.

    With no pattern the whole text is returned. One ``/regex/`` pattern
    selects the first matching line. Two patterns select the lines from the
    first match of the first pattern through the next match of the second;
    lines ending in ``OMIT`` are dropped from such a range.

    Raises
    ------
    ValueError
        When a pattern is malformed or does not match, or more than two
        patterns are given.
    """
    if not patterns:
        return text
    lines = text.splitlines(keepends=True)
    if len(patterns) == 1:
        return lines[_match_line(lines, patterns[0])]
    if len(patterns) == 2:
        first = _match_line(lines, patterns[0])
        last = first + _match_line(lines[first:], patterns[1])
        return "".join(
            line for line in lines[first : last + 1] if not line.endswith("OMIT\n")
        )
    msg = "> 2 patterns"
    raise ValueError(msg)


def _match_line(lines: cabc.Sequence[str], pattern: str) -> int:
    if len(pattern) < 2 or not (pattern.startswith("/") and pattern.endswith("/")):
        msg = f"invalid pattern {pattern!r}"
        raise ValueError(msg)
    try:
        regex = re.compile(pattern[1:-1])
    except re.error as exc:
        msg = f"invalid pattern {pattern!r}: {exc}"
        raise ValueError(msg) from exc
    for index, line in enumerate(lines):
        if regex.search(line):
            return index
    msg = f"pattern {pattern!r} not found"
    raise ValueError(msg)


def _sort_key_created(page: Page) -> dt.datetime:
    return page.created or EPOCH


class FunctionContext:
    """Page-bound helpers and the modification time they accumulate."""

    def __init__(
        self,
        *,
        content_dir: Path,
        url_dir: str,
        registry: PageRegistry,
        renderer: HtmlContentRenderer | None = None,
    ) -> None:
        """Initialize the context.

        Parameters
        ----------
        content_dir : Path
            Directory URL paths are resolved against.
        url_dir : str
            URL directory of the page's source file, e.g. ``/blog``.
        registry : PageRegistry
            Registry queried by :meth:`page` and :meth:`pages`.
        renderer : HtmlContentRenderer, optional
            Renderer used for markdown and code snippets.
        """
        self.content_dir = content_dir
        self.url_dir = url_dir
        self.registry = registry
        self.renderer = renderer or HtmlContentRenderer()
        self.mod_time = EPOCH

    @classmethod
    def for_file(
        cls,
        file_path: Path,
        *,
        content_dir: Path,
        registry: PageRegistry,
        renderer: HtmlContentRenderer | None = None,
    ) -> FunctionContext:
        """Return a context for the page stored at ``file_path``."""
        relative = file_path.parent.relative_to(content_dir).as_posix()
        return cls(
            content_dir=content_dir,
            url_dir=posixpath.normpath(f"/{relative}"),
            registry=registry,
            renderer=renderer,
        )

    def helpers(self) -> dict[str, cabc.Callable[..., typ.Any]]:
        """Return the helper functions keyed by template name."""
        return {
            "include": self.include,
            "include_html": self.include_html,
            "read_json": self.read_json,
            "glob": self.glob,
            "read_page": self.read_page,
            "pages": self.pages,
            "code": self.code,
            "markdown": self.markdown,
        }

    def resolve_url(self, upath: str) -> str:
        """Return ``upath`` as a normalized absolute URL path.

        Examples
        --------
        >>> from pathlib import Path
        >>> fc = FunctionContext(content_dir=Path("c"), url_dir="/blog", registry=None)
        >>> fc.resolve_url("../about/")
        '/about/'
        >>> fc.resolve_url("/x/./y.json")
        '/x/y.json'
        """
        joined = upath if upath.startswith("/") else posixpath.join(self.url_dir, upath)
        resolved = posixpath.normpath(joined)
        if upath.endswith("/") and resolved != "/":
            resolved += "/"
        return resolved

    def file_path(self, upath: str) -> Path:
        """Return the content file addressed by ``upath``."""
        url = self.resolve_url(upath)
        if url.endswith("/"):
            url += "index.html"
        return self.content_dir / url.lstrip("/")

    def include(self, upath: str) -> str:
        """Return the text of the content file ``upath``."""
        fpath = self.file_path(upath)
        text = fpath.read_text(encoding="utf-8")
        self._touch_file(fpath)
        return text

    def include_html(self, upath: str) -> Markup:
        """Return the content file ``upath`` as trusted HTML."""
        return Markup(self.include(upath))

    def read_json(self, upath: str) -> typ.Any:
        """Decode the JSON content file ``upath``."""
        fpath = self.file_path(upath)
        data = msgspec.json.decode(fpath.read_bytes())
        self._touch_file(fpath)
        return data

    def glob(self, pattern: str) -> list[str]:
        """Return URL paths of content files matching ``pattern``.

        Absolute patterns yield absolute URL paths; relative patterns yield
        paths relative to the page's directory.
        """
        url = self.resolve_url(pattern)
        root = globlib.escape(os.fspath(self.content_dir))
        matches = sorted(globlib.glob(root + url))
        if pattern.startswith("/"):
            start = os.fspath(self.content_dir)
            return [
                "/" + os.path.relpath(match, start).replace(os.sep, "/")
                for match in matches
            ]
        start = os.fspath(self.content_dir / self.url_dir.lstrip("/"))
        return [os.path.relpath(match, start).replace(os.sep, "/") for match in matches]

    def read_page(self, upath: str) -> Page:
        """Return the registered page at ``upath``.

        Raises
        ------
        PageError
            When no page is registered under the path.
        """
        url = self.resolve_url(upath)
        found = self.registry.lookup(url)
        if found is None:
            msg = f"page {url!r} not found"
            raise PageError(msg)
        self._touch(found.mod_time)
        return found

    def pages(self, pattern: str, *options: str) -> list[Page]:
        """Return registered pages whose path matches ``pattern``.

        Pages are ordered by path, then by each option in turn:
        ``sort:-created``, ``sort:created``, ``sort:title`` or ``limit:N``.

        Raises
        ------
        PageError
            When an option is not recognized.
        """
        found = sorted(
            self.registry.glob_match(self.resolve_url(pattern)),
            key=lambda page: page.path,
        )
        for page in found:
            self._touch(page.mod_time)
        for option in options:
            if option == "sort:-created":
                found.sort(key=_sort_key_created, reverse=True)
            elif option == "sort:created":
                found.sort(key=_sort_key_created)
            elif option == "sort:title":
                found.sort(key=lambda page: page.title)
            elif (limit := _LIMIT_PATTERN.fullmatch(option)) is not None:
                found = found[: int(limit.group(1))]
            else:
                msg = f"pages: invalid option {option!r}"
                raise PageError(msg)
        return found

    def code(self, upath: str, *patterns: str, lang: str | None = None) -> Markup:
        """Return a highlighted snippet of the content file ``upath``.

        Raises
        ------
        PageError
            When the patterns do not select a snippet.
        """
        fpath = self.file_path(upath)
        text = fpath.read_text(encoding="utf-8")
        self._touch_file(fpath)
        try:
            snippet = extract_code(text, patterns)
        except ValueError as exc:
            msg = f"code {upath!r} {list(patterns)}: {exc}"
            raise PageError(msg) from exc
        snippet = snippet.removesuffix("\n").replace("\t", "    ")
        language = lang or self.renderer.language_for(fpath.name)
        return Markup(self.renderer.code_block(snippet, language))

    def markdown(self, text: str) -> Markup:
        """Render markdown ``text`` to HTML."""
        return Markup(self.renderer.markdown(text))

    def _touch_file(self, fpath: Path) -> None:
        self._touch(file_mod_time(fpath))

    def _touch(self, mod_time: dt.datetime) -> None:
        self.mod_time = max(self.mod_time, mod_time)


__all__ = ["STATIC_FUNCTIONS", "FunctionContext", "extract_code"]
