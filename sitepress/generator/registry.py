"""Thread-safe index of built pages keyed by their final output path.

A build pass inserts each page once, under the path it ends up with after
``set path=...``; the path it was discovered under is kept as an alias so
both resolve. A finished pass is published to long-lived readers with
:meth:`PageRegistry.replace`, which swaps the whole mapping at once.

Example
-------
>>> from sitepress.generator.models import Page
>>> registry = PageRegistry()
>>> registry.insert("/blog/a/", Page(path="/blog/a/", title="A"))
>>> [page.title for page in registry.glob_match("/blog/*/")]
['A']
"""

from __future__ import annotations

import fnmatch
import threading
import typing as typ

if typ.TYPE_CHECKING:
    from .models import Page


def match_path(pattern: str, path: str) -> bool:
    """Return whether ``path`` matches the shell-style ``pattern``.

    Matching is per ``/``-separated segment, so ``*`` never crosses a
    separator.

    Examples
    --------
    >>> match_path("/blog/*/", "/blog/post/")
    True
    >>> match_path("/blog/*", "/blog/2024/post")
    False
    """
    pattern_parts = pattern.split("/")
    path_parts = path.split("/")
    if len(pattern_parts) != len(path_parts):
        return False
    return all(
        fnmatch.fnmatchcase(part, pattern_part)
        for part, pattern_part in zip(path_parts, pattern_parts, strict=True)
    )


class PageRegistry:
    """Mapping from output path to :class:`~sitepress.generator.models.Page`."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pages: dict[str, Page] = {}
        self._aliases: dict[str, str] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._pages)

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._pages or path in self._aliases

    def insert(self, path: str, page: Page, *, alias: str | None = None) -> None:
        """Register ``page`` under ``path`` and optionally an ``alias``."""
        with self._lock:
            self._pages[path] = page
            if alias is not None and alias != path:
                self._aliases[alias] = path

    def lookup(self, path: str) -> Page | None:
        """Return the page registered under ``path`` or its alias."""
        with self._lock:
            page = self._pages.get(path)
            if page is None and path in self._aliases:
                page = self._pages.get(self._aliases[path])
            return page

    def glob_match(self, pattern: str) -> list[Page]:
        """Return pages whose final path matches ``pattern``.

        Pages come back in registry order; callers needing a stable order
        sort the result.
        """
        with self._lock:
            return [
                page for path, page in self._pages.items() if match_path(pattern, path)
            ]

    def paths(self) -> list[str]:
        """Return every registered final path."""
        with self._lock:
            return list(self._pages)

    def replace(self, other: PageRegistry) -> None:
        """Atomically replace this registry's contents with ``other``'s."""
        with other._lock:
            pages = dict(other._pages)
            aliases = dict(other._aliases)
        with self._lock:
            self._pages = pages
            self._aliases = aliases


__all__ = ["PageRegistry", "match_path"]
