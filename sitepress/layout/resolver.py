"""Resolve layout references into cached, inherited template chains.

A layout file is a Jinja template. It may start with JSON front matter naming
its own parent layout::

    {
      "layout": "base.html"
    }
    {% macro sidebar() %}...{% endmacro %}

:class:`LayoutResolver` follows these references recursively. Each file is
compiled on top of a clone of its parent's :class:`TemplateSet`, so a layout
adds to or overrides its ancestors' blocks. Results are cached per resolved
path for the lifetime of the resolver, which is one build pass.

Example
-------
>>> from pathlib import Path
>>> resolver = LayoutResolver(Path("layout"), build_environment())
>>> resolver.resolve("", relative_to=Path("content")).path is None
True
"""

from __future__ import annotations

import dataclasses as dc
import logging
import os
import typing as typ
from pathlib import Path

import msgspec

from sitepress._errors import LayoutError
from sitepress._timeutil import EPOCH, file_mod_time
from sitepress.frontmatter import extract_front_matter, front_matter_end

from .template_set import BoundTemplateSet, TemplateSet, build_environment

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from jinja2 import Environment

logger = logging.getLogger(__name__)


class LayoutFrontMatter(msgspec.Struct, forbid_unknown_fields=True):
    """Front matter accepted at the top of a layout file."""

    layout: str = ""


@dc.dataclass(frozen=True, slots=True)
class LayoutEntry:
    """A resolved layout chain.

    Attributes
    ----------
    definition : TemplateSet
        Pristine template set for the whole chain; never rendered directly.
    mod_time : datetime
        Latest modification time of the file and all of its ancestors.
    path : Path or None
        Resolved file path, ``None`` for the empty layout.
    ancestors : tuple[Path, ...]
        Files of the chain from this layout up to the root layout.
    """

    definition: TemplateSet
    mod_time: dt.datetime
    path: Path | None = None
    ancestors: tuple[Path, ...] = ()

    @classmethod
    def empty(cls, environment: Environment) -> LayoutEntry:
        """Return the entry that stands for "no layout"."""
        return cls(definition=TemplateSet(environment), mod_time=EPOCH)

    def instantiate(self, helpers: cabc.Mapping[str, typ.Any]) -> BoundTemplateSet:
        """Return a disposable copy of the chain bound to ``helpers``."""
        return self.definition.instantiate(helpers)


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _comment_out(body: str, end: int) -> str:
    """Wrap the masked front matter of ``body`` in a Jinja comment.

    The comment keeps line numbers and, with ``trim_blocks``, also swallows
    the newline after the closing brace, so the block leaves no output.
    """
    return "{#" + body[:end] + "#}" + body[end:]


class LayoutResolver:
    """Resolve and cache layout chains for one build pass."""

    def __init__(
        self,
        root: Path,
        environment: Environment | None = None,
        *,
        reader: cabc.Callable[[Path], str] | None = None,
    ) -> None:
        """Initialize the resolver.

        Parameters
        ----------
        root : Path
            Directory that ``/``-prefixed layout references resolve against.
        environment : Environment, optional
            Jinja environment used to compile layouts.
        reader : Callable[[Path], str], optional
            Function returning the text of a layout file; defaults to reading
            UTF-8 from disk.
        """
        self.root = root
        self.environment = environment or build_environment()
        self._reader = reader or _read_text
        self._cache: dict[Path, LayoutEntry] = {}
        self._empty = LayoutEntry.empty(self.environment)

    def resolve_path(self, ref: str, relative_to: Path) -> Path:
        """Return the absolute file path for the layout reference ``ref``."""
        if ref.startswith("/"):
            path = self.root / ref.lstrip("/")
        else:
            path = relative_to / ref
        return Path(os.path.abspath(path))

    def resolve(self, ref: str, *, relative_to: Path) -> LayoutEntry:
        """Return the cached layout chain for ``ref``.

        Parameters
        ----------
        ref : str
            Layout reference; empty for no layout.
        relative_to : Path
            Directory of the referencing file.

        Raises
        ------
        LayoutError
            When the chain is recursive, or a layout cannot be decoded or
            compiled.
        FileNotFoundError
            When a layout in the chain does not exist.
        """
        return self._resolve(ref, relative_to, set())

    def _resolve(
        self, ref: str, relative_to: Path, in_progress: set[Path]
    ) -> LayoutEntry:
        if not ref:
            return self._empty
        path = self.resolve_path(ref, relative_to)
        cached = self._cache.get(path)
        if cached is not None:
            return cached
        if path in in_progress:
            msg = f"{path}: recursive layouts"
            raise LayoutError(msg)
        in_progress.add(path)
        try:
            entry = self._load(path, in_progress)
        finally:
            in_progress.discard(path)
        self._cache[path] = entry
        return entry

    def _load(self, path: Path, in_progress: set[Path]) -> LayoutEntry:
        logger.debug("Loading layout %s", path)
        text = self._reader(path)
        mod_time = file_mod_time(path)
        body, front = extract_front_matter(text, str(path), LayoutFrontMatter)
        parent = self._resolve(front.layout if front else "", path.parent, in_progress)
        if front is not None:
            body = _comment_out(body, front_matter_end(text))
        definition = parent.definition.clone()
        definition.add_source(body, str(path))
        return LayoutEntry(
            definition=definition,
            mod_time=max(mod_time, parent.mod_time),
            path=path,
            ancestors=(path, *parent.ancestors),
        )


__all__ = ["LayoutEntry", "LayoutFrontMatter", "LayoutResolver"]
