"""Shared records used by the page processing pipeline."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import typing as typ
from pathlib import Path

import msgspec
from markupsafe import Markup

from sitepress._timeutil import EPOCH

from .scratch import Scratch


class PageFrontMatter(msgspec.Struct, forbid_unknown_fields=True):
    """Front matter accepted at the top of a page.

    Attributes
    ----------
    title, subtitle : str
        Display strings for the page.
    created, updated : datetime or None
        RFC 3339 timestamps.
    layout : str
        Layout reference, relative to the page or ``/``-prefixed.
    params : dict[str, Any]
        Arbitrary data for use by layouts.
    """

    title: str = ""
    subtitle: str = ""
    created: dt.datetime | None = None
    updated: dt.datetime | None = None
    layout: str = ""
    params: dict[str, typ.Any] = msgspec.field(default_factory=dict)


@dc.dataclass(slots=True)
class Page:
    """Metadata and content of one rendered page.

    Mutated by front-matter decoding and by ``set`` actions while the page
    is processed; treated as read-only once it is in the registry.
    """

    path: str
    title: str = ""
    subtitle: str = ""
    created: dt.datetime | None = None
    updated: dt.datetime | None = None
    layout: str = ""
    params: dict[str, typ.Any] = dc.field(default_factory=dict)
    content: Markup = Markup("")
    mod_time: dt.datetime = EPOCH
    file_path: Path | None = None
    scratch: Scratch = dc.field(default_factory=Scratch)

    def apply_front_matter(self, front: PageFrontMatter) -> None:
        """Copy decoded front-matter fields onto the page."""
        self.title = front.title
        self.subtitle = front.subtitle
        self.created = front.created
        self.updated = front.updated
        self.layout = front.layout
        self.params = dict(front.params)


@dc.dataclass(slots=True)
class Resource:
    """One output file of the site.

    Attributes
    ----------
    path : str
        URL path with a leading slash; a trailing slash addresses an index.
    file_path : Path
        Source file on disk.
    mod_time : datetime
        Aggregate modification time of the output.
    size : int
        Output size in bytes.
    data : bytes or None
        Rendered bytes; ``None`` when the source file is copied verbatim.
    redirect : str or None
        Target URL when the resource is a redirect; ``data`` then holds a
        page that sends the browser there.
    """

    path: str
    file_path: Path
    mod_time: dt.datetime
    size: int = 0
    data: bytes | None = None
    redirect: str | None = None


__all__ = ["Page", "PageFrontMatter", "Resource"]
