"""Typed dataclasses describing a sitepress site directory."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path  # noqa: TC003 - used for runtime type metadata

from sitepress._constants import DEFAULT_LEFT_DELIM, DEFAULT_RIGHT_DELIM


@dc.dataclass(slots=True)
class DelimiterConfig:
    """Action delimiters used when parsing pages."""

    left: str = DEFAULT_LEFT_DELIM
    right: str = DEFAULT_RIGHT_DELIM


@dc.dataclass(slots=True)
class SiteConfig:
    """Resolved locations and rendering options for one site.

    All directory attributes are absolute paths. ``redirects`` maps URL
    paths of the site to the location a visitor is sent to instead.
    """

    root: Path
    content_dir: Path
    layout_dir: Path
    static_dir: Path
    output_dir: Path
    delimiters: DelimiterConfig = dc.field(default_factory=DelimiterConfig)
    pygments_style: str = "monokai"
    redirects: dict[str, str] = dc.field(default_factory=dict)

    def with_output_dir(self, output_dir: Path) -> SiteConfig:
        """Return a copy writing to ``output_dir`` instead."""
        return dc.replace(self, output_dir=output_dir.absolute())


__all__ = ["DelimiterConfig", "SiteConfig"]
