"""Exception hierarchy shared by the sitepress build pipeline.

Every failure that concerns a single source file carries a location prefix
(``path:line`` or ``path:line:col``) so the build driver can report it
verbatim and deduplicate repeated messages across a build pass.
"""

from __future__ import annotations


class SiteError(Exception):
    """Base error for all sitepress operations."""


class ConfigError(SiteError, ValueError):
    """Raised when ``site.yaml`` is invalid or incomplete."""


class FrontMatterError(SiteError):
    """Raised when a front-matter block cannot be decoded."""


class ActionSyntaxError(SiteError):
    """Raised when the action markup in a file is malformed."""


class LayoutError(SiteError):
    """Raised when a layout cannot be resolved or parsed."""


class PageError(SiteError):
    """Raised when processing a page fails."""


class ActionContextError(PageError):
    """Raised by typed argument accessors used from named blocks."""


class BuildError(SiteError):
    """Raised when a build pass reported one or more page errors."""


__all__ = [
    "ActionContextError",
    "ActionSyntaxError",
    "BuildError",
    "ConfigError",
    "FrontMatterError",
    "LayoutError",
    "PageError",
    "SiteError",
]
