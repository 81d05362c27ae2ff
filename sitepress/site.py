"""Walk a site directory and build every resource in one pass.

Static files are copied verbatim. Content directories are visited depth
first: sub-directories come before the pages of their parent, and inside a
directory ``name.html`` pages (served as ``name/``) come before
``name.index.html`` pages (served as ``name``), which come before
``index.html`` (served as the directory itself). Index pages can therefore
query every page below them with ``pages(...)``.

A page that fails is left out of the pass; its error is logged once per
distinct message and the walk goes on.

Redirects declared in ``site.yaml`` come last, as small HTML documents that
send the browser on with a ``refresh`` meta tag.

Example
-------
>>> from pathlib import Path
>>> from sitepress.config import load_site_config
>>> builder = SiteBuilder(load_site_config(Path("my-site")))  # doctest: +SKIP
>>> report = builder.run()  # doctest: +SKIP
>>> report.raise_for_errors()  # doctest: +SKIP
"""

from __future__ import annotations

import dataclasses as dc
import logging
import shutil
import typing as typ

from markupsafe import Markup

from ._constants import CONFIG_FILENAME, INDEX_PAGE, INDEX_PAGE_SUFFIX, PAGE_SUFFIX
from ._errors import BuildError, SiteError
from ._timeutil import file_mod_time
from .generator import (
    STATIC_FUNCTIONS,
    HtmlContentRenderer,
    PageProcessor,
    PageRegistry,
    Resource,
)
from .layout import LayoutResolver, build_environment

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from .config import SiteConfig

logger = logging.getLogger(__name__)

REDIRECT_DOCUMENT = Markup(
    "<!DOCTYPE html>\n"
    '<html><head><meta charset="utf-8">\n'
    '<meta http-equiv="refresh" content="0;url={target}">\n'
    "<title>Redirecting</title></head>\n"
    '<body><p>Redirecting to <a href="{target}">{target}</a>.</p></body></html>\n'
)

Visitor = typ.Callable[[Resource], None]


def is_hidden(name: str) -> bool:
    """Return whether the directory entry ``name`` is left out of the site.

    Examples
    --------
    >>> is_hidden("_drafts"), is_hidden(".well-known"), is_hidden("post.html")
    (True, False, False)
    """
    return name.startswith((".", "_")) and name != ".well-known"


@dc.dataclass(slots=True)
class BuildReport:
    """Outcome of one build pass.

    Attributes
    ----------
    resources : list[Resource]
        Every resource produced, in visit order.
    errors : list[str]
        Distinct error messages, in the order they were first reported.
    written : list[Path]
        Files written to the output directory by :meth:`SiteBuilder.run`.
    """

    resources: list[Resource] = dc.field(default_factory=list)
    errors: list[str] = dc.field(default_factory=list)
    written: list[Path] = dc.field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Return whether the pass reported no errors."""
        return not self.errors

    def raise_for_errors(self) -> None:
        """Raise :class:`BuildError` when the pass reported errors."""
        if self.errors:
            msg = f"{len(self.errors)} error(s) reported"
            raise BuildError(msg)


class SiteBuilder:
    """Build the site described by a :class:`~sitepress.config.SiteConfig`."""

    def __init__(
        self, config: SiteConfig, *, registry: PageRegistry | None = None
    ) -> None:
        """Initialize the builder.

        Parameters
        ----------
        config : SiteConfig
            Site directories and rendering options.
        registry : PageRegistry, optional
            Long-lived registry that receives the pages of every finished
            pass.
        """
        self.config = config
        self.registry = registry if registry is not None else PageRegistry()

    def walk(self, visit: Visitor | None = None) -> BuildReport:
        """Build every resource and pass each one to ``visit``.

        Each pass starts from an empty layout cache and an empty page
        registry; the pass registry replaces :attr:`registry` at the end.
        """
        build = _BuildPass(self.config, visit)
        build.visit_static(self.config.static_dir, "")
        build.visit_content(self.config.content_dir, "")
        build.visit_redirects(
            self.config.redirects, self.config.root / CONFIG_FILENAME
        )
        self.registry.replace(build.registry)
        logger.info(
            "Built %d resources with %d error(s)",
            len(build.report.resources),
            len(build.report.errors),
        )
        return build.report

    def run(self) -> BuildReport:
        """Build the site and write it to the output directory."""
        written: list[Path] = []

        def write(resource: Resource) -> None:
            target = self.output_path(resource.path)
            target.parent.mkdir(parents=True, exist_ok=True)
            if resource.data is None:
                shutil.copyfile(resource.file_path, target)
            else:
                target.write_bytes(resource.data)
            written.append(target)

        report = self.walk(write)
        report.written = written
        return report

    def output_path(self, upath: str) -> Path:
        """Return the output file for the URL path ``upath``."""
        target = self.config.output_dir / upath.lstrip("/")
        if upath.endswith("/"):
            target = target / INDEX_PAGE
        return target


class _BuildPass:
    """Mutable state of one :meth:`SiteBuilder.walk` call."""

    def __init__(self, config: SiteConfig, visit: Visitor | None) -> None:
        self.report = BuildReport()
        self.registry = PageRegistry()
        self._visit = visit
        self._processor = PageProcessor(
            content_dir=config.content_dir,
            resolver=LayoutResolver(
                config.layout_dir, build_environment(STATIC_FUNCTIONS)
            ),
            registry=self.registry,
            renderer=HtmlContentRenderer(config.pygments_style),
            left_delim=config.delimiters.left,
            right_delim=config.delimiters.right,
        )

    def visit_static(self, directory: Path, upath: str) -> None:
        for entry in _entries(directory):
            if entry.is_dir():
                self.visit_static(entry, f"{upath}/{entry.name}")
                continue
            path = f"{upath}/" if entry.name == INDEX_PAGE else f"{upath}/{entry.name}"
            self._emit(_resource(entry, path))

    def visit_content(self, directory: Path, upath: str) -> None:
        pages: list[Resource] = []
        index_pages: list[Resource] = []
        index_page: Resource | None = None
        for entry in _entries(directory):
            name = entry.name
            if entry.is_dir():
                self.visit_content(entry, f"{upath}/{name}")
            elif name == INDEX_PAGE:
                index_page = _resource(entry, f"{upath}/")
            elif name.endswith(INDEX_PAGE_SUFFIX):
                stem = name.removesuffix(INDEX_PAGE_SUFFIX)
                index_pages.append(_resource(entry, f"{upath}/{stem}"))
            elif name.endswith(PAGE_SUFFIX):
                stem = name.removesuffix(PAGE_SUFFIX)
                pages.append(_resource(entry, f"{upath}/{stem}/"))
            else:
                self._emit(_resource(entry, f"{upath}/{name}"))
        ordered = [*pages, *index_pages]
        if index_page is not None:
            ordered.append(index_page)
        for resource in ordered:
            try:
                self._processor.process(resource)
            except (SiteError, OSError, UnicodeDecodeError) as exc:
                self._report(str(exc))
                continue
            self._emit(resource)

    def visit_redirects(self, redirects: cabc.Mapping[str, str], source: Path) -> None:
        for upath, target in redirects.items():
            if upath in self.registry:
                self._report(f"{source}: redirect {upath!r} shadows a page")
                continue
            data = REDIRECT_DOCUMENT.format(target=target).encode("utf-8")
            resource = Resource(
                path=upath,
                file_path=source,
                mod_time=file_mod_time(source),
                size=len(data),
                data=data,
                redirect=target,
            )
            self._emit(resource)

    def _emit(self, resource: Resource) -> None:
        logger.debug("File %s -> %s", resource.file_path, resource.path)
        self.report.resources.append(resource)
        if self._visit is not None:
            self._visit(resource)

    def _report(self, message: str) -> None:
        if message in self.report.errors:
            return
        logger.error("%s", message)
        self.report.errors.append(message)


def _entries(directory: Path) -> cabc.Iterator[Path]:
    if not directory.is_dir():
        return
    for entry in sorted(directory.iterdir()):
        if not is_hidden(entry.name):
            yield entry


def _resource(file_path: Path, upath: str) -> Resource:
    stat = file_path.stat()
    return Resource(
        path=upath,
        file_path=file_path,
        mod_time=file_mod_time(file_path),
        size=stat.st_size,
    )


__all__ = ["BuildReport", "SiteBuilder", "is_hidden"]
