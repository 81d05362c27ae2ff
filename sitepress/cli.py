"""Cyclopts CLI entrypoint for building sitepress sites.

The ``sitepress`` console script renders a site directory (``content``,
``layout`` and ``static`` folders plus an optional ``site.yaml``) into the
output directory. ``sitepress check`` runs the same build without writing
anything, which is handy in CI to catch broken pages.

Examples
--------
Build the site in the current directory:

>>> from sitepress.cli import main
>>> main()  # doctest: +SKIP

Build another site into a custom folder:

>>> from sitepress.cli import app
>>> app(["build", "--directory", "docs", "--output-dir", "dist"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .config import load_site_config
from .site import SiteBuilder

if typ.TYPE_CHECKING:
    from .site import BuildReport

app = App(name="sitepress", config=cyclopts.config.Env("SITEPRESS_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _exit_on_errors(report: BuildReport) -> None:
    if not report.ok:
        print(f"{len(report.errors)} error(s) reported")
        raise SystemExit(1)


@app.command(help="Render the site into its output directory.")
def build(
    *,
    directory: typ.Annotated[
        Path, Parameter(help="Site directory", env_var="SITEPRESS_DIRECTORY")
    ] = Path(),
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="SITEPRESS_OUTPUT_DIR"),
    ] = None,
    verbose: typ.Annotated[bool, Parameter(help="Log every file mapping")] = False,
) -> None:
    """Build the site rooted at ``directory``.

    Parameters
    ----------
    directory : Path, optional
        Site directory holding ``site.yaml`` and the content folders.
    output_dir : Path or None, optional
        Output folder overriding the configured one.
    verbose : bool, optional
        Enable debug logging.

    Raises
    ------
    SystemExit
        With status 1 when any page failed to build.
    """
    _configure_logging(verbose=verbose)
    config = load_site_config(directory)
    if output_dir is not None:
        config = config.with_output_dir(output_dir)
    report = SiteBuilder(config).run()
    for path in report.written:
        print(f"wrote {_format_path(path)}")
    _exit_on_errors(report)


@app.command(help="Build the site in memory and report errors without writing.")
def check(
    *,
    directory: typ.Annotated[
        Path, Parameter(help="Site directory", env_var="SITEPRESS_DIRECTORY")
    ] = Path(),
    verbose: typ.Annotated[bool, Parameter(help="Log every file mapping")] = False,
) -> None:
    """Build the site rooted at ``directory`` without writing output."""
    _configure_logging(verbose=verbose)
    report = SiteBuilder(load_site_config(directory)).walk()
    print(f"checked {len(report.resources)} resources")
    _exit_on_errors(report)


def main() -> None:
    """Invoke the Cyclopts application behind the ``sitepress`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
