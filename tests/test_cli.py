"""Tests for the ``sitepress`` command line."""

from __future__ import annotations

import typing as typ

import pytest

from sitepress.cli import build, check

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .conftest import WriteFiles

SITE = {
    "site.yaml": "output_dir: out\n",
    "layout/base.html": "<main>{{ page.content }}</main>\n",
    "content/index.html": '<%set title="Home" layout="/base.html"%>\nhello\n',
    "static/robots.txt": "User-agent: *\n",
}


def test_build_writes_and_lists_files(
    write_files: WriteFiles, capsys: pytest.CaptureFixture[str]
) -> None:
    root = write_files(SITE)
    build(directory=root)
    out = capsys.readouterr().out
    assert (root / "out" / "index.html").read_text() == "<main>hello\n</main>\n", (
        "the page should be wrapped in its layout"
    )
    assert f"wrote {root / 'out' / 'robots.txt'}" in out, "written files are listed"


def test_build_output_dir_override(write_files: WriteFiles, tmp_path: Path) -> None:
    root = write_files(SITE)
    build(directory=root, output_dir=tmp_path / "dist")
    assert (tmp_path / "dist" / "robots.txt").exists(), "override should be used"
    assert not (root / "out").exists(), "the configured folder is left alone"


def test_check_does_not_write(
    write_files: WriteFiles, capsys: pytest.CaptureFixture[str]
) -> None:
    root = write_files(SITE)
    check(directory=root)
    assert capsys.readouterr().out == "checked 2 resources\n", "resources counted"
    assert not (root / "out").exists(), "check must not write output"


@pytest.mark.parametrize("command", [build, check])
def test_page_errors_exit_non_zero(
    write_files: WriteFiles,
    capsys: pytest.CaptureFixture[str],
    command: typ.Callable[..., None],
) -> None:
    root = write_files({**SITE, "content/bad.html": "<%nope%>"})
    with pytest.raises(SystemExit) as excinfo:
        command(directory=root)
    assert excinfo.value.code == 1, "errors should fail the command"
    assert "1 error(s) reported" in capsys.readouterr().out, "errors are counted"
