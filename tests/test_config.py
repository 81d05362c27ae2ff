"""Tests for ``site.yaml`` loading."""

from __future__ import annotations

import typing as typ

import pytest

from sitepress._errors import ConfigError
from sitepress.config import DelimiterConfig, load_site_config

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .conftest import WriteFiles


def test_defaults_without_config_file(tmp_path: Path) -> None:
    config = load_site_config(tmp_path)
    assert config.content_dir == tmp_path / "content", "default content dir"
    assert config.layout_dir == tmp_path / "layout", "default layout dir"
    assert config.static_dir == tmp_path / "static", "default static dir"
    assert config.output_dir == tmp_path / "public", "default output dir"
    assert config.delimiters == DelimiterConfig("<%", "%>"), "default delimiters"
    assert config.pygments_style == "monokai", "default pygments style"


def test_values_from_config_file(write_files: WriteFiles, tmp_path: Path) -> None:
    write_files(
        {
            "site.yaml": (
                "content_dir: pages\n"
                "output_dir: dist\n"
                "delimiters:\n"
                '  left: "[["\n'
                '  right: "]]"\n'
                "pygments_style: friendly\n"
            )
        }
    )
    config = load_site_config(tmp_path)
    assert config.content_dir == tmp_path / "pages", "content dir from file"
    assert config.output_dir == tmp_path / "dist", "output dir from file"
    assert config.layout_dir == tmp_path / "layout", "unset keys keep defaults"
    assert config.delimiters == DelimiterConfig("[[", "]]"), "custom delimiters"
    assert config.pygments_style == "friendly", "custom pygments style"


def test_redirects_from_config_file(write_files: WriteFiles, tmp_path: Path) -> None:
    write_files({"site.yaml": "redirects:\n  /old/: https://example.com/\n"})
    config = load_site_config(tmp_path)
    assert config.redirects == {"/old/": "https://example.com/"}, "redirect map"
    assert load_site_config(tmp_path / "none").redirects == {}, "no redirects"


def test_output_dir_override(tmp_path: Path) -> None:
    config = load_site_config(tmp_path).with_output_dir(tmp_path / "out")
    assert config.output_dir == tmp_path / "out", "override should apply"


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("- a\n- b\n", "must be a mapping"),
        ("colour: red\n", "unknown keys: colour"),
        ("content_dir: 3\n", "'content_dir' must be a non-empty string"),
        ("delimiters: '<%'\n", "'delimiters' must be a mapping"),
        ("delimiters:\n  left: 1\n", "'left' must be a non-empty string"),
        ("delimiters:\n  left: '%'\n  right: '%'\n", "must differ"),
        ("redirects: [/a/]\n", "'redirects' must be a mapping"),
        ("redirects:\n  old: /new/\n", "redirect 'old' must start with '/'"),
        ("redirects:\n  /old/: 3\n", "needs a target string"),
        ("content_dir: [\n", "site.yaml"),
    ],
)
def test_invalid_config(
    write_files: WriteFiles, tmp_path: Path, text: str, message: str
) -> None:
    write_files({"site.yaml": text})
    with pytest.raises(ConfigError, match=message.replace("[", r"\[")):
        load_site_config(tmp_path)
