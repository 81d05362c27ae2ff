"""Shared fixtures for building throwaway site directories."""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest

from sitepress._timeutil import file_mod_time
from sitepress.generator import (
    STATIC_FUNCTIONS,
    PageProcessor,
    PageRegistry,
    Resource,
)
from sitepress.layout import LayoutResolver, build_environment

WriteFiles = typ.Callable[[dict[str, str]], Path]


@pytest.fixture
def write_files(tmp_path: Path) -> WriteFiles:
    """Return a helper writing ``{relative path: text}`` below ``tmp_path``."""

    def _write(files: dict[str, str]) -> Path:
        for relative, text in files.items():
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return tmp_path

    return _write


@pytest.fixture
def registry() -> PageRegistry:
    """Return an empty page registry."""
    return PageRegistry()


@pytest.fixture
def processor(tmp_path: Path, registry: PageRegistry) -> PageProcessor:
    """Return a processor for ``tmp_path/content`` with layouts in ``layout``."""
    return PageProcessor(
        content_dir=tmp_path / "content",
        resolver=LayoutResolver(
            tmp_path / "layout", build_environment(STATIC_FUNCTIONS)
        ),
        registry=registry,
    )


def make_resource(file_path: Path, path: str) -> Resource:
    """Return an unrendered resource for ``file_path`` served at ``path``."""
    return Resource(path=path, file_path=file_path, mod_time=file_mod_time(file_path))
