"""Tests for template helpers, the action context, and scratch storage."""

from __future__ import annotations

import datetime as dt
import os
import typing as typ

import pytest
from bs4 import BeautifulSoup

from sitepress._errors import ActionContextError, PageError
from sitepress.action import parse
from sitepress.generator import (
    STATIC_FUNCTIONS,
    ActionContext,
    FunctionContext,
    Page,
    PageRegistry,
    Scratch,
    extract_code,
)

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .conftest import WriteFiles

SOURCE = "package main\n\nfunc main() {\n\tx := 1 // OMIT\n\tprintln(x)\n}\n"


def _context(root: Path, registry: PageRegistry | None = None) -> FunctionContext:
    return FunctionContext(
        content_dir=root / "content",
        url_dir="/blog",
        registry=registry or PageRegistry(),
    )


def _page(path: str, title: str, created: str | None = None) -> Page:
    return Page(
        path=path,
        title=title,
        created=dt.datetime.fromisoformat(created) if created else None,
    )


def test_extract_code_whole_file() -> None:
    assert extract_code(SOURCE, ()) == SOURCE, "no pattern returns the whole file"


def test_extract_code_single_line() -> None:
    assert extract_code(SOURCE, ("/println/",)) == "\tprintln(x)\n", (
        "one pattern selects the first matching line"
    )


def test_extract_code_range_drops_omit_lines() -> None:
    assert extract_code(SOURCE, ("/^func/", "/^}/")) == (
        "func main() {\n\tprintln(x)\n}\n"
    ), "a range should include both ends and drop OMIT lines"


@pytest.mark.parametrize(
    ("patterns", "message"),
    [
        (("main",), "invalid pattern 'main'"),
        (("/nope/",), "pattern '/nope/' not found"),
        (("/(/",), "invalid pattern '/(/'"),
        (("/a/", "/b/", "/c/"), "> 2 patterns"),
    ],
)
def test_extract_code_errors(patterns: tuple[str, ...], message: str) -> None:
    with pytest.raises(ValueError, match=message.replace("(", r"\(")):
        extract_code(SOURCE, patterns)


def test_resolve_url_relative_and_absolute(tmp_path: Path) -> None:
    fc = _context(tmp_path)
    assert fc.resolve_url("data.json") == "/blog/data.json", "relative to url dir"
    assert fc.resolve_url("../about/") == "/about/", "trailing slash is kept"
    assert fc.resolve_url("/x/../y") == "/y", "absolute paths are normalized"
    assert fc.file_path("post/") == tmp_path / "content" / "blog" / "post" / (
        "index.html"
    ), "directory paths address index.html"


def test_include_records_mod_time(write_files: WriteFiles, tmp_path: Path) -> None:
    write_files({"content/blog/snippet.html": "<em>hi</em>"})
    os.utime(tmp_path / "content/blog/snippet.html", (1_500_000_000, 1_500_000_000))
    fc = _context(tmp_path)
    assert fc.include("snippet.html") == "<em>hi</em>", "include returns text"
    assert str(fc.include_html("snippet.html")) == "<em>hi</em>", "markup is kept"
    assert fc.mod_time == dt.datetime.fromtimestamp(1_500_000_000, dt.UTC), (
        "the included file's time should be recorded"
    )


def test_read_json(write_files: WriteFiles, tmp_path: Path) -> None:
    write_files({"content/data/nav.json": '{"items": [1, 2]}'})
    assert _context(tmp_path).read_json("/data/nav.json") == {"items": [1, 2]}, (
        "JSON should be decoded"
    )


def test_glob_absolute_and_relative(write_files: WriteFiles, tmp_path: Path) -> None:
    write_files(
        {
            "content/blog/a.html": "",
            "content/blog/b.html": "",
            "content/blog/img/x.png": "",
        }
    )
    fc = _context(tmp_path)
    assert fc.glob("/blog/*.html") == ["/blog/a.html", "/blog/b.html"], (
        "absolute patterns yield absolute paths"
    )
    assert fc.glob("*.html") == ["a.html", "b.html"], (
        "relative patterns yield relative paths"
    )
    assert fc.glob("img/*") == ["img/x.png"], "'*' must not cross directories"


def test_page_lookup(tmp_path: Path) -> None:
    registry = PageRegistry()
    post = _page("/blog/post/", "Post")
    post.mod_time = dt.datetime(2030, 1, 1, tzinfo=dt.UTC)
    registry.insert(post.path, post)
    fc = _context(tmp_path, registry)
    assert fc.read_page("post/") is post, "relative page paths should resolve"
    assert fc.mod_time == post.mod_time, "the page's time should be recorded"
    with pytest.raises(PageError, match="page '/blog/nope/' not found"):
        fc.read_page("nope/")


def test_pages_sort_and_limit(tmp_path: Path) -> None:
    registry = PageRegistry()
    for page in (
        _page("/blog/b/", "Beta", "2024-02-01T00:00:00+00:00"),
        _page("/blog/c/", "Gamma", "2024-03-01T00:00:00+00:00"),
        _page("/blog/a/", "Alpha", "2024-01-01T00:00:00+00:00"),
        _page("/about/", "About"),
    ):
        registry.insert(page.path, page)
    fc = _context(tmp_path, registry)
    titles = [page.title for page in fc.pages("/blog/*/")]
    assert titles == ["Alpha", "Beta", "Gamma"], "default order is by path"
    newest = [page.title for page in fc.pages("*/", "sort:-created", "limit:2")]
    assert newest == ["Gamma", "Beta"], "newest first, limited to two"
    by_title = [page.title for page in fc.pages("/blog/*/", "sort:title")]
    assert by_title == ["Alpha", "Beta", "Gamma"], "sort:title sorts by title"
    with pytest.raises(PageError, match="invalid option 'sort:weird'"):
        fc.pages("*/", "sort:weird")


def test_code_is_highlighted(write_files: WriteFiles, tmp_path: Path) -> None:
    write_files(
        {"content/blog/main.py": "def f():\n\treturn 1  # OMIT\n\treturn 2\n"}
    )
    html = str(_context(tmp_path).code("main.py", "/def/", "/return 2/"))
    soup = BeautifulSoup(html, "html.parser")
    block = soup.find("div", class_="codehilite")
    assert block is not None, "a highlighted block should be emitted"
    assert block.get("data-language") == "python", "the language is guessed"
    assert block.get_text() == "def f():\n    return 2\n", (
        "OMIT lines are dropped and tabs become spaces"
    )


def test_code_pattern_errors_are_page_errors(
    write_files: WriteFiles, tmp_path: Path
) -> None:
    write_files({"content/blog/main.py": "x = 1\n"})
    with pytest.raises(PageError, match="pattern '/y/' not found"):
        _context(tmp_path).code("main.py", "/y/")


def test_markdown_renders_html(tmp_path: Path) -> None:
    html = str(_context(tmp_path).markdown("# Title\n\n*em*"))
    soup = BeautifulSoup(html, "html.parser")
    assert soup.h1.get_text() == "Title", "headings should render"
    assert soup.em.get_text() == "em", "emphasis should render"


def test_static_functions() -> None:
    assert STATIC_FUNCTIONS["path_base"]("/a/b.html") == "b.html", "basename"
    assert STATIC_FUNCTIONS["path_dir"]("/a/b.html") == "/a", "dirname"
    assert STATIC_FUNCTIONS["path_join"]("/a", "b") == "/a/b", "join"
    assert STATIC_FUNCTIONS["time_now"]().tzinfo is not None, "aware time"


def _action_context(source: str) -> ActionContext:
    actions, lc = parse(source, "p.html")
    return ActionContext(actions[0], lc, Page(path="/p/"))


def test_action_context_accessors() -> None:
    ctx = _action_context('<%t:img src="a.png" w="+12" n=-3%>')
    assert ctx.get_required("src") == "a.png", "required string"
    assert ctx.get_or_default("alt", "none") == "none", "defaulted string"
    assert ctx.get_required_int("w") == 12, "signed integers are accepted"
    assert ctx.get_int_or_default("n", 5) == -3, "present int wins over default"
    assert ctx.get_int_or_default("h", 5) == 5, "missing int uses default"
    assert ctx.args == {"src": "a.png", "w": "+12", "n": "-3"}, "raw arguments"
    assert ctx.path == "/p/", "the page path is exposed"
    assert ctx.error is None, "successful lookups record no error"


def test_action_context_records_errors() -> None:
    ctx = _action_context('<%t:img w="1_000"%>')
    with pytest.raises(ActionContextError) as excinfo:
        ctx.get_required("src")
    assert str(excinfo.value) == (
        "p.html:1:2: required argument 'src' not found for t:img"
    ), "missing arguments are located at the action"
    assert ctx.error is excinfo.value, "the error should be recorded"
    with pytest.raises(ActionContextError, match=r"p.html:1:10: argument 'w'"):
        ctx.get_required_int("w")


def test_scratch_operations() -> None:
    scratch = Scratch()
    assert scratch.set("k", 1) == "", "setters return an empty string"
    assert scratch.has("k"), "set values are present"
    assert scratch.get("k") == 1, "get returns the value"
    assert scratch.delete("k") == "", "delete returns an empty string"
    assert scratch.get("k") is None, "deleted values are gone"
    scratch.set("k", "x")
    with pytest.raises(TypeError, match="not list"):
        scratch.append("k", "y")
