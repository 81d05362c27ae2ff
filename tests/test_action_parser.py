"""Tests for the action scanner."""

from __future__ import annotations

from pathlib import Path

import pytest

from sitepress._errors import ActionSyntaxError
from sitepress.action import Action, TextAction, parse, parse_file


def test_parse_splits_text_and_actions() -> None:
    actions, _ = parse("a <%t:body%> b", "p.html")
    assert actions == [
        TextAction(text="a ", pos=0),
        Action(name="t:body", args={}, pos=4),
        TextAction(text=" b", pos=12),
    ], "expected text, action, text in source order"


def test_argument_values_are_html_unescaped() -> None:
    actions, _ = parse('<%set title="&lt;b&gt; &amp; &#39;x&#39;"%>', "p.html")
    action = actions[0]
    assert isinstance(action, Action), "expected an action node"
    assert action.args["title"].text == "<b> & 'x'", "entities should be decoded"


def test_quoting_styles() -> None:
    actions, _ = parse("<%t:img src=cat.png alt='a \"cat\"' w = 3 %>", "p.html")
    args = {name: value.text for name, value in actions[0].args.items()}
    assert args == {"src": "cat.png", "alt": 'a "cat"', "w": "3"}, (
        "unquoted, single-quoted and spaced values should all parse"
    )


def test_last_duplicate_argument_wins() -> None:
    actions, _ = parse('<%set title="a" title="b"%>', "p.html")
    assert actions[0].args["title"].text == "b", "the last duplicate should win"


def test_argument_without_value_ends_action() -> None:
    actions, _ = parse("<%t:box flag%>after", "p.html")
    assert actions[0] == Action(name="t:box", args={}, pos=2), (
        "a value-less argument before the delimiter should be dropped"
    )
    assert actions[1] == TextAction(text="after", pos=14), "text should resume"


def test_name_grammar_allows_punctuation_and_private_arguments() -> None:
    actions, _ = parse('<%t:my-block_1 _hidden="1"%>', "p.html")
    assert actions[0].name == "t:my-block_1", "names may hold ':', '-' and '_'"
    assert "_hidden" in actions[0].args, "argument names may start with '_'"


def test_location_on_first_line_uses_offset() -> None:
    actions, lc = parse('Hi <%set title="x"%>', "page.html")
    assert actions[1].location(lc) == "page.html:1:5", "column is the raw offset"
    assert actions[1].args["title"].location(lc) == "page.html:1:15", (
        "value location should point at the opening quote"
    )
    assert actions[1].args["title"].name_location(lc) == "page.html:1:9", (
        "name location should point at the argument name"
    )


def test_location_after_newline() -> None:
    actions, lc = parse("a\nbc <%t:body%>", "page.html")
    assert actions[1].location(lc) == "page.html:2:6", (
        "column counts from the preceding newline"
    )


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("<%%>", "p.html:1:2: expected start of action name, found '%'"),
        ("<%set", "p.html:1:5: reached EOF looking for argument name"),
        (
            '<%set a="x"b="y"%>',
            "p.html:1:11: expected space before start of argument name",
        ),
        ('<%set a "x"%>', "p.html:1:7: expected =, found '\"'"),
        ("<%set a", "p.html:1:7: reached EOF looking for ="),
        ("<%set a=", "p.html:1:8: reached EOF looking for argument value"),
        ('<%set a="x%>', 'p.html:1:8: reached EOF looking for close quote "'),
        ("<%set a=%>", "p.html:1:8: expected value following =, found '%'"),
        ("<%set a=x", "p.html:1:8: reached EOF looking for end of value"),
    ],
)
def test_syntax_errors_are_located(source: str, expected: str) -> None:
    with pytest.raises(ActionSyntaxError) as excinfo:
        parse(source, "p.html")
    assert str(excinfo.value) == expected, f"unexpected error for {source!r}"


def test_custom_delimiters() -> None:
    actions, _ = parse("x [[t:y a=b]] z", "p.html", left_delim="[[", right_delim="]]")
    assert actions[1].args["a"].text == "b", "']' should end an unquoted value"
    assert actions[2] == TextAction(text=" z", pos=13), "text should follow ']]'"


def test_text_without_actions() -> None:
    actions, _ = parse("50% off <b>now</b>", "p.html")
    assert actions == [TextAction(text="50% off <b>now</b>", pos=0)], (
        "text without a left delimiter should be a single span"
    )


def test_parse_file_reads_utf8(tmp_path: Path) -> None:
    path = tmp_path / "page.html"
    path.write_text("café <%t:x%>", encoding="utf-8")
    actions, lc = parse_file(path)
    assert actions[0].text == "café ", "text should be decoded as UTF-8"
    assert lc.path == str(path), "locations should use the file path"
