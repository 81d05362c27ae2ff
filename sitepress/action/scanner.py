"""Scan text for actions.

An action consists of a left delimiter (``<%``), optional whitespace, an
action name, zero or more arguments, optional whitespace and a right
delimiter (``%>``).

An action name is a letter followed by zero or more letters, digits,
hyphens, colons or underscores. An argument is whitespace, an argument name
(which may also start with ``_``) and an optional value part: ``=``
surrounded by optional whitespace and an argument value.

An argument value is single-quoted, double-quoted or unquoted. A quoted
value runs to the next matching quote; there is no escape for the quote
character itself. An unquoted value is a non-empty run of characters other
than whitespace, ``"``, ``'``, a backtick, ``=`` or any delimiter character.
Every value is unescaped with HTML rules.

Example
-------
>>> actions, lc = parse('Hi <%set title="A &amp; B"%>!', "page.html")
>>> [type(a).__name__ for a in actions]
['TextAction', 'Action', 'TextAction']
>>> actions[1].args["title"].text
'A & B'
>>> actions[1].location(lc)
'page.html:1:5'
"""

from __future__ import annotations

import html
import typing as typ

from sitepress._constants import DEFAULT_LEFT_DELIM, DEFAULT_RIGHT_DELIM
from sitepress._errors import ActionSyntaxError

from .models import (
    Action,
    ActionNode,
    ArgumentValue,
    LocationContext,
    TextAction,
    format_location,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

_SPACE = " \t\r\n"
_UNQUOTED_TERMINATORS = _SPACE + "\"'`="
_NAME_PUNCTUATION = "-:_"


def parse(
    text: str,
    path: str,
    *,
    left_delim: str = DEFAULT_LEFT_DELIM,
    right_delim: str = DEFAULT_RIGHT_DELIM,
) -> tuple[list[ActionNode], LocationContext]:
    """Split ``text`` into literal text and actions.

    Parameters
    ----------
    text : str
        Source text. Front matter should already be masked so that locations
        match the file on disk.
    path : str
        Path used in locations and error messages.
    left_delim, right_delim : str, optional
        Action delimiters; default to ``<%`` and ``%>``.

    Returns
    -------
    tuple[list[ActionNode], LocationContext]
        Ordered actions (empty text spans are dropped) and the context used
        to resolve their locations.

    Raises
    ------
    ActionSyntaxError
        On any malformed action. Parsing stops at the first error.
    """
    scanner = _Scanner(text, path, left_delim, right_delim)
    return scanner.scan(), LocationContext(path=path, text=text)


def parse_file(
    path: Path, **delims: str
) -> tuple[list[ActionNode], LocationContext]:
    """Read ``path`` as UTF-8 and :func:`parse` it."""
    return parse(path.read_text(encoding="utf-8"), str(path), **delims)


def _is_name_start(ch: str) -> bool:
    return ch.isalpha()


def _is_argument_name_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _is_name(ch: str) -> bool:
    return ch.isalpha() or ch.isdecimal() or ch in _NAME_PUNCTUATION


def _describe(ch: str | None) -> str:
    return "EOF" if ch is None else repr(ch)


class _Scanner:
    """Single-use cursor over one source text."""

    def __init__(
        self, text: str, path: str, left_delim: str, right_delim: str
    ) -> None:
        self.text = text
        self.path = path
        self.pos = 0
        self.left_delim = left_delim
        self.right_delim = right_delim
        terminators = _UNQUOTED_TERMINATORS
        for ch in left_delim + right_delim:
            if ch not in terminators:
                terminators += ch
        self.unquoted_terminators = terminators

    def scan(self) -> list[ActionNode]:
        result: list[ActionNode] = []
        while True:
            start = self.pos
            text, more = self._scan_text()
            if text:
                result.append(TextAction(text=text, pos=start))
            if not more:
                return result
            result.append(self._scan_action())

    def _error(self, pos: int, detail: str) -> ActionSyntaxError:
        location = format_location(self.path, self.text, pos)
        return ActionSyntaxError(f"{location}: {detail}")

    def _peek(self) -> str | None:
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def _at_right_delim(self) -> bool:
        return self.text.startswith(self.right_delim, self.pos)

    def _scan_text(self) -> tuple[str, bool]:
        """Consume text up to the next left delimiter or EOF."""
        i = self.text.find(self.left_delim, self.pos)
        if i < 0:
            text = self.text[self.pos :]
            self.pos = len(self.text)
            return text, False
        text = self.text[self.pos : i]
        self.pos = i + len(self.left_delim)
        return text, True

    def _skip_space(self) -> bool:
        """Skip ASCII whitespace and report whether any was skipped."""
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] in _SPACE:
            self.pos += 1
        return self.pos > start

    def _scan_name(self, is_start: cabc.Callable[[str], bool], what: str) -> str:
        ch = self._peek()
        if ch is None or not is_start(ch):
            detail = f"expected start of {what}, found {_describe(ch)}"
            raise self._error(self.pos, detail)
        end = self.pos + 1
        while end < len(self.text) and _is_name(self.text[end]):
            end += 1
        name = self.text[self.pos : end]
        self.pos = end
        return name

    def _scan_action(self) -> Action:
        self._skip_space()
        pos = self.pos
        name = self._scan_name(_is_name_start, "action name")
        args: dict[str, ArgumentValue] = {}
        while True:
            scanned = self._scan_argument_name()
            if scanned is None:
                break
            arg_name, name_pos = scanned
            if self._scan_equal():
                break
            value, value_pos = self._scan_argument_value()
            args[arg_name] = ArgumentValue(
                text=value, pos=value_pos, name_pos=name_pos
            )
        return Action(name=name, args=args, pos=pos)

    def _scan_argument_name(self) -> tuple[str, int] | None:
        """Return the next argument name, or ``None`` at the end of the action."""
        pos = self.pos
        skipped = self._skip_space()
        if self._at_right_delim():
            self.pos += len(self.right_delim)
            return None
        if self.pos >= len(self.text):
            raise self._error(pos, "reached EOF looking for argument name")
        if not skipped:
            raise self._error(pos, "expected space before start of argument name")
        name_pos = self.pos
        return self._scan_name(_is_argument_name_start, "argument name"), name_pos

    def _scan_equal(self) -> bool:
        """Consume ``=``; return ``True`` when the action ends instead."""
        pos = self.pos
        self._skip_space()
        if self._at_right_delim():
            self.pos += len(self.right_delim)
            return True
        ch = self._peek()
        if ch is None:
            raise self._error(pos, "reached EOF looking for =")
        if ch != "=":
            raise self._error(pos, f"expected =, found {_describe(ch)}")
        self.pos += 1
        return False

    def _scan_argument_value(self) -> tuple[str, int]:
        pos = self.pos
        self._skip_space()
        ch = self._peek()
        if ch is None:
            raise self._error(pos, "reached EOF looking for argument value")
        start = self.pos
        if ch in "'\"":
            value = self._scan_quoted_value()
        else:
            value = self._scan_unquoted_value()
        return html.unescape(value), start

    def _scan_quoted_value(self) -> str:
        pos = self.pos
        quote = self.text[pos]
        end = self.text.find(quote, pos + 1)
        if end < 0:
            raise self._error(pos, f"reached EOF looking for close quote {quote}")
        self.pos = end + 1
        return self.text[pos + 1 : end]

    def _scan_unquoted_value(self) -> str:
        end = self.pos
        while end < len(self.text):
            ch = self.text[end]
            if ch in self.unquoted_terminators:
                if end == self.pos:
                    detail = f"expected value following =, found {ch!r}"
                    raise self._error(self.pos, detail)
                value = self.text[self.pos : end]
                self.pos = end
                return value
            end += 1
        raise self._error(self.pos, "reached EOF looking for end of value")


__all__ = ["parse", "parse_file"]
