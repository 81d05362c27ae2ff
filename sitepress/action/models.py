"""Parsed action records and the source locations they resolve against."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def format_location(path: str, text: str, pos: int) -> str:
    """Return ``path:line:col`` for the character offset ``pos`` in ``text``.

    The column is the distance from the preceding newline, so the first
    character after a newline is column 1. On the first line the raw offset
    is reported.

    Examples
    --------
    >>> format_location("x", "ab\\ncd", 4)
    'x:2:2'
    >>> format_location("x", "abc", 2)
    'x:1:2'
    """
    newline = text.rfind("\n", 0, pos)
    column = pos if newline < 0 else pos - newline
    line = 1 + text.count("\n", 0, pos)
    return f"{path}:{line}:{column}"


@dc.dataclass(frozen=True, slots=True)
class LocationContext:
    """Own the original source text that action offsets point into.

    Attributes
    ----------
    path : str
        Path reported in locations.
    text : str
        The full text handed to the parser, front matter already masked.
    """

    path: str
    text: str

    def location(self, pos: int) -> str:
        """Resolve ``pos`` to a ``path:line:col`` string."""
        return format_location(self.path, self.text, pos)


@dc.dataclass(frozen=True, slots=True)
class ArgumentValue:
    """Unescaped argument value plus the offsets of the value and its name."""

    text: str
    pos: int
    name_pos: int

    def location(self, lc: LocationContext) -> str:
        """Return the location of the value."""
        return lc.location(self.pos)

    def name_location(self, lc: LocationContext) -> str:
        """Return the location of the argument name."""
        return lc.location(self.name_pos)


@dc.dataclass(frozen=True, slots=True)
class TextAction:
    """Literal text emitted verbatim."""

    text: str
    pos: int

    def location(self, lc: LocationContext) -> str:
        """Return the location where the text starts."""
        return lc.location(self.pos)


@dc.dataclass(frozen=True, slots=True)
class Action:
    """Named action with its arguments.

    Attributes
    ----------
    name : str
        Action name, e.g. ``set`` or ``t:body``.
    args : Mapping[str, ArgumentValue]
        Arguments keyed by name; the last duplicate wins.
    pos : int
        Offset of the first character of the action name.
    """

    name: str
    args: cabc.Mapping[str, ArgumentValue]
    pos: int

    def location(self, lc: LocationContext) -> str:
        """Return the location of the action name."""
        return lc.location(self.pos)


ActionNode = Action | TextAction

__all__ = [
    "Action",
    "ActionNode",
    "ArgumentValue",
    "LocationContext",
    "TextAction",
    "format_location",
]
