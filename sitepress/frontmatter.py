r"""Detect, decode, and mask JSON front matter at the start of a file.

A front-matter block starts with ``{`` (optionally preceded by whitespace,
but not as part of a Jinja ``{{``, ``{%`` or ``{#`` tag) and ends at the
first line holding only ``}``. The block is decoded strictly with msgspec
into a caller-supplied ``msgspec.Struct`` type, so unknown fields are errors.
After a successful decode every character of the block except newlines is
replaced with a space; the body keeps its original line numbers, which keeps
action locations reported later accurate.

Example
-------
>>> import msgspec
>>> class Meta(msgspec.Struct, forbid_unknown_fields=True):
...     title: str = ""
>>> body, meta = extract_front_matter('{\n"title": "Hi"\n}\nbody', "p.html", Meta)
>>> meta.title
'Hi'
>>> body.splitlines()[3]
'body'
"""

from __future__ import annotations

import re
import typing as typ

import msgspec

from ._errors import FrontMatterError

T = typ.TypeVar("T")

_FRONT_START = re.compile(r"\A\s*\{(?![{%#])")
_FRONT_END = re.compile(r"^\}[ \t\r]*$", re.MULTILINE)
_BYTE_OFFSET = re.compile(r"\(byte (\d+)\)")
_UNKNOWN_FIELD = re.compile(r"unknown field `([^`]+)`")
_FIELD_PATH = re.compile(r"at `\$\.([^`.\[]+)")


def front_matter_end(text: str) -> int:
    """Return the offset just past the closing ``}``, or ``-1`` when absent."""
    if _FRONT_START.match(text) is None:
        return -1
    match = _FRONT_END.search(text)
    if match is None:
        return -1
    return match.end()


def extract_front_matter(
    text: str, path: str, metadata_type: type[T]
) -> tuple[str, T | None]:
    """Decode the front matter of ``text`` and mask it out of the body.

    Parameters
    ----------
    text : str
        Full file contents.
    path : str
        Path used in error messages.
    metadata_type : type
        ``msgspec.Struct`` subclass the block is decoded into.

    Returns
    -------
    tuple[str, T | None]
        The text with the block masked by spaces and the decoded metadata, or
        the unchanged text and ``None`` when there is no front matter.

    Raises
    ------
    FrontMatterError
        When the block is malformed or contains unknown or mistyped fields.
        The message is ``path:line: detail``.
    """
    end = front_matter_end(text)
    if end < 0:
        return text, None
    span = text[:end]
    raw = span.encode("utf-8")
    try:
        metadata = msgspec.json.decode(raw, type=metadata_type)
    except msgspec.ValidationError as exc:
        msg = f"{path}:{_field_line(raw, str(exc))}: {exc}"
        raise FrontMatterError(msg) from exc
    except msgspec.DecodeError as exc:
        msg = f"{path}:{_offset_line(raw, str(exc))}: {exc}"
        raise FrontMatterError(msg) from exc
    return mask_span(span) + text[end:], metadata


def mask_span(span: str) -> str:
    """Replace every character of ``span`` other than newlines with a space."""
    return "".join(ch if ch == "\n" else " " for ch in span)


def _offset_line(raw: bytes, message: str) -> int:
    match = _BYTE_OFFSET.search(message)
    if match is None:
        return 1
    offset = int(match.group(1))
    return raw.count(b"\n", 0, offset + 1) + 1


def _field_line(raw: bytes, message: str) -> int:
    match = _UNKNOWN_FIELD.search(message) or _FIELD_PATH.search(message)
    if match is None:
        return 1
    key = f'"{match.group(1)}"'.encode()
    offset = raw.find(key)
    if offset < 0:
        return 1
    return raw.count(b"\n", 0, offset) + 1


__all__ = ["extract_front_matter", "front_matter_end", "mask_span"]
