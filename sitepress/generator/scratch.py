"""Per-page scratch storage usable from templates.

Setter methods return an empty string so they can be called from a
``{{ ... }}`` expression without emitting anything.

Example
-------
>>> scratch = Scratch()
>>> scratch.append("tags", "go")
''
>>> scratch.append("tags", "python")
''
>>> scratch.get("tags")
['go', 'python']
"""

from __future__ import annotations

import typing as typ


class Scratch:
    """Mutable key/value store attached to one page."""

    __slots__ = ("_values",)

    def __init__(self) -> None:
        self._values: dict[str, typ.Any] = {}

    def set(self, key: str, value: typ.Any) -> str:  # noqa: A003
        """Set the value for ``key``."""
        self._values[key] = value
        return ""

    def get(self, key: str) -> typ.Any:
        """Return the value for ``key`` or ``None`` when unset."""
        return self._values.get(key)

    def has(self, key: str) -> bool:
        """Return whether ``key`` has a value."""
        return key in self._values

    def delete(self, key: str) -> str:
        """Remove ``key`` if present."""
        self._values.pop(key, None)
        return ""

    def append(self, key: str, value: typ.Any) -> str:
        """Append ``value`` to the list stored under ``key``.

        Raises
        ------
        TypeError
            When the current value for ``key`` is not a list.
        """
        current = self._values.setdefault(key, [])
        if not isinstance(current, list):
            msg = f"append to {key!r}: value is {type(current).__name__}, not list"
            raise TypeError(msg)
        current.append(value)
        return ""


__all__ = ["Scratch"]
