"""Typed access to the arguments of the action that called a named block.

A named block receives the calling action as ``ctx``::

    {% macro figure() %}
    <img src="{{ ctx.get_required('src') }}"
         width="{{ ctx.get_int_or_default('width', 640) }}">
    {% endmacro %}

Failed lookups raise :class:`~sitepress._errors.ActionContextError` located
at the calling action and also record it on the context, so the page
processor can surface it unchanged even when the template engine wraps or
replaces the exception on its way out.
"""

from __future__ import annotations

import re
import typing as typ

from sitepress._errors import ActionContextError

if typ.TYPE_CHECKING:
    from sitepress.action import Action, ArgumentValue, LocationContext

    from .models import Page
    from .scratch import Scratch

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


class ActionContext:
    """Arguments and page identity for one named-block call."""

    def __init__(self, action: Action, lc: LocationContext, page: Page) -> None:
        self._action = action
        self._lc = lc
        self._page = page
        self.error: ActionContextError | None = None

    @property
    def name(self) -> str:
        """Return the name of the calling action."""
        return self._action.name

    @property
    def location(self) -> str:
        """Return the ``path:line:col`` of the calling action."""
        return self._action.location(self._lc)

    @property
    def args(self) -> dict[str, str]:
        """Return every argument of the calling action as plain strings."""
        return {name: value.text for name, value in self._action.args.items()}

    @property
    def page(self) -> Page:
        """Return the page being processed."""
        return self._page

    @property
    def path(self) -> str:
        """Return the current output path of the page being processed."""
        return self._page.path

    @property
    def scratch(self) -> Scratch:
        """Return the scratch storage of the page being processed."""
        return self._page.scratch

    def has(self, name: str) -> bool:
        """Return whether the calling action has an argument ``name``."""
        return name in self._action.args

    def get_required(self, name: str) -> str:
        """Return argument ``name``.

        Raises
        ------
        ActionContextError
            When the argument is missing.
        """
        return self._require(name).text

    def get_or_default(self, name: str, default: str = "") -> str:
        """Return argument ``name`` or ``default`` when it is missing."""
        value = self._action.args.get(name)
        return default if value is None else value.text

    def get_required_int(self, name: str) -> int:
        """Return argument ``name`` as an integer.

        Raises
        ------
        ActionContextError
            When the argument is missing or is not a decimal integer.
        """
        return self._to_int(name, self._require(name))

    def get_int_or_default(self, name: str, default: int = 0) -> int:
        """Return argument ``name`` as an integer, or ``default`` when missing.

        Raises
        ------
        ActionContextError
            When the argument is present but is not a decimal integer.
        """
        value = self._action.args.get(name)
        return default if value is None else self._to_int(name, value)

    def _require(self, name: str) -> ArgumentValue:
        value = self._action.args.get(name)
        if value is None:
            raise self._fail(
                self.location, f"required argument {name!r} not found for {self.name}"
            )
        return value

    def _to_int(self, name: str, value: ArgumentValue) -> int:
        if _INT_PATTERN.fullmatch(value.text) is None:
            raise self._fail(
                value.location(self._lc),
                f"argument {name!r} is not an integer: {value.text!r}",
            )
        return int(value.text)

    def _fail(self, location: str, detail: str) -> ActionContextError:
        self.error = ActionContextError(f"{location}: {detail}")
        return self.error


__all__ = ["ActionContext"]
