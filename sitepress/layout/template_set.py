"""Two-phase Jinja template sets for layout chains.

A :class:`TemplateSet` is the definition of a layout chain: the named blocks
(top-level ``{% macro %}`` definitions) contributed by every layout in the
chain, plus the main template of the nearest layout whose body is not empty.
Definitions are owned by the layout cache and are never rendered directly.

:meth:`TemplateSet.instantiate` produces a :class:`BoundTemplateSet`, a
disposable copy bound to the helper functions of one page. Named blocks
are looked up through the bound copy, so a block overridden by a child
layout is also the one used when an ancestor's main template calls
``template("name")``.

Example
-------
>>> env = build_environment()
>>> base = TemplateSet(env)
>>> base.add_source("<main>{{ template('body') }}</main>", "base.html")
>>> child = base.clone()
>>> child.add_source("{% macro body() %}Hello {{ who }}{% endmacro %}", "child.html")
>>> str(child.instantiate({}).render_main(who="you"))
'<main>Hello you</main>'
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from jinja2 import (
    Environment,
    StrictUndefined,
    Template,
    TemplateSyntaxError,
    nodes,
    select_autoescape,
)
from markupsafe import Markup

from sitepress._errors import LayoutError

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def build_environment(
    helpers: cabc.Mapping[str, typ.Any] | None = None,
) -> Environment:
    """Return the Jinja environment layouts are compiled with.

    Parameters
    ----------
    helpers : Mapping[str, Any], optional
        Functions available to every template regardless of the page being
        rendered.
    """
    env = Environment(
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )
    if helpers:
        env.globals.update(helpers)
    return env


@dc.dataclass(frozen=True, slots=True)
class NamedBlock:
    """A macro exported by one compiled layout file."""

    name: str
    template: Template
    filename: str


class TemplateSet:
    """Named blocks and main template of a layout chain (definition form)."""

    def __init__(
        self,
        environment: Environment,
        blocks: cabc.Mapping[str, NamedBlock] | None = None,
        main: Template | None = None,
    ) -> None:
        self.environment = environment
        self._blocks: dict[str, NamedBlock] = dict(blocks or {})
        self.main = main

    @property
    def block_names(self) -> frozenset[str]:
        """Return the names of every block defined in the chain."""
        return frozenset(self._blocks)

    def clone(self) -> TemplateSet:
        """Return an independent copy that later :meth:`add_source` calls extend."""
        return TemplateSet(self.environment, self._blocks, self.main)

    def add_source(self, source: str, filename: str) -> None:
        """Compile ``source`` and layer its blocks and main template on top.

        Raises
        ------
        LayoutError
            When ``source`` is not valid Jinja.
        """
        env = self.environment
        try:
            tree = env.parse(source, name=filename, filename=filename)
            macros = [node for node in tree.body if isinstance(node, nodes.Macro)]
            # Blocks get their own template: rendering one must not run the main body.
            definitions = [node for node in tree.body if isinstance(node, _DEFINITIONS)]
            library = _compile(
                env, nodes.Template(definitions, lineno=1, environment=env), filename
            )
            main = None if _is_empty(tree) else _compile(env, tree, filename)
        except TemplateSyntaxError as exc:
            msg = f"{filename}:{exc.lineno}: {exc.message}"
            raise LayoutError(msg) from exc
        for node in macros:
            self._blocks[node.name] = NamedBlock(node.name, library, filename)
        if main is not None:
            self.main = main

    def instantiate(self, helpers: cabc.Mapping[str, typ.Any]) -> BoundTemplateSet:
        """Return an execution-ready copy bound to per-page ``helpers``."""
        return BoundTemplateSet(self, helpers)


class BoundTemplateSet:
    """Disposable copy of a :class:`TemplateSet` bound to one page's helpers."""

    def __init__(
        self, definition: TemplateSet, helpers: cabc.Mapping[str, typ.Any]
    ) -> None:
        self._blocks = dict(definition._blocks)
        self._main = definition.main
        self._helpers: dict[str, typ.Any] = {**helpers, "template": self.template}
        self._stack: list[dict[str, typ.Any]] = []

    @property
    def has_main(self) -> bool:
        """Return whether the chain has a main template."""
        return self._main is not None

    def has_block(self, name: str) -> bool:
        """Return whether a block called ``name`` is defined."""
        return name in self._blocks

    def render_block(self, name: str, **variables: typ.Any) -> Markup:
        """Render the block ``name`` with ``variables`` in scope.

        Raises
        ------
        LayoutError
            When no block called ``name`` is defined.
        """
        block = self._blocks.get(name)
        if block is None:
            msg = f"template {name!r} is not defined"
            raise LayoutError(msg)
        self._stack.append(variables)
        try:
            module = block.template.make_module(vars={**self._helpers, **variables})
            return Markup(getattr(module, block.name)())
        finally:
            self._stack.pop()

    def render_main(self, **variables: typ.Any) -> str:
        """Render the main template of the chain with ``variables`` in scope."""
        if self._main is None:
            msg = "layout has no main template"
            raise LayoutError(msg)
        self._stack.append(variables)
        try:
            return self._main.render({**self._helpers, **variables})
        finally:
            self._stack.pop()

    def template(self, name: str, **overrides: typ.Any) -> Markup:
        """Render block ``name`` from inside a template.

        The variables of the enclosing render call are passed through;
        keyword arguments replace individual values.
        """
        current = self._stack[-1] if self._stack else {}
        return self.render_block(name, **{**current, **overrides})


# Top-level statements that produce no output; macros may depend on them.
_DEFINITIONS = (
    nodes.Macro,
    nodes.Assign,
    nodes.AssignBlock,
    nodes.Import,
    nodes.FromImport,
)


def _compile(env: Environment, tree: nodes.Template, filename: str) -> Template:
    code = env.compile(tree, name=filename, filename=filename)
    return env.template_class.from_code(env, code, env.make_globals(None))


def _is_empty(tree: nodes.Template) -> bool:
    """Return whether ``tree`` holds only definitions and whitespace text."""
    for node in tree.body:
        if isinstance(node, _DEFINITIONS):
            continue
        if isinstance(node, nodes.Output) and all(
            isinstance(child, nodes.TemplateData) and not child.data.strip()
            for child in node.nodes
        ):
            continue
        return False
    return True


__all__ = ["BoundTemplateSet", "NamedBlock", "TemplateSet", "build_environment"]
