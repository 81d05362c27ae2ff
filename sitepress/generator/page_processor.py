"""Turn one content file into rendered bytes and a registered page.

A page is HTML with optional JSON front matter and embedded actions::

    {
      "title": "Hello"
    }
    <%set layout="/post.html"%>
    <%t:figure src="cat.png" width="320"%>
    Some text.

Text is copied verbatim. ``set`` updates the page metadata and may select a
layout; a newline directly after a ``set`` action is dropped so the action
does not leave a blank line behind. ``t:<name>`` renders the named block of
the selected layout in place. When the stream ends the accumulated text
becomes ``page.content`` and the layout's main template renders the final
document; without a main template the accumulated text is the document.
"""

from __future__ import annotations

import logging
import typing as typ

from markupsafe import Markup

from sitepress._constants import (
    DEFAULT_LEFT_DELIM,
    DEFAULT_RIGHT_DELIM,
    SET_ACTION,
    TEMPLATE_CALL_PREFIX,
)
from sitepress._errors import (
    ActionContextError,
    FrontMatterError,
    LayoutError,
    PageError,
)
from sitepress._timeutil import file_mod_time, parse_rfc3339
from sitepress.action import Action, TextAction, parse
from sitepress.frontmatter import extract_front_matter, front_matter_end

from .action_context import ActionContext
from .functions import FunctionContext
from .models import Page, PageFrontMatter

if typ.TYPE_CHECKING:
    import datetime as dt
    from pathlib import Path

    from sitepress.action import ArgumentValue, LocationContext
    from sitepress.layout import BoundTemplateSet, LayoutResolver

    from .models import Resource
    from .registry import PageRegistry
    from .renderer import HtmlContentRenderer

logger = logging.getLogger(__name__)

_TIME_FIELDS = ("created", "updated")
_TEXT_FIELDS = ("title", "subtitle")


def _strip_leading_newline(text: str) -> str:
    if text.startswith("\r\n"):
        return text[2:]
    return text.removeprefix("\n")


class PageProcessor:
    """Render content files against the layouts of one build pass."""

    def __init__(
        self,
        *,
        content_dir: Path,
        resolver: LayoutResolver,
        registry: PageRegistry,
        renderer: HtmlContentRenderer | None = None,
        left_delim: str = DEFAULT_LEFT_DELIM,
        right_delim: str = DEFAULT_RIGHT_DELIM,
    ) -> None:
        self.content_dir = content_dir
        self.resolver = resolver
        self.registry = registry
        self.renderer = renderer
        self.left_delim = left_delim
        self.right_delim = right_delim

    def process(self, resource: Resource) -> Page:
        """Render ``resource`` and register the resulting page.

        On success ``resource.data``, ``resource.size`` and
        ``resource.mod_time`` are filled in, and ``resource.path`` follows a
        ``set path=...`` override.

        Raises
        ------
        FrontMatterError, ActionSyntaxError, PageError
            When the page cannot be rendered; the first error aborts the
            file.
        """
        logger.debug("Processing %s as %s", resource.file_path, resource.path)
        text = resource.file_path.read_text(encoding="utf-8")
        render = _PageRender(self, resource, file_mod_time(resource.file_path))
        output = render.run(text)
        data = (output.rstrip() + "\n").encode("utf-8")
        page = render.page
        page.mod_time = render.mod_time
        discovered = resource.path
        resource.path = page.path
        resource.data = data
        resource.size = len(data)
        resource.mod_time = render.mod_time
        self.registry.insert(page.path, page, alias=discovered)
        return page


class _PageRender:
    """State of one page while its action stream runs."""

    def __init__(
        self, processor: PageProcessor, resource: Resource, mod_time: dt.datetime
    ) -> None:
        self.processor = processor
        self.resource = resource
        self.path = str(resource.file_path)
        self.page = Page(path=resource.path, file_path=resource.file_path)
        self.functions = FunctionContext.for_file(
            resource.file_path,
            content_dir=processor.content_dir,
            registry=processor.registry,
            renderer=processor.renderer,
        )
        self.mod_time = mod_time
        self.layout: BoundTemplateSet | None = None
        self.layout_location = self.path
        self.lc: LocationContext | None = None

    def run(self, text: str) -> str:
        body, front = extract_front_matter(text, self.path, PageFrontMatter)
        skip = 0
        if front is not None:
            skip = front_matter_end(text)
            self.page.apply_front_matter(front)
            if front.layout:
                self._select_layout(front.layout, f"{self.path}:1")
        actions, self.lc = parse(
            body,
            self.path,
            left_delim=self.processor.left_delim,
            right_delim=self.processor.right_delim,
        )
        buffer: list[str] = []
        after_set = False
        for node in actions:
            if isinstance(node, TextAction):
                chunk = node.text
                if node.pos < skip:
                    # Masked front matter is not part of the page body.
                    chunk = _strip_leading_newline(chunk[skip - node.pos :])
                elif after_set:
                    chunk = _strip_leading_newline(chunk)
                buffer.append(chunk)
            elif node.name == SET_ACTION:
                self._apply_set(node)
            elif node.name.startswith(TEMPLATE_CALL_PREFIX):
                buffer.append(self._call_block(node))
            else:
                msg = f"{node.location(self.lc)}: unknown command {node.name!r}"
                raise PageError(msg)
            after_set = isinstance(node, Action) and node.name == SET_ACTION
        output = "".join(buffer)
        self.mod_time = max(self.mod_time, self.functions.mod_time)
        if self.layout is None or not self.layout.has_main:
            return output
        self.page.content = Markup(output)
        try:
            rendered = self.layout.render_main(page=self.page)
        except Exception as exc:
            msg = f"{self.layout_location}: {exc}"
            raise PageError(msg) from exc
        finally:
            self.mod_time = max(self.mod_time, self.functions.mod_time)
        return rendered

    def _apply_set(self, action: Action) -> None:
        lc = self.lc
        for name, value in action.args.items():
            if name in _TEXT_FIELDS:
                setattr(self.page, name, value.text)
            elif name in _TIME_FIELDS:
                setattr(self.page, name, self._parse_time(name, value))
            elif name == "layout":
                self._select_layout(value.text, value.location(lc))
            elif name == "path":
                if not value.text.startswith("/"):
                    msg = f"{value.location(lc)}: path must start with '/'"
                    raise PageError(msg)
                self.page.path = value.text
            else:
                msg = f"{value.name_location(lc)}: unknown argument {name!r}"
                raise PageError(msg)

    def _parse_time(self, name: str, value: ArgumentValue) -> dt.datetime:
        parsed = parse_rfc3339(value.text)
        if parsed is None:
            msg = (
                f"{value.location(self.lc)}: invalid {name} time {value.text!r},"
                " expected RFC 3339"
            )
            raise PageError(msg)
        return parsed

    def _select_layout(self, ref: str, location: str) -> None:
        try:
            entry = self.processor.resolver.resolve(
                ref, relative_to=self.resource.file_path.parent
            )
        except FileNotFoundError as exc:
            msg = f"{location}: layout {ref!r} not found: {exc.filename}"
            raise PageError(msg) from exc
        except (FrontMatterError, LayoutError) as exc:
            msg = f"{location}: {exc}"
            raise PageError(msg) from exc
        self.page.layout = ref
        self.layout = entry.instantiate(self.functions.helpers())
        self.layout_location = location
        self.mod_time = max(self.mod_time, entry.mod_time)

    def _call_block(self, action: Action) -> str:
        location = action.location(self.lc)
        name = action.name.removeprefix(TEMPLATE_CALL_PREFIX)
        if self.layout is None:
            msg = f"{location}: {action.name} called before a layout was set"
            raise PageError(msg)
        if not self.layout.has_block(name):
            msg = (
                f"{location}: template {name!r} not found"
                f" in layout {self.page.layout!r}"
            )
            raise PageError(msg)
        ctx = ActionContext(action, self.lc, self.page)
        try:
            return str(self.layout.render_block(name, ctx=ctx, page=self.page))
        except ActionContextError:
            raise
        except Exception as exc:
            if ctx.error is not None:
                raise ctx.error from exc
            msg = f"{location}: {exc}"
            raise PageError(msg) from exc


__all__ = ["PageProcessor"]
