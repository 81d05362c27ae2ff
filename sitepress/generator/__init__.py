"""Render content pages: processor, registry, helpers, and shared records."""

from .action_context import ActionContext
from .functions import STATIC_FUNCTIONS, FunctionContext, extract_code
from .models import Page, PageFrontMatter, Resource
from .page_processor import PageProcessor
from .registry import PageRegistry, match_path
from .renderer import HtmlContentRenderer
from .scratch import Scratch

__all__ = [
    "STATIC_FUNCTIONS",
    "ActionContext",
    "FunctionContext",
    "HtmlContentRenderer",
    "Page",
    "PageFrontMatter",
    "PageProcessor",
    "PageRegistry",
    "Resource",
    "Scratch",
    "extract_code",
    "match_path",
]
