"""Layout resolution: cached, inherited Jinja template chains."""

from .resolver import LayoutEntry, LayoutFrontMatter, LayoutResolver
from .template_set import BoundTemplateSet, NamedBlock, TemplateSet, build_environment

__all__ = [
    "BoundTemplateSet",
    "LayoutEntry",
    "LayoutFrontMatter",
    "LayoutResolver",
    "NamedBlock",
    "TemplateSet",
    "build_environment",
]
