"""Parse the ``<%name arg=value%>`` action markup embedded in pages."""

from .models import (
    Action,
    ActionNode,
    ArgumentValue,
    LocationContext,
    TextAction,
    format_location,
)
from .scanner import parse, parse_file

__all__ = [
    "Action",
    "ActionNode",
    "ArgumentValue",
    "LocationContext",
    "TextAction",
    "format_location",
    "parse",
    "parse_file",
]
