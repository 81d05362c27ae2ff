"""Static site builder with layout inheritance and embedded page actions.

Pages are HTML files that call named blocks of Jinja layouts with a small
``<%name arg="value"%>`` action language; layouts inherit from each other
through JSON front matter.

Exports
-------
- ``app``: Cyclopts application with the ``build`` and ``check`` commands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from sitepress import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
