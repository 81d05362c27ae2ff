"""Load and validate the ``site.yaml`` of a sitepress site.

The file is optional. When present it may move the content, layout, static
and output directories, change the action delimiters, and pick the Pygments
style used for code snippets::

    content_dir: pages
    delimiters:
      left: "[["
      right: "]]"

Examples
--------
>>> from pathlib import Path
>>> from sitepress.config import load_site_config
>>> site = load_site_config(Path("my-site"))  # doctest: +SKIP
>>> site.delimiters.left  # doctest: +SKIP
'[['
"""

from .loader import load_site_config
from .models import DelimiterConfig, SiteConfig

__all__ = ["DelimiterConfig", "SiteConfig", "load_site_config"]
