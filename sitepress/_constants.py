"""Common literal values used across sitepress.

These constants keep directory names, delimiters, and reserved action names
centralized so the parser, processor, driver, and tests import the same
values without drifting.

Examples
--------
>>> from sitepress import _constants
>>> _constants.TEMPLATE_CALL_PREFIX + "body"
't:body'
>>> _constants.DEFAULT_LEFT_DELIM, _constants.DEFAULT_RIGHT_DELIM
('<%', '%>')
"""

DEFAULT_LEFT_DELIM = "<%"
DEFAULT_RIGHT_DELIM = "%>"

SET_ACTION = "set"
TEMPLATE_CALL_PREFIX = "t:"

CONFIG_FILENAME = "site.yaml"
CONTENT_DIR = "content"
LAYOUT_DIR = "layout"
STATIC_DIR = "static"
OUTPUT_DIR = "public"

INDEX_PAGE = "index.html"
INDEX_PAGE_SUFFIX = ".index.html"
PAGE_SUFFIX = ".html"
