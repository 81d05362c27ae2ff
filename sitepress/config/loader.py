"""Load ``site.yaml`` into a :class:`~sitepress.config.models.SiteConfig`."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from sitepress._constants import (
    CONFIG_FILENAME,
    CONTENT_DIR,
    LAYOUT_DIR,
    OUTPUT_DIR,
    STATIC_DIR,
)
from sitepress._errors import ConfigError

from .models import DelimiterConfig, SiteConfig

_DIRECTORY_KEYS = {
    "content_dir": CONTENT_DIR,
    "layout_dir": LAYOUT_DIR,
    "static_dir": STATIC_DIR,
    "output_dir": OUTPUT_DIR,
}
_KNOWN_KEYS = {*_DIRECTORY_KEYS, "delimiters", "pygments_style", "redirects"}


def load_site_config(root: Path) -> SiteConfig:
    """Load the configuration of the site rooted at ``root``.

    A missing ``site.yaml`` yields the defaults: ``content``, ``layout``,
    ``static`` and ``public`` directories below ``root`` and ``<%``/``%>``
    delimiters.

    Parameters
    ----------
    root : Path
        Site directory.

    Returns
    -------
    SiteConfig
        Configuration with every directory resolved to an absolute path.

    Raises
    ------
    ConfigError
        If the file is not valid YAML, is not a mapping, has unknown keys,
        holds values of the wrong type, or declares a redirect from a relative
        path.

    Examples
    --------
    >>> from pathlib import Path
    >>> config = load_site_config(Path("site"))  # doctest: +SKIP
    >>> config.content_dir.name  # doctest: +SKIP
    'content'
    """
    root = root.absolute()
    raw = _read_config(root / CONFIG_FILENAME)
    unknown = sorted(set(raw) - _KNOWN_KEYS)
    if unknown:
        msg = f"{CONFIG_FILENAME}: unknown keys: {', '.join(unknown)}"
        raise ConfigError(msg)

    directories = {
        key: root / _require_str(raw, key, default)
        for key, default in _DIRECTORY_KEYS.items()
    }
    return SiteConfig(
        root=root,
        delimiters=_build_delimiters(raw.get("delimiters")),
        pygments_style=_require_str(raw, "pygments_style", "monokai"),
        redirects=_build_redirects(raw.get("redirects")),
        **directories,
    )


def _read_config(path: Path) -> dict[str, typ.Any]:
    if not path.exists():
        return {}
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        with path.open("r", encoding="utf-8") as handle:
            loaded = loader.load(handle) or {}
    except YAMLError as exc:
        msg = f"{path}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(loaded, dict):
        msg = f"{path}: top-level YAML structure must be a mapping."
        raise ConfigError(msg)
    return dict(loaded)


def _require_str(raw: typ.Mapping[str, typ.Any], key: str, default: str) -> str:
    value = raw.get(key, default)
    if not isinstance(value, str) or not value:
        msg = f"{CONFIG_FILENAME}: '{key}' must be a non-empty string."
        raise ConfigError(msg)
    return value


def _build_delimiters(raw: typ.Any) -> DelimiterConfig:
    match raw:
        case None:
            return DelimiterConfig()
        case dict():
            defaults = DelimiterConfig()
            delimiters = DelimiterConfig(
                left=_require_str(raw, "left", defaults.left),
                right=_require_str(raw, "right", defaults.right),
            )
        case _:
            msg = f"{CONFIG_FILENAME}: 'delimiters' must be a mapping."
            raise ConfigError(msg)
    if delimiters.left == delimiters.right:
        msg = f"{CONFIG_FILENAME}: left and right delimiters must differ."
        raise ConfigError(msg)
    return delimiters


def _build_redirects(raw: typ.Any) -> dict[str, str]:
    """Return the ``{source path: target URL}`` redirects of ``site.yaml``."""
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        msg = f"{CONFIG_FILENAME}: 'redirects' must be a mapping."
        raise ConfigError(msg)
    redirects: dict[str, str] = {}
    for source, target in raw.items():
        if not isinstance(source, str) or not source.startswith("/"):
            msg = f"{CONFIG_FILENAME}: redirect {source!r} must start with '/'."
            raise ConfigError(msg)
        if not isinstance(target, str) or not target:
            msg = f"{CONFIG_FILENAME}: redirect {source!r} needs a target string."
            raise ConfigError(msg)
        redirects[source] = target
    return redirects


__all__ = ["load_site_config"]
