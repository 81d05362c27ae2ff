"""Timestamp helpers shared by the layout resolver and page processor."""

from __future__ import annotations

import datetime as dt
import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path

EPOCH = dt.datetime.fromtimestamp(0, dt.UTC)


def file_mod_time(path: Path) -> dt.datetime:
    """Return the modification time of ``path`` as an aware UTC datetime."""
    return dt.datetime.fromtimestamp(path.stat().st_mtime, dt.UTC)


def parse_rfc3339(value: str) -> dt.datetime | None:
    """Parse an RFC 3339 timestamp, returning ``None`` when it is invalid.

    The UTC offset is mandatory; naive timestamps and bare dates are
    rejected.

    Examples
    --------
    >>> parse_rfc3339("2024-05-01T10:00:00Z").isoformat()
    '2024-05-01T10:00:00+00:00'
    >>> parse_rfc3339("2024-05-01") is None
    True
    """
    sanitized = value.strip()
    if "T" not in sanitized.upper():
        return None
    if sanitized[-1:] in ("Z", "z"):
        sanitized = sanitized[:-1] + "+00:00"
    try:
        parsed = dt.datetime.fromisoformat(sanitized)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed


__all__ = ["EPOCH", "file_mod_time", "parse_rfc3339"]
