"""Path helpers: home expansion, search-path lookup and string hashing."""

from __future__ import annotations

import os
from collections.abc import Iterable

_MASK64 = (1 << 64) - 1
_SIGN64 = 1 << 63


def _to_int64(value: int) -> int:
    value &= _MASK64
    return value - (1 << 64) if value & _SIGN64 else value


def expand_home(path: str, home: str) -> str:
    """Turn ``~/name`` into a path under *home*; absolute paths pass through.

    Raises ValueError for any other form, including ``~user`` paths.
    """
    if path.startswith("~"):
        if not path.startswith("~/"):
            raise ValueError(f"unsupported home path: {path!r}")
        return f"{home}/{path[2:]}"
    if path.startswith("/"):
        return path
    raise ValueError(f"not a rooted path: {path!r}")


def find_in_path(filename: str, directories: Iterable[str]) -> str | None:
    """Find *filename* in the current directory, then in each directory in order.

    Returns the first path that exists, or None.
    """
    if os.path.exists(filename):
        return filename
    for directory in directories:
        candidate = f"{directory}/{filename}"
        if os.path.exists(candidate):
            return candidate
    return None


def get_full_path(
    filename: str, home: str, directories: Iterable[str]
) -> str | None:
    """Resolve *filename* from a known prefix or by searching *directories*.

    Names beginning with ``~`` or ``/`` are expanded directly; anything else
    is looked up. Returns None when the name cannot be resolved.
    """
    if filename.startswith(("~", "/")):
        try:
            return expand_home(filename, home)
        except ValueError:
            return None
    return find_in_path(filename, directories)


def strip_directory(name: str) -> str:
    """Return the part of *name* after its last slash."""
    return name.rpartition("/")[2]


def hash_string(s: str) -> int:
    """Hash a string the way register names are hashed: a non-negative 64-bit value."""
    value = 0
    for byte in s.encode("utf-8"):
        signed = byte - 256 if byte > 127 else byte
        value = _to_int64(31 * value + signed)
    if value < 0:
        value = _to_int64(-value)
    return value