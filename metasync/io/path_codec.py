"""Reversible encoding of names into filesystem-safe path components.

Responsibilities:
- Normalize single paths and ordered path parts into one platform path.
- Percent-encode names so they are legal on all major operating systems,
  while keeping templating characters (`{}`, `[]`, `@`) and spaces legible.
- Reverse filename encoding for names read back from disk.
"""

from __future__ import annotations

import os
from typing import Sequence, Union
from urllib.parse import quote, unquote

PathSegment = Union[str, Sequence[Union[str, None]], None]

STAR_MARKER = "_STAR_"

# Characters `encodeURIComponent` leaves alone besides ASCII alphanumerics.
_UNRESERVED = "-_.!~*'()"

_FILENAME_RESTORES = (
    ("%20", " "),
    ("%7B", "{"),
    ("%7D", "}"),
    ("%5B", "["),
    ("%5D", "]"),
    ("%40", "@"),
)
_PATH_RESTORES = _FILENAME_RESTORES + (
    ("%2F", "/"),
    ("%5C", "\\"),
)


def normalize_path(path: PathSegment) -> str:
    """Join path parts with the platform separator and normalize the result.

    `None` and empty parts are treated as empty strings and contribute nothing
    to the joined path. An empty path normalizes to `"."` so callers never
    write to the filesystem root by accident.
    """

    if path is None or isinstance(path, str):
        parts = [path or ""]
    else:
        parts = [part or "" for part in path]
    joined = os.sep.join(part for part in parts if part)
    return os.path.normpath(joined or ".")


def _percent_encode(value: str) -> str:
    """Percent-encode a string and replace `*` with the star marker."""

    return quote(value, safe=_UNRESERVED).replace("*", STAR_MARKER)


def _restore(encoded: str, restores: tuple[tuple[str, str], ...]) -> str:
    for escaped, literal in restores:
        encoded = encoded.replace(escaped, literal)
    return encoded


def encode_path(path: PathSegment) -> str:
    """Return an OS-safe path, keeping directory separators intact."""

    if path is None or isinstance(path, str):
        value = path or ""
    else:
        value = normalize_path(path)
    return _restore(_percent_encode(value), _PATH_RESTORES)


def encode_filename(name: str) -> str:
    """Return an OS-safe filename; separators are escaped, not restored."""

    return _restore(_percent_encode(name or ""), _FILENAME_RESTORES)


def decode_filename(name: str) -> str:
    """Reverse `encode_filename`."""

    return unquote(name).replace(STAR_MARKER, "*")
