"""Depth-bounded directory enumeration.

Responsibilities:
- List the leaf directories below a root up to a depth bound.
- Offer blocking and awaitable entry points over one shared walk.

Only true leaves are emitted: a directory with qualifying subdirectories is
represented by its descendants, never by itself. Symlinked directories are
not followed.

The awaitable entry points run the walk through `asyncio.to_thread`, which
borrows a thread from the default executor for the duration of the call.
"""

from __future__ import annotations

import asyncio
import os
import traceback

from ..errors import DirectoryWalkError
from ..telemetry.logger import log_event

_COMPONENT = "directory_walker"


def _strip_root(path: str, root_length: int) -> str:
    """Remove the search root prefix and any leading separators."""

    return path[root_length:].lstrip("\\").lstrip("/")


def _subdirectories(directory: str) -> list[str]:
    with os.scandir(directory) as entries:
        names = sorted(
            entry.name for entry in entries if entry.is_dir(follow_symlinks=False)
        )
    return [os.path.join(directory, name) for name in names]


def _walk(directory: str, depth: int, include_root: bool, root_length: int) -> list[str]:
    children: list[str] = []
    subdirectories = _subdirectories(directory)
    if depth > 0:
        for subdirectory in subdirectories:
            children.extend(_walk(subdirectory, depth - 1, include_root, root_length))
    if children:
        return children
    if include_root:
        return [directory]
    return [_strip_root(directory, root_length)]


class DirectoryWalker:
    """List leaf directories below a root, blocking or awaitable."""

    def walk(self, root: str, max_depth: int, include_root: bool = False) -> list[str]:
        """Return leaf directories below `root` or raise `DirectoryWalkError`.

        Args:
            root: Directory to start from.
            max_depth: Remaining levels to descend; `0` lists only `root`.
            include_root: Keep full paths instead of paths relative to `root`.
        """

        if max_depth < 0:
            raise ValueError("`max_depth` must be zero or a positive integer.")
        root = os.fspath(root)
        try:
            return _walk(root, max_depth, include_root, len(root))
        except OSError as exc:
            raise DirectoryWalkError(f"Cannot list directories below `{root}`: {exc}") from exc

    def list(self, root: str, max_depth: int, include_root: bool = False) -> list[str]:
        """Like `walk`, but failures are logged and yield an empty list."""

        try:
            return self.walk(root, max_depth, include_root)
        except DirectoryWalkError as exc:
            log_event("ERROR", _COMPONENT, "list_failed", str(exc), root=root)
            log_event("DEBUG", _COMPONENT, "list_failed_trace", traceback.format_exc())
            return []

    async def alist(self, root: str, max_depth: int, include_root: bool = False) -> list[str]:
        """Awaitable variant of `list` running the walk in a worker thread."""

        return await asyncio.to_thread(self.list, root, max_depth, include_root)

    async def awalk(self, root: str, max_depth: int, include_root: bool = False) -> list[str]:
        """Awaitable variant of `walk`."""

        return await asyncio.to_thread(self.walk, root, max_depth, include_root)
