"""Filesystem capability used by the artifact store.

Responsibilities:
- Describe the small set of filesystem operations the store depends on.
- Provide the local-disk implementation used in production.
"""

from __future__ import annotations

import os
from pathlib import Path
import shutil
from typing import Protocol


class FileSystem(Protocol):
    """Protocol for filesystem operations consumed by `ArtifactStore`."""

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """Return file content decoded with `encoding`."""

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """Write `content` to `path`, replacing existing content."""

    def ensure_dir(self, path: str) -> None:
        """Create `path` and all missing ancestors."""

    def path_exists(self, path: str) -> bool:
        """Return whether `path` exists."""

    def copy(self, source: str, destination: str) -> None:
        """Copy a file or directory tree, creating missing destination parents."""


class LocalFileSystem:
    """`FileSystem` implementation backed by the local disk."""

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        return Path(path).read_text(encoding=encoding)

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        Path(path).write_text(content, encoding=encoding)

    def ensure_dir(self, path: str) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def path_exists(self, path: str) -> bool:
        return os.path.exists(path)

    def copy(self, source: str, destination: str) -> None:
        source_path = Path(source)
        destination_path = Path(destination)
        if source_path.is_dir():
            shutil.copytree(source_path, destination_path, dirs_exist_ok=True)
            return
        destination_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source_path, destination_path)
