"""Artifact storage facade.

Responsibilities:
- Persist JSON and text artifacts under OS-safe directory and file names.
- Optionally beautify text artifacts before they are written.
- Read artifacts back and copy files between locations.
- Offer awaitable variants that run the blocking operation in a worker thread.

The awaitable variants use `asyncio.to_thread`, so they occupy a thread of the
default executor while the blocking call runs; the event loop itself stays
single-threaded.

Writes never raise: failures are logged and reported as `False`. Reads raise
`ArtifactReadError` carrying the original error code and message.
"""

from __future__ import annotations

import asyncio
import errno
import json
import os
from pathlib import Path
import traceback
from typing import Any, Mapping

from ..errors import ArtifactReadError
from ..formatting.fallback import FormatterFallback
from ..formatting.style import FormatterState
from ..models.datatypes import (
    COPY_STATUS_FAILED,
    COPY_STATUS_OK,
    COPY_STATUS_SKIPPED,
    CopyResult,
)
from ..telemetry.logger import log_event
from .filesystem import FileSystem, LocalFileSystem
from .path_codec import PathSegment, encode_filename, encode_path, normalize_path

_COMPONENT = "artifact_store"
_JSON_EXTENSION = ".json"
_JSON_INDENT = 4
SKIPPED_COPY_MESSAGE = "deleted from repository"


def apply_template_variables(content: str, template_variables: Mapping[str, object]) -> str:
    """Replace every literal occurrence of each value with `{{{key}}}`."""

    for key, value in template_variables.items():
        if value is None or value == "":
            continue
        content = content.replace(str(value), "{{{" + key + "}}}")
    return content


def _error_code(exc: Exception) -> str:
    """Return the errno name for OS errors, otherwise the exception class name."""

    if isinstance(exc, OSError) and exc.errno is not None:
        return errno.errorcode.get(exc.errno, str(exc.errno))
    return type(exc).__name__


class ArtifactStore:
    """Filesystem-backed artifact store with optional formatting."""

    def __init__(
        self,
        filesystem: FileSystem | None = None,
        *,
        formatter: FormatterFallback | None = None,
        formatter_state: FormatterState | None = None,
        project_root: Path | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            filesystem: Filesystem capability; defaults to the local disk.
            formatter: Formatter used by `write_text(..., formatted=True)`.
            formatter_state: Style resolution state owned by this store.
            project_root: Directory holding the project style file.
        """

        self.filesystem = filesystem or LocalFileSystem()
        self.formatter_state = formatter_state or FormatterState()
        self.formatter = formatter or FormatterFallback(project_root=project_root)

    @staticmethod
    def resolve_directory(directory: PathSegment) -> str:
        """Return the sanitized, normalized form of `directory`."""

        return encode_path(normalize_path(directory))

    def resolve_path(self, directory: PathSegment, name: str, ext: str) -> str:
        """Return the sanitized file path an artifact is stored under."""

        return os.path.join(self.resolve_directory(directory), f"{encode_filename(name)}.{ext}")

    def init_formatter(self, file_type: str = "html") -> bool:
        """Resolve style options for `file_type` before the first formatted write."""

        return self.formatter.init_formatter(self.formatter_state, file_type)

    def write_json(self, directory: PathSegment, name: str, content: Any) -> bool:
        """Save `content` as `<directory>/<name>.json` and return success."""

        try:
            payload = json.dumps(content, indent=_JSON_INDENT, ensure_ascii=False) + "\n"
        except (TypeError, ValueError) as exc:
            log_event("ERROR", _COMPONENT, "write_failed", f"ArtifactStore.write_json:: error | {exc}")
            return False
        return self._write(directory, name, "json", payload, "utf-8")

    def write_text(
        self,
        directory: PathSegment,
        name: str,
        ext: str,
        content: str,
        formatted: bool = False,
        *,
        template_variables: Mapping[str, object] | None = None,
        encoding: str = "utf-8",
    ) -> bool:
        """Save text content as `<directory>/<name>.<ext>` and return success.

        With `formatted`, content is beautified first; formatting failures
        leave the content unchanged and write an `.error.log` sidecar.
        Template variables are applied after formatting.
        """

        if formatted:
            content = self.formatter.format(
                self.formatter_state, ext, content, directory, name, sidecar_writer=self.write_text
            )
        if template_variables:
            content = apply_template_variables(content, template_variables)
        return self._write(directory, name, ext, content, encoding)

    def read_json(self, directory: PathSegment, name: str, sanitize_path: bool = True) -> Any:
        """Load and parse `<directory>/<name>.json`.

        Args:
            directory: Directory or ordered directory parts.
            name: File name with or without the `.json` suffix.
            sanitize_path: Encode directory and name like writes do; disable
                for callers that already hold an encoded path.

        Raises:
            ArtifactReadError: If the file cannot be read or parsed.
        """

        if sanitize_path:
            resolved_directory = self.resolve_directory(directory)
            name = encode_filename(name)
        else:
            resolved_directory = normalize_path(directory)
        if name.endswith(_JSON_EXTENSION):
            name = name[: -len(_JSON_EXTENSION)]
        path = os.path.join(resolved_directory, name + _JSON_EXTENSION)
        try:
            return json.loads(self.filesystem.read_text(path))
        except (OSError, ValueError) as exc:
            raise self._read_error("read_json", path, exc) from exc

    def read_text(
        self,
        directory: PathSegment,
        name: str,
        ext: str,
        encoding: str = "utf-8",
    ) -> str:
        """Load `<directory>/<name>.<ext>` as text.

        Raises:
            ArtifactReadError: If the file cannot be read or decoded.
        """

        path = self.resolve_path(directory, name, ext)
        try:
            return self.filesystem.read_text(path, encoding=encoding)
        except (OSError, ValueError) as exc:
            raise self._read_error("read_text", path, exc) from exc

    def copy(self, source: str | os.PathLike[str], destination: str | os.PathLike[str]) -> CopyResult:
        """Copy a file, reporting a vanished source as `skipped`."""

        source_text = os.fspath(source)
        try:
            self.filesystem.copy(source_text, os.fspath(destination))
        except FileNotFoundError as exc:
            if not self.filesystem.path_exists(source_text):
                log_event("DEBUG", _COMPONENT, "copy_skipped", source=source_text)
                return CopyResult(COPY_STATUS_SKIPPED, source_text, SKIPPED_COPY_MESSAGE)
            return self._copy_failed(source_text, exc)
        except OSError as exc:
            return self._copy_failed(source_text, exc)
        return CopyResult(COPY_STATUS_OK, source_text)

    async def awrite_json(self, directory: PathSegment, name: str, content: Any) -> bool:
        return await asyncio.to_thread(self.write_json, directory, name, content)

    async def awrite_text(
        self,
        directory: PathSegment,
        name: str,
        ext: str,
        content: str,
        formatted: bool = False,
        *,
        template_variables: Mapping[str, object] | None = None,
        encoding: str = "utf-8",
    ) -> bool:
        return await asyncio.to_thread(
            self.write_text,
            directory,
            name,
            ext,
            content,
            formatted,
            template_variables=template_variables,
            encoding=encoding,
        )

    async def aread_json(self, directory: PathSegment, name: str, sanitize_path: bool = True) -> Any:
        return await asyncio.to_thread(self.read_json, directory, name, sanitize_path)

    async def aread_text(
        self, directory: PathSegment, name: str, ext: str, encoding: str = "utf-8"
    ) -> str:
        return await asyncio.to_thread(self.read_text, directory, name, ext, encoding)

    async def acopy(
        self, source: str | os.PathLike[str], destination: str | os.PathLike[str]
    ) -> CopyResult:
        return await asyncio.to_thread(self.copy, source, destination)

    def _write(
        self,
        directory: PathSegment,
        name: str,
        ext: str,
        content: str,
        encoding: str,
    ) -> bool:
        resolved_directory = self.resolve_directory(directory)
        path = os.path.join(resolved_directory, f"{encode_filename(name)}.{ext}")
        try:
            self.filesystem.ensure_dir(resolved_directory)
            if self.filesystem.path_exists(path):
                log_event("DEBUG", _COMPONENT, "overwrite", f"Overwriting: {path}")
            self.filesystem.write_text(path, content, encoding=encoding)
        except (OSError, ValueError) as exc:
            log_event("ERROR", _COMPONENT, "write_failed", f"ArtifactStore.write:: error | {exc}", path=path)
            return False
        return True

    def _read_error(self, operation: str, path: str, exc: Exception) -> ArtifactReadError:
        error = ArtifactReadError(code=_error_code(exc), detail=str(exc), path=path)
        log_event("DEBUG", _COMPONENT, f"{operation}_trace", traceback.format_exc())
        log_event("ERROR", _COMPONENT, f"{operation}_failed", f"ArtifactStore.{operation}:: error | {error}")
        return error

    def _copy_failed(self, source: str, exc: OSError) -> CopyResult:
        log_event("DEBUG", _COMPONENT, "copy_failed", str(exc), source=source)
        return CopyResult(COPY_STATUS_FAILED, source, str(exc))
