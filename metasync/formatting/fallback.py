"""Formatter selection with graceful degradation.

Responsibilities:
- Route content to the AMPscript beautifier or the general formatter.
- Resolve project style options into a caller-owned `FormatterState`.
- Recover from formatter failures by returning the original content and
  writing an `.error.log` sidecar next to the target artifact.
"""

from __future__ import annotations

import os
from pathlib import Path
import re
from typing import Callable

from ..errors import AmpSyntaxError, StyleConfigError
from ..io.path_codec import PathSegment, normalize_path
from ..telemetry.logger import log_event
from .amp import AmpBeautifier, contains_ampscript
from .filetypes import AMP_FILE_TYPE, normalize_file_type, parser_for
from .general import GeneralFormatter
from .style import FormatterState, resolve_style_options

SidecarWriter = Callable[[PathSegment, str, str, str], bool]

REMEDIATION_COMMAND = "metasync init-style"
SIDECAR_SUFFIX = ".error"
SIDECAR_EXTENSION = "log"

_COMPONENT = "formatter"
_ANSI_ESCAPE_PATTERN = re.compile(
    r"[\u001B\u009B][\[()#;?]*(?:[0-9]{1,4}(?:;[0-9]{0,4})*)?[0-9A-ORZcf-nqry=><]"
)


def strip_ansi(text: str) -> str:
    """Remove terminal color/control escape sequences from `text`."""

    return _ANSI_ESCAPE_PATTERN.sub("", text)


def _target_path(directory: PathSegment, filename: str, file_type: str) -> str:
    if directory is None or isinstance(directory, str):
        parts = [directory or ""]
    else:
        parts = list(directory)
    return normalize_path([*parts, f"{filename}.{file_type}"])


class FormatterFallback:
    """Choose a beautifier per file type and never let formatting fail a write."""

    def __init__(
        self,
        *,
        project_root: Path | None = None,
        general: GeneralFormatter | None = None,
        amp: AmpBeautifier | None = None,
        sidecar_writer: SidecarWriter | None = None,
    ) -> None:
        """Initialize formatter collaborators.

        Args:
            project_root: Directory probed for the style file; defaults to the
                working directory at resolution time.
            general: General formatter dispatcher.
            amp: AMPscript beautifier.
            sidecar_writer: Callable `(directory, name, ext, content) -> bool`
                used to persist failure diagnostics.
        """

        self.project_root = project_root
        self.general = general or GeneralFormatter()
        self.amp = amp or AmpBeautifier()
        self.sidecar_writer = sidecar_writer

    def init_formatter(self, state: FormatterState, file_type: str = "html") -> bool:
        """Resolve style options for `file_type` into `state`.

        Returns whether options are available. Unknown file types raise
        `UnsupportedFileTypeError` so misconfigured callers fail at startup.
        """

        normalized = normalize_file_type(file_type)
        parser_for(normalized)
        try:
            return self._ensure_resolved(state, normalized)
        except StyleConfigError:
            return False

    def format(
        self,
        state: FormatterState,
        file_type: str,
        content: str,
        directory: PathSegment,
        filename: str,
        sidecar_writer: SidecarWriter | None = None,
    ) -> str:
        """Return beautified `content`, or `content` unchanged on any failure.

        `sidecar_writer` overrides the constructor writer for this call, so one
        formatter can serve stores with different filesystems.
        """

        normalized = normalize_file_type(file_type)
        if normalized == AMP_FILE_TYPE:
            return self.beautify_amp(content)
        if state.is_failed:
            return content

        parser_name = "unknown"
        try:
            parser = parser_for(normalized)
            parser_name = parser.name
            if not self._ensure_resolved(state, normalized):
                return content
            if contains_ampscript(content):
                # the general formatter would reject embedded AMPscript as bad syntax
                return self.beautify_amp(content)
            return self.general.format(content, parser, state.options)
        except Exception as exc:
            self._record_failure(
                directory,
                filename,
                normalized,
                parser_name,
                exc,
                sidecar_writer or self.sidecar_writer,
            )
            return content

    def beautify_amp(self, content: str) -> str:
        """Beautify AMPscript, returning `content` unchanged when it is malformed."""

        try:
            return self.amp.beautify(content)
        except AmpSyntaxError as exc:
            log_event("DEBUG", _COMPONENT, "ampscript_skipped", str(exc))
            return content

    def _ensure_resolved(self, state: FormatterState, file_type: str) -> bool:
        if state.is_failed:
            return False
        if not state.needs_resolution(file_type):
            return True

        project_root = self.project_root or Path(os.getcwd())
        try:
            resolved = resolve_style_options(project_root, file_type)
        except StyleConfigError as exc:
            state.mark_failed(file_type, str(exc))
            log_event(
                "ERROR",
                _COMPONENT,
                "style_config_invalid",
                f"Cannot apply auto-formatting to your code: {exc}",
            )
            raise

        if resolved is None:
            reason = (
                "No .prettierrc found in your project directory. "
                f"Please run '{REMEDIATION_COMMAND}' to create it"
            )
            state.mark_failed(file_type, reason)
            log_event(
                "ERROR",
                _COMPONENT,
                "style_config_missing",
                f"Cannot apply auto-formatting to your code: {reason}",
                project_root=project_root,
            )
            return False

        options, source_path = resolved
        state.mark_resolved(file_type, options, source_path)
        log_event("DEBUG", _COMPONENT, "style_config_resolved", file_type=file_type, source=source_path)
        return True

    def _record_failure(
        self,
        directory: PathSegment,
        filename: str,
        file_type: str,
        parser_name: str,
        exc: Exception,
        sidecar_writer: SidecarWriter | None,
    ) -> None:
        target = _target_path(directory, filename, file_type)
        message = strip_ansi(str(exc))
        log_event("DEBUG", _COMPONENT, "format_failed", f"Potential code issue found in {target}")
        log_event("DEBUG", _COMPONENT, "format_failed_detail", message, parser=parser_name)

        if sidecar_writer is None:
            return
        report = f"Error Log\nParser: {parser_name}\n{message}"
        try:
            written = sidecar_writer(directory, filename + SIDECAR_SUFFIX, SIDECAR_EXTENSION, report)
        except Exception as sidecar_exc:
            log_event("ERROR", _COMPONENT, "sidecar_failed", str(sidecar_exc), target=target)
            return
        if not written:
            log_event("ERROR", _COMPONENT, "sidecar_failed", "Sidecar write reported failure.", target=target)
