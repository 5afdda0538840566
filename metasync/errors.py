"""Domain exceptions for artifact persistence and CLI diagnostics."""

from __future__ import annotations


class MetasyncError(RuntimeError):
    """Base class for errors raised by metasync components."""


class ArtifactReadError(MetasyncError):
    """Raised when a stored artifact cannot be read or parsed.

    The original error code (errno name or exception class) and message are
    preserved so callers can log or branch on them.
    """

    def __init__(self, *, code: str, detail: str, path: str | None = None) -> None:
        """Initialize a read error with the underlying code and message."""

        super().__init__(f"{code}: {detail}")
        self.code = code
        self.detail = detail
        self.path = path


class DirectoryWalkError(MetasyncError):
    """Raised when a directory tree cannot be enumerated."""


class UnsupportedFileTypeError(MetasyncError, ValueError):
    """Raised for file types missing from the formatter parser table."""

    def __init__(self, file_type: str) -> None:
        super().__init__(f"Unsupported file type `{file_type}` for formatting.")
        self.file_type = file_type


class StyleConfigError(MetasyncError, ValueError):
    """Raised when a project style configuration file is malformed."""


class AmpSyntaxError(MetasyncError, ValueError):
    """Raised when AMPscript blocks or control structures are unbalanced."""


class CommandError(MetasyncError):
    """Raised by CLI commands to render stage-aware diagnostics."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped command error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
